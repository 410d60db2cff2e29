from __future__ import annotations

from typing import Dict, List


class IdentifierBatcher:
    """
    Collect the identifiers that need a Wikidata lookup while articles are
    normalized, so each category is resolved with one batch request instead
    of one request per article.

    Each category keeps distinct, non-empty ids in first-seen order.
    """

    def __init__(self):
        # dicts used as ordered sets
        self._pmcids: Dict[str, None] = {}
        self._issns: Dict[str, None] = {}
        self._subject_ids: Dict[str, None] = {}

    @staticmethod
    def _add(bucket: Dict[str, None], value: str) -> None:
        if value:
            bucket.setdefault(value, None)

    def add_pmcid(self, pmcid: str) -> None:
        self._add(self._pmcids, pmcid)

    def add_issn(self, issn: str) -> None:
        self._add(self._issns, issn)

    def add_subject(self, mesh_id: str) -> None:
        self._add(self._subject_ids, mesh_id)

    @property
    def pmcids(self) -> List[str]:
        return list(self._pmcids)

    @property
    def issns(self) -> List[str]:
        return list(self._issns)

    @property
    def subject_ids(self) -> List[str]:
        return list(self._subject_ids)

    def __len__(self) -> int:
        return len(self._pmcids) + len(self._issns) + len(self._subject_ids)
