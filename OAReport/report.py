from __future__ import annotations

from typing import Dict, Iterable, List

from .config import CC_LICENSE_ITEM_IDS, REPORT_COLUMNS
from .log_utils import logger, LogSource, LogCategory
from .models import Record, ResolutionMaps, Subject

REPORT_HEADER = "\t".join(REPORT_COLUMNS) + "\n"


def license_item(label: str) -> str:
    """
    Map a license label to its Wikidata item, or an empty string for labels
    outside the known Creative Commons set.
    """
    return CC_LICENSE_ITEM_IDS.get(label, "")


def format_subjects(subjects: Iterable[Subject], drug_items: Dict[str, str],
                    disease_items: Dict[str, str]) -> str:
    """
    Join subject names with "; ", annotating each subject that resolved to a
    drug and/or disease item, e.g. "Rett Syndrome (Q1, Q2); Brain".
    """
    parts: List[str] = []
    for subject in subjects:
        items = [item for item in (drug_items.get(subject.mesh_id, ""),
                                   disease_items.get(subject.mesh_id, "")) if item]
        if items:
            parts.append(f"{subject.name} ({', '.join(items)})")
        else:
            parts.append(subject.name)
    return "; ".join(parts)


def format_row(record: Record, pmcid_items: Dict[str, str], issn_items: Dict[str, str],
               drug_items: Dict[str, str], disease_items: Dict[str, str]) -> str:
    """
    Render one Record as a tab-separated, newline-terminated report row in
    REPORT_COLUMNS order.
    """
    fields = [
        record.title,
        pmcid_items.get(record.pmcid, ""),
        record.pmid,
        record.pmcid,
        record.license,
        license_item(record.license),
        format_subjects(record.main_subjects, drug_items, disease_items),
        record.publication_date,
        record.publication,
        record.issn,
        issn_items.get(record.issn, ""),
        record.publication_type,
    ]
    return "\t".join(fields) + "\n"


def _warn_unknown_licenses(records: List[Record]) -> None:
    # once per label, not once per record
    unknown = sorted({r.license for r in records if r.license not in CC_LICENSE_ITEM_IDS})
    for label in unknown:
        logger.warn(f"No Wikidata item for license {label!r}; License Item left empty",
                    source=LogSource.REPORT, category=LogCategory.SKIP)


def write_report(path: str, records: Iterable[Record], maps: ResolutionMaps) -> int:
    """
    Write the header and one row per Record, in order, to a tab-separated
    file. The header is written even when there are no Records.

    Returns the number of data rows written.
    """
    records = list(records)
    _warn_unknown_licenses(records)

    written = 0
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(REPORT_HEADER)
        for record in records:
            f.write(format_row(record, maps.pmcid_items, maps.issn_items,
                               maps.drug_items, maps.disease_items))
            written += 1
    return written
