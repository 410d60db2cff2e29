from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .config import DEFAULT_LICENSE_FILE
from .log_utils import logger, LogSource, LogCategory
from .models import LineSkipReason

LicenseTable = Dict[str, str]

# oa_package/87/30/PMC17774.tar.gz <TAB> citation <TAB> PMC17774 <TAB> PMID:11056661 <TAB> NO-CC CODE
_LICENSE_FIELD_COUNT = 5


@dataclass(frozen=True)
class LicenseLine:
    """
    The outcome of reading one line of the NCBI open access file list: either
    the identifiers and license it registers, or the reason it was skipped.
    """
    pmid: str = ""
    pmcid: str = ""
    license: str = ""
    skip_reason: Optional[LineSkipReason] = None

    @property
    def skipped(self) -> bool:
        return self.skip_reason is not None


def _extract_tagged_id(field: str) -> str:
    """
    Return the value of a "TAG:value" field such as "PMID:11056661", or an
    empty string when the field is empty or not in that two-part form.
    """
    parts = field.split(":")
    if len(parts) != 2:
        return ""
    return parts[1]


def parse_license_line(line: str) -> LicenseLine:
    """
    Split one tab-separated line of the open access file list.

    Lines that do not have exactly five fields (the generation-date header,
    blank or truncated lines) are reported as skipped rather than raising.
    """
    parts = line.split("\t")
    if len(parts) != _LICENSE_FIELD_COUNT:
        return LicenseLine(skip_reason=LineSkipReason.FIELD_COUNT)
    return LicenseLine(
        pmid=_extract_tagged_id(parts[3]),
        pmcid=parts[2],
        license=parts[4].rstrip("\r\n"),
    )


def load_license_table_with_report(path: str = DEFAULT_LICENSE_FILE) -> Tuple[LicenseTable, Counter]:
    """
    Build the identifier -> license lookup from the open access file list and
    count the lines skipped per reason.

    Each accepted line registers its PMID (when present) and its PMCID (when
    non-empty), so an article can later be matched by either. Later lines win
    when an identifier repeats. A missing or unreadable file raises.
    """
    table: LicenseTable = {}
    skipped: Counter = Counter()
    # split on "\n" only; a stray "\r" inside a field must not break the line
    with open(path, "r", encoding="utf-8", newline="\n") as f:
        for line in f:
            parsed = parse_license_line(line)
            if parsed.skipped:
                skipped[parsed.skip_reason] += 1
                continue
            if parsed.pmid:
                table[parsed.pmid] = parsed.license
            if parsed.pmcid:
                table[parsed.pmcid] = parsed.license
            else:
                logger.debug(f"Line without PMCID: {line.rstrip()}", source=LogSource.LICENSE,
                             category=LogCategory.DEBUG)
    return table, skipped


def load_license_table(path: str = DEFAULT_LICENSE_FILE) -> LicenseTable:
    """
    Load the license lookup table, discarding malformed lines silently.
    """
    table, _ = load_license_table_with_report(path)
    return table


def resolve_license(pmid: str, pmcid: str, table: LicenseTable) -> Optional[str]:
    """
    Look up an article's license by PMID first, then by PMCID.

    Returns None when neither identifier is known, which means the article is
    excluded from the report.
    """
    if pmid and pmid in table:
        return table[pmid]
    if pmcid and pmcid in table:
        return table[pmcid]
    return None
