from __future__ import annotations

import os
from collections import Counter
from typing import Optional

from OAReport import pubmed_client as pubmed, wikidata_client as wd
from OAReport.batching import IdentifierBatcher
from OAReport.config import (
    DEFAULT_LICENSE_FILE,
    DEFAULT_OUTPUT_FILE,
    DEFAULT_OUT_DIR,
    SEARCH_TERM,
    SEARCH_RETMAX,
)
from OAReport.exceptions import (
    FETCH_ERRORS,
    FILE_IO_ERRORS,
    FILE_READ_ERRORS,
    FILE_WRITE_ERRORS,
    RESOLUTION_ERRORS,
    SEARCH_ERRORS,
)
from OAReport.io_utils import read_ncbi_api_key
from OAReport.licenses import load_license_table_with_report
from OAReport.log_utils import logger, LogSource, LogCategory
from OAReport.models import ResolutionMaps
from OAReport.normalize import normalize_articles
from OAReport.report import write_report


def resolve_worklists(worklists: IdentifierBatcher) -> ResolutionMaps:
    """
    Resolve the collected identifiers against Wikidata with one batch request
    per category: PMCIDs, ISSNs, and MeSH subjects (which yields both the drug
    and the disease map). Any failure propagates.
    """
    pmcid_items = wd.pmcids_to_items(worklists.pmcids)
    issn_items = wd.issns_to_items(worklists.issns)
    drug_items, disease_items = wd.mesh_ids_to_items(worklists.subject_ids)
    return ResolutionMaps(
        pmcid_items=pmcid_items,
        issn_items=issn_items,
        drug_items=drug_items,
        disease_items=disease_items,
    )


def _discard_partial_output(path: str) -> None:
    try:
        if os.path.exists(path):
            os.remove(path)
    except FILE_IO_ERRORS as e:
        logger.warn(f"Could not remove partial report {path}: {e}", source=LogSource.REPORT,
                    category=LogCategory.ERROR)


def main(license_path: str = DEFAULT_LICENSE_FILE, output_path: str = DEFAULT_OUTPUT_FILE,
         out_dir: Optional[str] = None, term: str = SEARCH_TERM, retmax: int = SEARCH_RETMAX) -> int:
    """
    Run the report end to end: load the license list, search and fetch
    PubMed, normalize the articles, resolve identifiers on Wikidata, and
    write the report.

    Any failure along the way stops the run before the report is written.
    Returns an exit code suitable for use as a command-line entry point.
    """
    if out_dir is None:
        out_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), DEFAULT_OUT_DIR)
    logger.set_log_file(os.path.join(out_dir, "run.log"))
    logger.step("OAReport run started", category=LogCategory.PLAN)

    try:
        try:
            table, skipped = load_license_table_with_report(license_path)
        except FILE_READ_ERRORS as e:
            logger.error(f"Error reading license file: {e}", source=LogSource.LICENSE, category=LogCategory.ERROR)
            return 2
        logger.success(f"License table loaded: {len(table)} identifier(s), "
                       f"{sum(skipped.values())} line(s) skipped", source=LogSource.LICENSE, category=LogCategory.PLAN)

        api_key = read_ncbi_api_key()
        if not api_key:
            logger.warn("NCBI API key not found; the fetch step requires one", category=LogCategory.PLAN)

        try:
            articles = pubmed.search_and_fetch(term, api_key, retmax=retmax)
        except SEARCH_ERRORS + FETCH_ERRORS as e:
            logger.error(f"PubMed search/fetch failed: {e}", source=LogSource.PUBMED, category=LogCategory.ERROR)
            return 2

        result = normalize_articles(articles, table)
        logger.info(f"We got information on {result.accepted_count} records "
                    f"({result.dropped_count} dropped)", category=LogCategory.ARTICLE)
        for reason, count in Counter(reason for _, reason in result.dropped).items():
            logger.info(f"Dropped ({reason.value}): {count}", category=LogCategory.SKIP)
        logger.info(f"{len(result.worklists)} identifier(s) queued for Wikidata", source=LogSource.WIKIDATA,
                    category=LogCategory.PLAN)

        try:
            maps = resolve_worklists(result.worklists)
        except RESOLUTION_ERRORS as e:
            logger.error(f"Wikidata lookup failed: {e}", source=LogSource.WIKIDATA, category=LogCategory.ERROR)
            return 2

        try:
            rows = write_report(output_path, result.records, maps)
        except FILE_WRITE_ERRORS as e:
            logger.error(f"Error writing report: {e}", source=LogSource.REPORT, category=LogCategory.ERROR)
            _discard_partial_output(output_path)
            return 2
        logger.success(f"Report written: {output_path} ({rows} row(s))", source=LogSource.REPORT,
                       category=LogCategory.SAVE)

        logger.step("Run complete", category=LogCategory.PLAN)
        logger.info(f"Log file: {logger.log_file_path or 'n/a'}", category=LogCategory.PLAN)
        return 0
    finally:
        logger.close()


if __name__ == "__main__":
    raise SystemExit(main())
