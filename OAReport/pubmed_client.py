from __future__ import annotations

import xml.etree.ElementTree as ElementTree
from typing import Any, Dict, List, Optional

from .config import (
    PUBMED_BASE,
    SEARCH_DB,
    SEARCH_RETMAX,
    HTTP_TIMEOUT_DEFAULT,
    HTTP_TIMEOUT_LONG,
)
from .exceptions import NUMERIC_ERRORS
from .http_utils import http_get_json, http_get_text
from .log_utils import logger, LogSource, LogCategory
from .models import (
    ArticleBody,
    ArticleDate,
    ArticleId,
    Journal,
    JournalIssue,
    MeshHeading,
    MeshTerm,
    PubDate,
    RawArticle,
    SearchResult,
)
from .text_utils import safe_get_nested

ESEARCH_URL = f"{PUBMED_BASE}/esearch.fcgi"
EFETCH_URL = f"{PUBMED_BASE}/efetch.fcgi"


def esearch(term: str, api_key: Optional[str] = None, retmax: int = SEARCH_RETMAX,
            db: str = SEARCH_DB) -> SearchResult:
    """
    Run an ESearch with history enabled and return the hit count, the first
    `retmax` ids, and the WebEnv/query_key pair for the follow-up EFetch.
    """
    params: Dict[str, Any] = {
        "db": db,
        "term": term,
        "retmax": retmax,
        "usehistory": "y",
        "retmode": "json",
    }
    if api_key:
        params["api_key"] = api_key

    data = http_get_json(ESEARCH_URL, params=params, timeout=HTTP_TIMEOUT_DEFAULT)
    result = data.get("esearchresult")
    if not isinstance(result, dict):
        raise ValueError(f"ESearch returned no result: {data.get('error') or data!r}")
    error = safe_get_nested(data, "esearchresult", "ERROR")
    if error:
        raise ValueError(f"ESearch error: {error}")

    webenv = result.get("webenv") or ""
    query_key = result.get("querykey") or ""
    if not webenv or not query_key:
        raise ValueError("ESearch response has no history handle (webenv/querykey)")

    return SearchResult(
        count=int(result.get("count") or 0),
        ids=list(result.get("idlist") or []),
        webenv=webenv,
        query_key=str(query_key),
    )


def efetch_history(webenv: str, query_key: str, api_key: Optional[str],
                   retmax: int = SEARCH_RETMAX, db: str = SEARCH_DB) -> List[RawArticle]:
    """
    Fetch the full PubMed records stored under an ESearch history handle and
    decode them into RawArticle objects.
    """
    if not api_key:
        raise ValueError("No API Key provided.")

    params = {
        "api_key": api_key,
        "db": db,
        "WebEnv": webenv,
        "query_key": query_key,
        "retmax": retmax,
        "retmode": "xml",
    }
    xml = http_get_text(EFETCH_URL, params=params, timeout=HTTP_TIMEOUT_LONG)
    return parse_pubmed_xml(xml)


def _xml_text(el: Optional[ElementTree.Element]) -> str:
    """
    Read the full text content of an XML element, including text inside
    inline markup such as <i> or <sup>, stripped of surrounding whitespace.
    """
    return "".join(el.itertext()).strip() if el is not None else ""


def _xml_int(el: Optional[ElementTree.Element]) -> int:
    """
    Read an integer element, treating missing or non-numeric content as 0.
    """
    text = _xml_text(el)
    if not text:
        return 0
    try:
        return int(text)
    except NUMERIC_ERRORS:
        return 0


def _parse_mesh_term(el: ElementTree.Element) -> MeshTerm:
    return MeshTerm(
        name=_xml_text(el),
        mesh_id=el.get("UI", ""),
        major_topic=el.get("MajorTopicYN", ""),
    )


def _parse_mesh_heading(el: ElementTree.Element) -> Optional[MeshHeading]:
    descriptor_el = el.find("DescriptorName")
    if descriptor_el is None:
        return None
    return MeshHeading(
        descriptor=_parse_mesh_term(descriptor_el),
        qualifiers=[_parse_mesh_term(q) for q in el.findall("QualifierName")],
    )


def _parse_journal(el: Optional[ElementTree.Element]) -> Journal:
    if el is None:
        return Journal()
    issue_el = el.find("JournalIssue")
    pub_date = PubDate()
    volume = issue = ""
    if issue_el is not None:
        volume = _xml_text(issue_el.find("Volume"))
        issue = _xml_text(issue_el.find("Issue"))
        pd_el = issue_el.find("PubDate")
        if pd_el is not None:
            # PubDate may hold <MedlineDate> instead of Year/Month; that reads as year 0
            pub_date = PubDate(
                year=_xml_int(pd_el.find("Year")),
                month=_xml_text(pd_el.find("Month")),
                day=_xml_int(pd_el.find("Day")),
            )
    return Journal(
        title=_xml_text(el.find("Title")),
        issn=_xml_text(el.find("ISSN")),
        iso_abbreviation=_xml_text(el.find("ISOAbbreviation")),
        issue=JournalIssue(volume=volume, issue=issue, pub_date=pub_date),
    )


def _parse_article_body(el: ElementTree.Element) -> ArticleBody:
    date_el = el.find("ArticleDate")
    article_date = ArticleDate()
    if date_el is not None:
        article_date = ArticleDate(
            year=_xml_int(date_el.find("Year")),
            month=_xml_int(date_el.find("Month")),
            day=_xml_int(date_el.find("Day")),
        )
    return ArticleBody(
        title=_xml_text(el.find("ArticleTitle")),
        publication_types=[_xml_text(pt) for pt in el.findall("PublicationTypeList/PublicationType")],
        journal=_parse_journal(el.find("Journal")),
        article_date=article_date,
    )


def _parse_pubmed_article(el: ElementTree.Element) -> Optional[RawArticle]:
    citation = el.find("MedlineCitation")
    if citation is None:
        return None
    headings = []
    for mh in citation.findall("MeshHeadingList/MeshHeading"):
        heading = _parse_mesh_heading(mh)
        if heading is not None:
            headings.append(heading)
    article_ids = [
        ArticleId(value=_xml_text(aid), id_type=aid.get("IdType", ""))
        for aid in el.findall("PubmedData/ArticleIdList/ArticleId")
    ]
    return RawArticle(
        pmid=_xml_text(citation.find("PMID")),
        article_bodies=[_parse_article_body(a) for a in citation.findall("Article")],
        mesh_headings=headings,
        article_ids=article_ids,
    )


def parse_pubmed_xml(xml: str) -> List[RawArticle]:
    """
    Decode an EFetch PubmedArticleSet document into RawArticle objects, in
    document order. Malformed XML raises ElementTree.ParseError.
    """
    # ElementTree does not expand external entities by default
    root = ElementTree.fromstring(xml)
    articles: List[RawArticle] = []
    for el in root.findall("PubmedArticle"):
        article = _parse_pubmed_article(el)
        if article is None:
            logger.warn("PubmedArticle without MedlineCitation; skipped", source=LogSource.PUBMED,
                        category=LogCategory.SKIP)
            continue
        articles.append(article)
    return articles


def search_and_fetch(term: str, api_key: Optional[str], retmax: int = SEARCH_RETMAX) -> List[RawArticle]:
    """
    Run the search, then fetch the matched records through the history
    server, logging the hit count along the way.
    """
    logger.info(f"Searching: {term}", source=LogSource.PUBMED, category=LogCategory.SEARCH)
    result = esearch(term, api_key=api_key, retmax=retmax)
    logger.info(f"Search returned {len(result.ids)} of {result.count} matches",
                source=LogSource.PUBMED, category=LogCategory.SEARCH)

    articles = efetch_history(result.webenv, result.query_key, api_key, retmax=retmax)
    logger.success(f"Fetched {len(articles)} articles", source=LogSource.PUBMED, category=LogCategory.FETCH)
    return articles

