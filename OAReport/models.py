from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List


@dataclass(frozen=True)
class MeshTerm:
    """
    A MeSH descriptor or qualifier as attached to a citation, with the raw
    major-topic flag ("Y", "N", or empty when the attribute was missing).
    """
    name: str
    mesh_id: str = ""
    major_topic: str = ""


@dataclass(frozen=True)
class MeshHeading:
    descriptor: MeshTerm
    qualifiers: List[MeshTerm] = field(default_factory=list)


@dataclass(frozen=True)
class PubDate:
    """
    Journal issue publication date. PubMed writes the month as text ("Oct"),
    and a year that is missing or not a number is stored as 0.
    """
    year: int = 0
    month: str = ""
    day: int = 0


@dataclass(frozen=True)
class ArticleDate:
    """
    Electronic publication date of the article itself, all parts numeric.
    """
    year: int = 0
    month: int = 0
    day: int = 0


@dataclass(frozen=True)
class JournalIssue:
    volume: str = ""
    issue: str = ""
    pub_date: PubDate = field(default_factory=PubDate)


@dataclass(frozen=True)
class Journal:
    title: str = ""
    issn: str = ""
    iso_abbreviation: str = ""
    issue: JournalIssue = field(default_factory=JournalIssue)


@dataclass(frozen=True)
class ArticleBody:
    """
    The <Article> element of a MedlineCitation: title, venue and dates.
    """
    title: str = ""
    publication_types: List[str] = field(default_factory=list)
    journal: Journal = field(default_factory=Journal)
    article_date: ArticleDate = field(default_factory=ArticleDate)


@dataclass(frozen=True)
class ArticleId:
    value: str
    id_type: str = ""  # IdType attribute, e.g. "pubmed", "pmc", "doi"


@dataclass(frozen=True)
class RawArticle:
    """
    One fetched PubMed citation as handed over by the fetch step. Nothing in
    the pipeline mutates it.
    """
    pmid: str
    article_bodies: List[ArticleBody] = field(default_factory=list)
    mesh_headings: List[MeshHeading] = field(default_factory=list)
    article_ids: List[ArticleId] = field(default_factory=list)


@dataclass(frozen=True)
class SearchResult:
    """
    ESearch outcome: the total hit count, the first page of ids, and the
    history handle used to fetch the full records.
    """
    count: int
    ids: List[str]
    webenv: str
    query_key: str


@dataclass(frozen=True)
class Subject:
    name: str
    mesh_id: str = ""


@dataclass(frozen=True)
class Record:
    """
    A normalized article ready for the report. Only built for articles whose
    license was resolved; `pmcid` never carries the "PMC" prefix.
    """
    title: str
    pmid: str
    pmcid: str
    license: str
    main_subjects: List[Subject] = field(default_factory=list)
    publication_date: str = ""
    publication: str = ""  # journal title
    issn: str = ""
    publication_type: str = ""


class DropReason(str, Enum):
    """
    Why an article did not make it into the report.
    """

    NO_LICENSE = "no_license"
    NO_ARTICLE_BODY = "no_article_body"


class LineSkipReason(str, Enum):
    """
    Why a line of the license file did not register any mapping.
    """

    FIELD_COUNT = "field_count"


@dataclass
class ResolutionMaps:
    """
    Wikidata items found by the batch lookups. A missing key means the
    identifier did not resolve.
    """
    pmcid_items: Dict[str, str] = field(default_factory=dict)
    issn_items: Dict[str, str] = field(default_factory=dict)
    drug_items: Dict[str, str] = field(default_factory=dict)
    disease_items: Dict[str, str] = field(default_factory=dict)
