from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from .batching import IdentifierBatcher
from .config import MAJOR_TOPIC_FLAG, PMC_ID_PREFIX, PMC_ID_TYPE
from .licenses import LicenseTable, resolve_license
from .log_utils import logger, LogSource, LogCategory
from .models import ArticleBody, DropReason, MeshHeading, RawArticle, Record, Subject


@dataclass(frozen=True)
class NormalizedArticle:
    """
    Result of normalizing one article: a Record, or the reason it was dropped.
    """
    pmid: str
    record: Optional[Record] = None
    drop_reason: Optional[DropReason] = None

    @property
    def accepted(self) -> bool:
        return self.record is not None


@dataclass
class NormalizationResult:
    """
    Everything one normalization pass produces: the Records in article order,
    the identifiers to resolve, and the articles that were left out.
    """
    records: List[Record] = field(default_factory=list)
    worklists: IdentifierBatcher = field(default_factory=IdentifierBatcher)
    dropped: List[Tuple[str, DropReason]] = field(default_factory=list)

    @property
    def accepted_count(self) -> int:
        return len(self.records)

    @property
    def dropped_count(self) -> int:
        return len(self.dropped)


def extract_pmcid(article: RawArticle) -> str:
    """
    Return the PubMed Central id of an article without its "PMC" prefix, taken
    from the first ArticleId typed "pmc". Returns an empty string when the
    article has no PMC copy.
    """
    for article_id in article.article_ids:
        if article_id.id_type == PMC_ID_TYPE:
            value = article_id.value
            if value.startswith(PMC_ID_PREFIX):
                value = value[len(PMC_ID_PREFIX):]
            return value
    return ""


def is_major_heading(heading: MeshHeading) -> bool:
    """
    A heading is a major topic when its descriptor or any of its qualifiers
    carries MajorTopicYN="Y".
    """
    if heading.descriptor.major_topic == MAJOR_TOPIC_FLAG:
        return True
    return any(q.major_topic == MAJOR_TOPIC_FLAG for q in heading.qualifiers)


def major_subjects(headings: Iterable[MeshHeading],
                   batcher: Optional[IdentifierBatcher] = None) -> List[Subject]:
    """
    Keep the descriptors of major-topic headings in their original order.

    When a batcher is given, each kept descriptor id is queued for the drug
    and disease lookup.
    """
    subjects: List[Subject] = []
    for heading in headings:
        if not is_major_heading(heading):
            continue
        subject = Subject(name=heading.descriptor.name, mesh_id=heading.descriptor.mesh_id)
        subjects.append(subject)
        if batcher is not None:
            batcher.add_subject(subject.mesh_id)
    return subjects


def resolve_publication_date(body: ArticleBody) -> str:
    """
    Render the article's publication date as "<month>-<year>".

    The journal issue date is preferred. When its year is 0 or its month is
    empty, the electronic article date is used instead. The issue date
    carries a textual month ("Oct") while the article date carries a number
    ("10"); the month is written as the chosen source has it.
    """
    pub_date = body.journal.issue.pub_date
    if pub_date.year == 0 or pub_date.month == "":
        fallback = body.article_date
        return f"{fallback.month}-{fallback.year}"
    return f"{pub_date.month}-{pub_date.year}"


def _first_article_body(article: RawArticle) -> Optional[ArticleBody]:
    # one <Article> per MedlineCitation is expected; extra ones are ignored
    if not article.article_bodies:
        return None
    if len(article.article_bodies) > 1:
        logger.warn(
            f"PMID {article.pmid} has {len(article.article_bodies)} article bodies; using the first",
            source=LogSource.PUBMED, category=LogCategory.ARTICLE,
        )
    return article.article_bodies[0]


def normalize_article(article: RawArticle, table: LicenseTable,
                      batcher: Optional[IdentifierBatcher] = None) -> NormalizedArticle:
    """
    Turn one fetched citation into a Record, or report why it was dropped.

    Identifiers of accepted articles (PMCID, ISSN, major subject ids) are
    added to the batcher when one is given. Dropped articles contribute
    nothing.
    """
    pmcid = extract_pmcid(article)

    license_label = resolve_license(article.pmid, pmcid, table)
    if license_label is None:
        return NormalizedArticle(pmid=article.pmid, drop_reason=DropReason.NO_LICENSE)

    body = _first_article_body(article)
    if body is None:
        return NormalizedArticle(pmid=article.pmid, drop_reason=DropReason.NO_ARTICLE_BODY)

    subjects = major_subjects(article.mesh_headings)
    publication_type = body.publication_types[0] if body.publication_types else ""

    record = Record(
        title=body.title,
        pmid=article.pmid,
        pmcid=pmcid,
        license=license_label,
        main_subjects=subjects,
        publication_date=resolve_publication_date(body),
        publication=body.journal.title,
        issn=body.journal.issn,
        publication_type=publication_type,
    )

    if batcher is not None:
        batcher.add_pmcid(record.pmcid)
        batcher.add_issn(record.issn)
        for subject in subjects:
            batcher.add_subject(subject.mesh_id)

    return NormalizedArticle(pmid=article.pmid, record=record)


def normalize_articles(articles: Iterable[RawArticle], table: LicenseTable) -> NormalizationResult:
    """
    Normalize every article in one pass, keeping article order, and collect
    the identifiers the accepted Records need resolved.
    """
    result = NormalizationResult()
    for article in articles:
        outcome = normalize_article(article, table, result.worklists)
        if outcome.accepted:
            result.records.append(outcome.record)
        else:
            result.dropped.append((outcome.pmid, outcome.drop_reason))
            source = LogSource.LICENSE if outcome.drop_reason is DropReason.NO_LICENSE else LogSource.PUBMED
            logger.debug(f"Dropped PMID {outcome.pmid}: {outcome.drop_reason.value}",
                         source=source, category=LogCategory.SKIP)
    return result
