from unittest.mock import patch

from OAReport import io_utils, normalize
from OAReport.batching import IdentifierBatcher
from OAReport.licenses import load_license_table
from OAReport.log_utils import LogSource
from OAReport.models import ArticleDate, ArticleId, DropReason, PubDate, Subject
from OAReport.normalize import (
    extract_pmcid,
    is_major_heading,
    major_subjects,
    normalize_article,
    normalize_articles,
    resolve_publication_date,
)
from tests.test_data import make_article, make_body, make_heading

# ===== PMCID EXTRACTION =====

def test_extract_pmcid_strips_prefix():
    assert extract_pmcid(make_article(pmc="PMC17774")) == "17774"


def test_extract_pmcid_first_match_wins():
    """
    When several ArticleIds are typed "pmc", the first one is used.
    """
    article = make_article(extra_ids=[ArticleId(value="PMC111", id_type="pmc"),
                                      ArticleId(value="PMC222", id_type="pmc")])
    assert extract_pmcid(article) == "111"


def test_extract_pmcid_ignores_other_types():
    article = make_article(extra_ids=[ArticleId(value="10.1000/xyz", id_type="doi"),
                                      ArticleId(value="PMC5", id_type="pmcid")])
    assert extract_pmcid(article) == ""


def test_extract_pmcid_without_prefix_kept_as_is():
    article = make_article(extra_ids=[ArticleId(value="17774", id_type="pmc")])
    assert extract_pmcid(article) == "17774"

# ===== MAJOR SUBJECTS =====

def test_descriptor_flag_makes_heading_major():
    assert is_major_heading(make_heading("Rett Syndrome", "D015518", major="Y"))


def test_qualifier_flag_makes_heading_major():
    """
    Descriptor "N" with one qualifier "Y" is still a major topic.
    """
    assert is_major_heading(make_heading("MECP2", "D051179", major="N", qualifiers=["N", "Y"]))


def test_no_flags_is_not_major():
    assert not is_major_heading(make_heading("Humans", "D006801", major="N", qualifiers=["N", "N"]))
    assert not is_major_heading(make_heading("Humans", "D006801", major=""))


def test_flag_comparison_is_literal():
    assert not is_major_heading(make_heading("Humans", "D006801", major="y"))


def test_major_subjects_keeps_order_and_records_ids():
    headings = [
        make_heading("Humans", "D006801"),
        make_heading("Rett Syndrome", "D015518", major="Y"),
        make_heading("Female", "D005260"),
        make_heading("MECP2", "D051179", qualifiers=["Y"]),
    ]
    batcher = IdentifierBatcher()

    subjects = major_subjects(headings, batcher)

    assert subjects == [Subject("Rett Syndrome", "D015518"), Subject("MECP2", "D051179")]
    assert batcher.subject_ids == ["D015518", "D051179"]


def test_major_subjects_without_batcher():
    subjects = major_subjects([make_heading("Rett Syndrome", "D015518", major="Y")])
    assert [s.name for s in subjects] == ["Rett Syndrome"]

# ===== PUBLICATION DATE =====

def test_issue_date_is_preferred():
    body = make_body(pub_date=PubDate(year=2019, month="Oct"), article_date=ArticleDate(2019, 9, 30))
    assert resolve_publication_date(body) == "Oct-2019"


def test_fallback_when_year_is_zero():
    """
    Year 0 and empty month on the issue date selects the article date, whose
    month is numeric.
    """
    body = make_body(pub_date=PubDate(year=0, month=""), article_date=ArticleDate(2020, 5, 12))
    assert resolve_publication_date(body) == "5-2020"


def test_fallback_when_only_month_missing():
    body = make_body(pub_date=PubDate(year=2018, month=""), article_date=ArticleDate(2018, 11, 2))
    assert resolve_publication_date(body) == "11-2018"


def test_fallback_when_only_year_missing():
    body = make_body(pub_date=PubDate(year=0, month="Mar"), article_date=ArticleDate(2017, 3, 1))
    assert resolve_publication_date(body) == "3-2017"


def test_fallback_without_article_date_renders_zeros():
    body = make_body(pub_date=PubDate(), article_date=ArticleDate())
    assert resolve_publication_date(body) == "0-0"

# ===== ARTICLE NORMALIZATION =====

def test_article_licensed_by_pmid():
    article = make_article(pmid="11056661", pmc="PMC17774",
                           headings=[make_heading("Rett Syndrome", "D015518", major="Y")])
    outcome = normalize_article(article, {"11056661": "CC BY"})

    assert outcome.accepted
    record = outcome.record
    assert record.pmid == "11056661"
    assert record.pmcid == "17774"
    assert record.license == "CC BY"
    assert record.title == "A review"
    assert record.issn == "1234-5678"
    assert record.publication == "Journal"
    assert record.publication_type == "Review"
    assert record.publication_date == "Oct-2019"
    assert record.main_subjects == [Subject("Rett Syndrome", "D015518")]


def test_article_licensed_by_pmcid():
    outcome = normalize_article(make_article(pmid="1", pmc="PMC17774"), {"17774": "CC0"})
    assert outcome.accepted
    assert outcome.record.license == "CC0"


def test_article_without_license_is_dropped():
    batcher = IdentifierBatcher()
    outcome = normalize_article(
        make_article(pmid="1", pmc="PMC2", headings=[make_heading("Rett Syndrome", "D015518", major="Y")]),
        {"3": "CC BY"},
        batcher,
    )

    assert not outcome.accepted
    assert outcome.drop_reason is DropReason.NO_LICENSE
    assert len(batcher) == 0, "Dropped articles must not queue identifiers"


def test_article_without_pmc_cannot_use_pmc_fallback():
    outcome = normalize_article(make_article(pmid="1"), {"PMC2": "CC BY", "2": "CC BY"})
    assert outcome.drop_reason is DropReason.NO_LICENSE


def test_pmcid_only_license_line_does_not_match_prefixed_article(tmp_path):
    """
    The table keys PMCIDs as written in the file ("PMC17774") while articles
    are looked up by the bare id ("17774"), so a line without a PMID cannot
    license the article.
    """
    path = tmp_path / "oa.txt"
    io_utils.safe_write_file(str(path), "p\tc\tPMC17774\t\tCC BY\n")
    table = load_license_table(str(path))
    assert table == {"PMC17774": "CC BY"}

    outcome = normalize_article(make_article(pmid="99999999", pmc="PMC17774"), table)
    assert not outcome.accepted
    assert outcome.drop_reason is DropReason.NO_LICENSE


def test_article_without_body_is_dropped():
    outcome = normalize_article(make_article(pmid="1", bodies=[]), {"1": "CC BY"})
    assert outcome.drop_reason is DropReason.NO_ARTICLE_BODY


def test_only_first_body_is_used():
    bodies = [make_body(title="First", issn="1111-1111"), make_body(title="Second", issn="2222-2222")]
    outcome = normalize_article(make_article(pmid="1", bodies=bodies), {"1": "CC BY"})
    assert outcome.record.title == "First"
    assert outcome.record.issn == "1111-1111"


def test_empty_publication_type_list():
    outcome = normalize_article(make_article(pmid="1", bodies=[make_body(publication_types=[])]), {"1": "CC BY"})
    assert outcome.record.publication_type == ""


def test_accepted_article_queues_identifiers():
    batcher = IdentifierBatcher()
    article = make_article(pmid="1", pmc="PMC9", headings=[
        make_heading("Rett Syndrome", "D015518", major="Y"),
        make_heading("Humans", "D006801"),
    ])
    normalize_article(article, {"1": "CC BY"}, batcher)

    assert batcher.pmcids == ["9"]
    assert batcher.issns == ["1234-5678"]
    assert batcher.subject_ids == ["D015518"]


def test_normalize_articles_keeps_order_and_counts():
    """
    One pass yields Records in article order, drops with reasons, and
    deduplicated worklists built from accepted articles only.
    """
    articles = [
        make_article(pmid="1", pmc="PMC10", headings=[make_heading("Rett Syndrome", "D015518", major="Y")]),
        make_article(pmid="2", pmc="PMC20"),
        make_article(pmid="3", headings=[make_heading("Rett Syndrome", "D015518", major="Y"),
                                         make_heading("Epilepsy", "D004827", qualifiers=["Y"])]),
        make_article(pmid="4", bodies=[]),
    ]
    table = {"1": "CC BY", "3": "CC0", "4": "CC BY"}

    result = normalize_articles(articles, table)

    assert [r.pmid for r in result.records] == ["1", "3"]
    assert result.accepted_count == 2
    assert result.dropped_count == 2
    assert result.dropped == [("2", DropReason.NO_LICENSE), ("4", DropReason.NO_ARTICLE_BODY)]
    assert result.worklists.pmcids == ["10"]
    assert result.worklists.issns == ["1234-5678"]
    assert result.worklists.subject_ids == ["D015518", "D004827"]


def test_normalize_articles_is_independent_per_call():
    table = {"1": "CC BY"}
    first = normalize_articles([make_article(pmid="1", pmc="PMC10")], table)
    second = normalize_articles([make_article(pmid="1", pmc="PMC10")], table)
    assert first.worklists is not second.worklists
    assert second.worklists.pmcids == ["10"]


def test_drops_are_logged_with_their_source():
    """
    License drops are tagged with the license source, missing article bodies
    with PubMed.
    """
    articles = [make_article(pmid="1"), make_article(pmid="2", bodies=[])]
    with patch.object(normalize.logger, "debug") as mock_debug:
        normalize_articles(articles, {"2": "CC BY"})

    sources = [c.kwargs["source"] for c in mock_debug.call_args_list]
    assert sources == [LogSource.LICENSE, LogSource.PUBMED]
