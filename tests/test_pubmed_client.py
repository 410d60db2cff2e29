import xml.etree.ElementTree as ElementTree
from unittest.mock import patch

import pytest
import requests

from OAReport import pubmed_client as pubmed
from OAReport.models import ArticleDate, PubDate
from tests.test_data import SAMPLE_EFETCH_XML, SAMPLE_ESEARCH_JSON

# ===== XML DECODING =====

def test_parse_article_count_and_order():
    articles = pubmed.parse_pubmed_xml(SAMPLE_EFETCH_XML)
    assert [a.pmid for a in articles] == ["30000001", "30000002", "30000003"]


def test_parse_first_article_fields():
    """
    Title text includes inline markup, the issue date keeps its textual month,
    and the article date is numeric.
    """
    article = pubmed.parse_pubmed_xml(SAMPLE_EFETCH_XML)[0]
    assert len(article.article_bodies) == 1
    body = article.article_bodies[0]

    assert body.title == "Clinical trials in MECP2 disorders: a review."
    assert body.publication_types == ["Review", "Journal Article"]
    assert body.journal.title == "Journal of neurodevelopmental disorders"
    assert body.journal.issn == "1866-1955"
    assert body.journal.iso_abbreviation == "J Neurodev Disord"
    assert body.journal.issue.volume == "11"
    assert body.journal.issue.pub_date == PubDate(year=2019, month="Oct", day=14)
    assert body.article_date == ArticleDate(year=2019, month=9, day=30)


def test_parse_mesh_headings_and_flags():
    article = pubmed.parse_pubmed_xml(SAMPLE_EFETCH_XML)[0]
    names = [h.descriptor.name for h in article.mesh_headings]
    assert names == ["Humans", "Rett Syndrome", "Methyl-CpG-Binding Protein 2"]

    rett = article.mesh_headings[1]
    assert rett.descriptor.mesh_id == "D015518"
    assert rett.descriptor.major_topic == "Y"

    mecp2 = article.mesh_headings[2]
    assert mecp2.descriptor.major_topic == "N"
    assert [q.major_topic for q in mecp2.qualifiers] == ["N", "Y"]
    assert mecp2.qualifiers[1].name == "genetics"


def test_parse_article_ids():
    article = pubmed.parse_pubmed_xml(SAMPLE_EFETCH_XML)[0]
    assert [(a.id_type, a.value) for a in article.article_ids] == [
        ("pubmed", "30000001"),
        ("doi", "10.1186/s11689-019-9999-9"),
        ("pmc", "PMC6000001"),
    ]


def test_parse_medline_date_reads_as_missing():
    """
    A PubDate holding only <MedlineDate> decodes to year 0 and an empty month.
    """
    body = pubmed.parse_pubmed_xml(SAMPLE_EFETCH_XML)[1].article_bodies[0]
    assert body.journal.issue.pub_date == PubDate()
    assert body.journal.title == "Brain & development"
    assert body.article_date == ArticleDate(year=2020, month=5, day=12)


def test_parse_missing_optional_parts():
    article = pubmed.parse_pubmed_xml(SAMPLE_EFETCH_XML)[2]
    body = article.article_bodies[0]
    assert article.mesh_headings == []
    assert body.publication_types == []
    assert body.article_date == ArticleDate()
    assert body.journal.issue.pub_date == PubDate(year=2018, month="Jan", day=0)


def test_parse_non_numeric_year_is_zero():
    xml = """<PubmedArticleSet><PubmedArticle><MedlineCitation><PMID>1</PMID>
      <Article><Journal><JournalIssue><PubDate><Year>20l9</Year><Month>May</Month></PubDate>
      </JournalIssue></Journal></Article></MedlineCitation></PubmedArticle></PubmedArticleSet>"""
    article = pubmed.parse_pubmed_xml(xml)[0]
    assert article.article_bodies[0].journal.issue.pub_date.year == 0


def test_parse_empty_set():
    assert pubmed.parse_pubmed_xml("<PubmedArticleSet></PubmedArticleSet>") == []


def test_parse_malformed_xml_raises():
    with pytest.raises(ElementTree.ParseError):
        pubmed.parse_pubmed_xml("<PubmedArticleSet><PubmedArticle>")

# ===== ESEARCH / EFETCH =====

def test_esearch_returns_history_handle():
    with patch.object(pubmed, "http_get_json", return_value=SAMPLE_ESEARCH_JSON) as mock_get:
        result = pubmed.esearch("\"Rett Syndrome\"[Mesh Major Topic]", api_key="k", retmax=3)

    assert result.count == 312
    assert result.ids == ["30000001", "30000002", "30000003"]
    assert result.webenv == "MCID_5f0000000000000000000000"
    assert result.query_key == "1"

    params = mock_get.call_args.kwargs["params"]
    assert params["usehistory"] == "y"
    assert params["retmax"] == 3
    assert params["api_key"] == "k"
    assert mock_get.call_args.args[0] == pubmed.ESEARCH_URL


def test_esearch_error_payload_raises():
    payload = {"esearchresult": {"ERROR": "Invalid query"}}
    with patch.object(pubmed, "http_get_json", return_value=payload):
        with pytest.raises(ValueError, match="Invalid query"):
            pubmed.esearch("bad[", api_key="k")


def test_esearch_without_history_raises():
    payload = {"esearchresult": {"count": "0", "idlist": []}}
    with patch.object(pubmed, "http_get_json", return_value=payload):
        with pytest.raises(ValueError):
            pubmed.esearch("x", api_key="k")


def test_efetch_requires_api_key():
    with patch.object(pubmed, "http_get_text") as mock_get:
        with pytest.raises(ValueError, match="No API Key provided"):
            pubmed.efetch_history("WEBENV", "1", api_key=None)
    mock_get.assert_not_called()


def test_efetch_history_decodes_articles():
    with patch.object(pubmed, "http_get_text", return_value=SAMPLE_EFETCH_XML) as mock_get:
        articles = pubmed.efetch_history("WEBENV", "1", api_key="k", retmax=3)

    assert len(articles) == 3
    params = mock_get.call_args.kwargs["params"]
    assert params["WebEnv"] == "WEBENV"
    assert params["query_key"] == "1"
    assert params["retmode"] == "xml"


def test_efetch_http_error_propagates():
    with patch.object(pubmed, "http_get_text", side_effect=requests.exceptions.HTTPError("500 Server Error")):
        with pytest.raises(requests.exceptions.HTTPError):
            pubmed.efetch_history("WEBENV", "1", api_key="k")


def test_search_and_fetch_chains_history():
    with patch.object(pubmed, "http_get_json", return_value=SAMPLE_ESEARCH_JSON):
        with patch.object(pubmed, "http_get_text", return_value=SAMPLE_EFETCH_XML) as mock_fetch:
            articles = pubmed.search_and_fetch("term", api_key="k", retmax=3)

    assert len(articles) == 3
    assert mock_fetch.call_args.kwargs["params"]["WebEnv"] == "MCID_5f0000000000000000000000"
