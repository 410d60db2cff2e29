from __future__ import annotations

PUBMED_BASE = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils"
WIKIDATA_SPARQL_BASE = "https://query.wikidata.org/sparql"
WIKIDATA_ENTITY_PREFIX = "http://www.wikidata.org/entity/"

DEFAULT_LICENSE_FILE = "oa_file_list.txt"
DEFAULT_OUTPUT_FILE = "results.csv"
DEFAULT_NCBI_KEY_FILE = "keys/NCBI.key"
DEFAULT_OUT_DIR = "output"

# environment variable consulted when no key file is present
NCBI_API_KEY_ENV = "NCBI_API_KEY"

# The literature query the report is built for.
# Results are capped at SEARCH_RETMAX; there is no paging past the first batch
SEARCH_DB = "pubmed"
SEARCH_TERM = "\"Rett Syndrome\"[Mesh Major Topic] AND Review[ptyp]"
SEARCH_RETMAX = 5

# ArticleIdList entries of this type carry the PubMed Central copy,
# always written as "PMC<digits>" in the fetched XML
PMC_ID_TYPE = "pmc"
PMC_ID_PREFIX = "PMC"

# MeSH flags a descriptor or qualifier as a major topic with this literal
MAJOR_TOPIC_FLAG = "Y"

# Wikidata properties used to resolve identifiers to items
WD_PROP_PMCID = "P932"
WD_PROP_ISSN = "P236"
WD_PROP_MESH_DESCRIPTOR = "P486"
WD_PROP_INSTANCE_OF = "P31"

# classes that decide whether a MeSH-linked item is a drug or a disease
WD_CLASS_MEDICATION = "Q12140"
WD_CLASS_DISEASE = "Q12136"

# Wikidata items for the licenses that appear in the NCBI OA file list.
# The 2.5 and 4.0 variants are not in that list, but Europe PMC reports them
CC_LICENSE_ITEM_IDS = {
    "CC0": "Q6938433",
    "CC BY": "Q6905323",
    "CC BY-NC-ND": "Q6937225",
    "CC BY-NC": "Q6936496",
    "CC BY 2.5": "Q18810333",
    "CC BY 4.0": "Q20007257",
}

# Column order of the report. The file is tab-separated even though the
# default name ends in .csv
REPORT_COLUMNS = [
    "Title",
    "Item",
    "PMID",
    "PMCID",
    "License",
    "License Item",
    "Main Subjects",
    "Publication Date",
    "Publication",
    "ISSN",
    "ISSN item",
    "Publication Type",
]

# HTTP request configuration
# Default timeout for HTTP requests (in seconds)
HTTP_TIMEOUT_DEFAULT = 15.0

# efetch and SPARQL responses can be large; give them longer
HTTP_TIMEOUT_LONG = 60.0
