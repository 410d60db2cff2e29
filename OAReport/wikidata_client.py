from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Tuple

from .config import (
    WIKIDATA_SPARQL_BASE,
    HTTP_TIMEOUT_LONG,
    WD_PROP_PMCID,
    WD_PROP_ISSN,
    WD_PROP_MESH_DESCRIPTOR,
    WD_PROP_INSTANCE_OF,
    WD_CLASS_MEDICATION,
    WD_CLASS_DISEASE,
)
from .http_utils import sparql_post_json
from .log_utils import logger, LogSource, LogCategory
from .text_utils import entity_id_from_uri, safe_get_nested, sparql_literal

_KIND_DRUG = "drug"
_KIND_DISEASE = "disease"


@dataclass(frozen=True)
class IdentifierLookup:
    """
    How one identifier category maps onto Wikidata: the property whose value
    is the identifier, and a label for log messages.
    """
    label: str
    property_id: str


PMCID_LOOKUP = IdentifierLookup(label="PMCID", property_id=WD_PROP_PMCID)
ISSN_LOOKUP = IdentifierLookup(label="ISSN", property_id=WD_PROP_ISSN)


def _values_clause(ids: Iterable[str]) -> str:
    return " ".join(sparql_literal(i) for i in ids)


def build_identifier_query(lookup: IdentifierLookup, ids: List[str]) -> str:
    """
    Build a single SPARQL query that matches every id in one VALUES block.
    """
    return (
        "SELECT ?value ?item WHERE {\n"
        f"  VALUES ?value {{ {_values_clause(ids)} }}\n"
        f"  ?item wdt:{lookup.property_id} ?value .\n"
        "}"
    )


def build_subject_query(mesh_ids: List[str]) -> str:
    """
    Build a single SPARQL query that finds the items for MeSH descriptor ids
    and tags each one as a drug or a disease by its instance-of class.
    """
    return (
        "SELECT ?value ?item ?kind WHERE {\n"
        f"  VALUES ?value {{ {_values_clause(mesh_ids)} }}\n"
        f"  ?item wdt:{WD_PROP_MESH_DESCRIPTOR} ?value .\n"
        f"  {{ ?item wdt:{WD_PROP_INSTANCE_OF} wd:{WD_CLASS_MEDICATION} . BIND(\"{_KIND_DRUG}\" AS ?kind) }}\n"
        "  UNION\n"
        f"  {{ ?item wdt:{WD_PROP_INSTANCE_OF} wd:{WD_CLASS_DISEASE} . BIND(\"{_KIND_DISEASE}\" AS ?kind) }}\n"
        "}"
    )


def _bindings(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    bindings = safe_get_nested(data, "results", "bindings", default=None)
    if not isinstance(bindings, list):
        raise ValueError("SPARQL response has no results.bindings list")
    return bindings


def _binding_value(binding: Dict[str, Any], name: str) -> str:
    return str(safe_get_nested(binding, name, "value", default="") or "")


def resolve_identifiers(lookup: IdentifierLookup, ids: Iterable[str]) -> Dict[str, str]:
    """
    Resolve a batch of identifiers to Wikidata item ids with one request.

    Identifiers without an item are absent from the result. When several
    items share an identifier, the first one returned is kept.
    """
    ids = list(ids)
    if not ids:
        return {}

    logger.info(f"Resolving {len(ids)} {lookup.label}(s)", source=LogSource.WIKIDATA, category=LogCategory.SEARCH)
    data = sparql_post_json(WIKIDATA_SPARQL_BASE, build_identifier_query(lookup, ids), timeout=HTTP_TIMEOUT_LONG)

    items: Dict[str, str] = {}
    for binding in _bindings(data):
        value = _binding_value(binding, "value")
        item = entity_id_from_uri(_binding_value(binding, "item"))
        if value and item:
            items.setdefault(value, item)

    logger.success(f"{len(items)}/{len(ids)} {lookup.label}(s) resolved", source=LogSource.WIKIDATA,
                   category=LogCategory.MATCH)
    return items


def pmcids_to_items(pmcids: Iterable[str]) -> Dict[str, str]:
    return resolve_identifiers(PMCID_LOOKUP, pmcids)


def issns_to_items(issns: Iterable[str]) -> Dict[str, str]:
    return resolve_identifiers(ISSN_LOOKUP, issns)


def mesh_ids_to_items(mesh_ids: Iterable[str]) -> Tuple[Dict[str, str], Dict[str, str]]:
    """
    Resolve MeSH descriptor ids to drug items and disease items with one
    request, returning (drug_items, disease_items).
    """
    mesh_ids = list(mesh_ids)
    if not mesh_ids:
        return {}, {}

    logger.info(f"Resolving {len(mesh_ids)} MeSH subject(s)", source=LogSource.WIKIDATA,
                category=LogCategory.SEARCH)
    data = sparql_post_json(WIKIDATA_SPARQL_BASE, build_subject_query(mesh_ids), timeout=HTTP_TIMEOUT_LONG)

    drugs: Dict[str, str] = {}
    diseases: Dict[str, str] = {}
    for binding in _bindings(data):
        value = _binding_value(binding, "value")
        item = entity_id_from_uri(_binding_value(binding, "item"))
        kind = _binding_value(binding, "kind")
        if not value or not item:
            continue
        if kind == _KIND_DRUG:
            drugs.setdefault(value, item)
        elif kind == _KIND_DISEASE:
            diseases.setdefault(value, item)

    logger.success(f"MeSH subjects resolved: {len(drugs)} drug(s), {len(diseases)} disease(s)",
                   source=LogSource.WIKIDATA, category=LogCategory.MATCH)
    return drugs, diseases
