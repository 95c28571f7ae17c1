"""
Store-agnostic query building for the formation catalog.

Filters are collected as an ordered list of ``Predicate`` specifications and
only translated into a MongoDB filter document at the end, so the filter
logic can be tested without a database.
"""

import unicodedata
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pymongo import ASCENDING, DESCENDING

DEFAULT_SORT_FIELD = "id"

# bacType filter value -> admitted-count field that must be > 0
BAC_TYPE_FIELDS = {
    "general": "admittedBacGeneral",
    "techno": "admittedBacTechno",
    "pro": "admittedBacPro",
}


class Operator(str, Enum):
    EQ = "eq"
    GT = "gt"


class SortDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SortDirection":
        """``DESC`` in any case means descending, anything else ascending."""
        if value and value.upper() == "DESC":
            return cls.DESC
        return cls.ASC


@dataclass(frozen=True)
class Predicate:
    field: str
    operator: Operator
    value: Any


@dataclass
class FormationQuery:
    """Filter + sort + page window for one catalog query."""

    predicates: List[Predicate] = field(default_factory=list)
    sort_by: str = DEFAULT_SORT_FIELD
    direction: SortDirection = SortDirection.ASC
    page: int = 0
    size: int = 10

    def where(self, field_name: str, value: Any, operator: Operator = Operator.EQ) -> "FormationQuery":
        self.predicates.append(Predicate(field_name, operator, value))
        return self

    def to_filter(self) -> Dict[str, Any]:
        """AND of all predicates as a MongoDB filter document."""
        if not self.predicates:
            return {}
        clauses = [_predicate_to_mongo(p) for p in self.predicates]
        if len(clauses) == 1:
            return clauses[0]
        return {"$and": clauses}

    def to_sort(self) -> List[Tuple[str, int]]:
        field_name = store_field(self.sort_by or DEFAULT_SORT_FIELD)
        order = DESCENDING if self.direction == SortDirection.DESC else ASCENDING
        return [(field_name, order)]

    @property
    def skip(self) -> int:
        return self.page * self.size


def _predicate_to_mongo(predicate: Predicate) -> Dict[str, Any]:
    field_name = store_field(predicate.field)
    if predicate.operator == Operator.GT:
        return {field_name: {"$gt": predicate.value}}
    return {field_name: predicate.value}


def store_field(name: str) -> str:
    """Map the public identifier name to the store's primary key."""
    return "_id" if name == "id" else name


def _present(value: Optional[str]) -> bool:
    return value is not None and value.strip() != ""


def build_advanced_query(
    region: Optional[str] = None,
    department: Optional[str] = None,
    establishment_status: Optional[str] = None,
    program: Optional[str] = None,
    bac_type: Optional[str] = None,
    has_detailed_info: Optional[bool] = None,
    alternance_available: Optional[str] = None,
    page: int = 0,
    size: int = 10,
    sort_by: Optional[str] = None,
    direction: SortDirection = SortDirection.ASC,
) -> FormationQuery:
    """
    Compose the advanced-search query from optional filters.

    Blank strings count as absent. An unrecognised ``bac_type`` adds no
    predicate at all.
    """
    query = FormationQuery(
        sort_by=sort_by or DEFAULT_SORT_FIELD,
        direction=direction,
        page=page,
        size=size,
    )

    if _present(region):
        query.where("region", region)
    if _present(department):
        query.where("department", department)
    if _present(establishment_status):
        query.where("establishmentStatus", establishment_status)
    if _present(program):
        query.where("program", program)

    if _present(bac_type):
        admitted_field = BAC_TYPE_FIELDS.get(bac_type)
        if admitted_field:
            query.where(admitted_field, 0, Operator.GT)

    if has_detailed_info is not None:
        query.where("hasDetailedInfo", has_detailed_info)
    if _present(alternance_available):
        query.where("alternanceAvailable", alternance_available)

    return query


def remove_accents(text: str) -> str:
    """Strip combining marks after canonical decomposition ("É" -> "E")."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.category(ch).startswith("M"))


def normalize_for_prefix(text: str) -> str:
    return remove_accents(text.lower())


def filter_suggestions(values: Iterable[Any], query: Optional[str], limit: int = 5) -> List[str]:
    """
    Select autocomplete suggestions among distinct field values.

    Without a query: the first ``limit`` non-empty strings, in store order.
    With a query: every value whose accent-stripped, lower-cased form starts
    with the normalized query, in store order and without a limit.
    """
    candidates = [v for v in values if isinstance(v, str)]

    if query is None or query.strip() == "":
        return [v for v in candidates if v != ""][:limit]

    prefix = normalize_for_prefix(query)
    return [v for v in candidates if normalize_for_prefix(v).startswith(prefix)]
