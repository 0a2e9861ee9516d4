"""Leaf query clauses.

Each leaf is an immutable record serializing to exactly one DSL fragment,
for example `Term(field="user.name", value="kimchy")` becomes
`{"term": {"user.name": {"value": "kimchy"}}}`.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Literal, override

from querybuilder.query_clauses.query_clause import QueryClause
from querybuilder.types.general import DSLFragment

RangeBound = Literal["gt", "gte", "lt", "lte"]

VALID_RANGE_PARAMS: tuple[RangeBound, ...] = ("gt", "gte", "lt", "lte")


@dataclass(frozen=True, kw_only=True, slots=True)
class Term(QueryClause):
    """Matches documents containing the exact value in a field."""

    field: str
    value: Any

    @override
    def to_dict(self) -> DSLFragment:
        return {"term": {self.field: {"value": self.value}}}


@dataclass(frozen=True, kw_only=True, slots=True)
class Terms(QueryClause):
    """Matches documents containing any of the given exact values in a field."""

    field: str
    terms: Sequence[Any]

    def __post_init__(self) -> None:
        """Keep a private copy of the values."""
        object.__setattr__(self, "terms", tuple(self.terms))

    @override
    def to_dict(self) -> DSLFragment:
        return {"terms": {self.field: list(self.terms)}}


class Range(QueryClause):
    """Matches documents with a field value inside the given bounds.

    Takes `field` plus any non-empty subset of gt, gte, lt and lte. Bounds
    given as None are dropped before validation.
    """

    __slots__ = ("_field", "_params")

    def __init__(self, field: str | None = None, **params: Any) -> None:
        """Validate and store the range bounds."""
        if field is None:
            raise ValueError("Missing required key 'field'")

        invalid_keys = [key for key in params if key not in VALID_RANGE_PARAMS]
        if invalid_keys:
            raise ValueError(f"Invalid keys: {', '.join(invalid_keys)}")

        params = {key: value for key, value in params.items() if value is not None}
        if not params:
            raise ValueError(
                f"At least one of {', '.join(VALID_RANGE_PARAMS)} should be given"
            )

        self._field = field
        self._params: Mapping[str, Any] = MappingProxyType(params)

    @property
    def field(self) -> str:
        """The field the bounds apply to."""
        return self._field

    @property
    def params(self) -> Mapping[str, Any]:
        """The bounds, keyed by operator."""
        return self._params

    @override
    def to_dict(self) -> DSLFragment:
        return {"range": {self.field: dict(self.params)}}

    @override
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Range):
            return NotImplemented
        return (self.field, dict(self.params)) == (other.field, dict(other.params))

    @override
    def __hash__(self) -> int:
        return hash((self.field, tuple(self.params.items())))

    @override
    def __repr__(self) -> str:
        bounds = ", ".join(f"{key}={value!r}" for key, value in self.params.items())
        return f"Range(field={self.field!r}, {bounds})"


@dataclass(frozen=True, kw_only=True, slots=True)
class Regexp(QueryClause):
    """Matches documents with a field value matching a regular expression."""

    field: str
    value: str

    @override
    def to_dict(self) -> DSLFragment:
        return {"regexp": {self.field: {"value": self.value}}}


@dataclass(frozen=True, kw_only=True, slots=True)
class Wildcard(QueryClause):
    """Matches documents with a field value matching a wildcard pattern."""

    field: str
    value: str

    @override
    def to_dict(self) -> DSLFragment:
        return {"wildcard": {self.field: {"value": self.value}}}


@dataclass(frozen=True, kw_only=True, slots=True)
class Exists(QueryClause):
    """Matches documents with an indexed value for a field."""

    field: str

    @override
    def to_dict(self) -> DSLFragment:
        return {"exists": {"field": self.field}}


@dataclass(frozen=True, kw_only=True, slots=True)
class MatchPhrase(QueryClause):
    """Matches documents containing the exact phrase in an analyzed field."""

    field: str
    phrase: str

    @override
    def to_dict(self) -> DSLFragment:
        return {"match_phrase": {self.field: self.phrase}}


@dataclass(frozen=True, kw_only=True, slots=True)
class QueryString(QueryClause):
    """A free-text query in Lucene syntax, optionally limited to some fields."""

    query: str
    fields: str | Sequence[str] | None = None

    def __post_init__(self) -> None:
        """Normalize a single field into a one-element tuple."""
        if isinstance(self.fields, str):
            object.__setattr__(self, "fields", (self.fields,))
        elif self.fields is not None:
            object.__setattr__(self, "fields", tuple(self.fields))

    @override
    def to_dict(self) -> DSLFragment:
        query_string: dict[str, Any] = {"query": self.query}
        if self.fields is not None:
            query_string["fields"] = list(self.fields)
        return {"query_string": query_string}


@dataclass(frozen=True, slots=True)
class MatchAll(QueryClause):
    """Matches every document."""

    @override
    def to_dict(self) -> DSLFragment:
        return {"match_all": {}}


@dataclass(frozen=True, slots=True)
class MatchNone(QueryClause):
    """Matches no document."""

    @override
    def to_dict(self) -> DSLFragment:
        return {"match_none": {}}
