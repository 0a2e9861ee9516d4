import copy
from collections.abc import Mapping
from typing import Any, Self, cast

import orjson
from loguru import logger as log

from querybuilder.aggregations.aggregations import Aggregations
from querybuilder.config.general import CONFIG, SerializationSettings
from querybuilder.query_clauses.query_clauses import QueryClauses
from querybuilder.types.dsl import ESCollapse, ESPayload
from querybuilder.types.general import SourceFilter
from querybuilder.utils.general import check_argument, check_non_negative_integer


class QueryBuilder:
    """Builds the body of an Elasticsearch search request.

    Pagination and shaping options are set through chainable methods, the
    query through `query` and aggregations through `aggregations`:

        builder = QueryBuilder().from_(0).size(50).sort({"timestamp": "desc"})
        builder.query.boolean().must().term(field="user.name", value="kimchy")
        builder.aggregations.terms("users", field="user.name")
        body = builder.to_dict()

    Merging is right-biased: `a.merge(b)` takes b's from/size/_source/collapse
    when b sets them (a False `_source` does not count), overlays b's sort on
    a's, and merges queries and aggregations with a's items first.
    """

    def __init__(self) -> None:
        """Create a builder producing an empty (match_all) query."""
        self._from: int | None = None
        self._size: int | None = None
        self._source: SourceFilter | None = None
        self._collapse: str | None = None
        self._sort: dict[str, dict[str, Any]] = {}
        self._query = QueryClauses()
        self._aggregations = Aggregations()

    @property
    def query(self) -> QueryClauses:
        """The query clauses of the request."""
        return self._query

    @property
    def aggregations(self) -> Aggregations:
        """The aggregations of the request."""
        return self._aggregations

    def from_(self, from_: int) -> Self:
        """Set the offset of the first hit to return."""
        self._from = check_non_negative_integer(from_, "from")
        return self

    def size(self, size: int) -> Self:
        """Set the number of hits to return."""
        self._size = check_non_negative_integer(size, "size")
        return self

    def sort(self, sort: Mapping[str, Any]) -> Self:
        """Add sort criteria, can be called several times.

        Values are either an order (`"asc"`/`"desc"`), normalized to
        `{"order": value}`, or a mapping of sort options, which is copied. A
        field sorted again keeps its position and takes the new value.
        """
        check_argument(sort, "sort", Mapping)
        for field, value in sort.items():
            self._sort[field] = (
                copy.deepcopy(dict(value))
                if isinstance(value, Mapping)
                else {"order": value}
            )
        return self

    def collapse(self, field: str) -> Self:
        """Collapse the hits on a field, keeping one hit per value."""
        check_argument(field, "field", str)
        self._collapse = field
        return self

    def source(self, filter_expr: SourceFilter) -> Self:
        """Set the `_source` filter: False, a pattern, a list of them or a mapping."""
        if filter_expr is not False and not isinstance(filter_expr, str | list | Mapping):
            raise TypeError(
                "Expected `source` to be one of: False, str, list, Mapping "
                f"but {type(filter_expr).__name__} was given"
            )
        self._source = filter_expr
        return self

    def to_dict(self) -> ESPayload:
        """Assemble the request body."""
        body: dict[str, Any] = {}
        if self._from is not None:
            body["from"] = self._from
        if self._size is not None:
            body["size"] = self._size
        if self._source is not None:
            body["_source"] = copy.deepcopy(self._source)

        body["query"] = self._query.to_dict()

        if self._sort:
            body["sort"] = [
                {field: copy.deepcopy(order)} for field, order in self._sort.items()
            ]
        if self._collapse is not None:
            body["collapse"] = ESCollapse(field=self._collapse)
        aggregations = self._aggregations.to_dict()
        if "aggs" in aggregations:
            body["aggs"] = aggregations["aggs"]
        return cast(ESPayload, body)

    def to_query(self) -> ESPayload:
        """Alias of `to_dict`."""
        return self.to_dict()

    def to_json(self, settings: SerializationSettings | None = None) -> str:
        """Render the request body as JSON."""
        settings = settings or CONFIG.serialization
        option = 0
        if settings.indent:
            option |= orjson.OPT_INDENT_2
        if settings.sort_keys:
            option |= orjson.OPT_SORT_KEYS
        return orjson.dumps(self.to_dict(), option=option).decode()

    def clone(self) -> Self:
        """Return an independent copy of the builder."""
        duplicate = type(self)()
        duplicate._from = self._from
        duplicate._size = self._size
        duplicate._source = copy.deepcopy(self._source)
        duplicate._collapse = self._collapse
        duplicate._sort = copy.deepcopy(self._sort)
        duplicate._query = self._query.clone()
        duplicate._aggregations = self._aggregations.clone()
        return duplicate

    def merge(self, other: "QueryBuilder") -> Self:
        """Combine two builders into a new one, `other` winning conflicts.

        Scalar options (from, size, _source, collapse) come from `other` when
        it sets them, from the receiver otherwise; a `_source` of False counts
        as unset. Sort criteria keep the receiver's order with `other`'s values
        overriding shared fields and its new fields appended. Queries and
        aggregations are merged with the receiver's clauses and aggregations
        first.
        """
        if not isinstance(other, QueryBuilder):  # pyright:ignore[reportUnnecessaryIsInstance] Runtime guard for untyped callers
            raise TypeError(
                f"Cannot merge {type(self).__name__} with {type(other).__name__}"
            )

        merged = type(self)()
        merged._from = other._from if other._from is not None else self._from
        merged._size = other._size if other._size is not None else self._size
        # `source(False)` on `other` does not override the receiver's filter.
        merged._source = copy.deepcopy(
            self._source
            if other._source is None or other._source is False
            else other._source
        )
        merged._collapse = (
            other._collapse if other._collapse is not None else self._collapse
        )
        merged._sort = copy.deepcopy({**self._sort, **other._sort})
        merged._query = self._query.merge(other.query)
        merged._aggregations = self._aggregations.merge(other.aggregations)
        log.bind(builder=type(self).__name__).debug("Merged query builders")
        return merged
