import copy
from collections.abc import Callable
from typing import Any, Self, override

from querybuilder.aggregations.aggregation import NestableAggregation
from querybuilder.aggregations.sources import Sources
from querybuilder.errors import AggregationsError
from querybuilder.query_clauses.query_clauses import QueryClauses
from querybuilder.script import Script
from querybuilder.types.general import DSLFragment


def _missing_builder_error(aggregation: type) -> AggregationsError:
    return AggregationsError(
        f"The {aggregation.__name__} aggregation must be initialized with a builder"
    )


def _noop(_: Any) -> None:
    return None


class Terms(NestableAggregation):
    """Buckets documents by the distinct values of a field or a script.

    Exactly one of `field` and `script` must be given.
    """

    def __init__(
        self,
        name: str,
        *,
        field: str | None = None,
        script: Script | None = None,
        size: int | None = None,
        order: Any = None,
    ) -> None:
        """Validate the value source and create the aggregation."""
        if bool(field) == (script is not None):
            raise ValueError("Either 'field' or 'script' must be provided")

        super().__init__(name)
        self.field = field
        self.script = script
        self.size = size
        self.order = order

    @override
    def body(self) -> DSLFragment:
        terms: dict[str, Any] = {}
        if self.field:
            terms["field"] = self.field
        if self.size is not None:
            terms["size"] = self.size
        if self.script is not None:
            terms["script"] = self.script.to_dict()
        if self.order is not None:
            terms["order"] = copy.deepcopy(self.order)
        return {"terms": terms}

    @override
    def clone(self) -> Self:
        duplicate = type(self)(
            self.name,
            field=self.field,
            script=self.script,
            size=self.size,
            order=copy.deepcopy(self.order),
        )
        return self._copy_children_to(duplicate)


class TopHits(NestableAggregation):
    """The most relevant documents of each bucket."""

    def __init__(self, name: str, *, size: int) -> None:
        """Create the aggregation returning `size` hits per bucket."""
        super().__init__(name)
        self.size = size

    @override
    def body(self) -> DSLFragment:
        return {"top_hits": {"size": self.size}}

    @override
    def clone(self) -> Self:
        return self._copy_children_to(type(self)(self.name, size=self.size))


class DateHistogram(NestableAggregation):
    """Buckets documents by calendar intervals of a date field."""

    def __init__(
        self,
        name: str,
        *,
        field: str,
        calendar_interval: str,
        format: str | None = None,  # noqa: A002
    ) -> None:
        """Create the histogram, `format` controls the bucket key format."""
        super().__init__(name)
        self.field = field
        self.calendar_interval = calendar_interval
        self.format = format

    @override
    def body(self) -> DSLFragment:
        date_histogram: dict[str, Any] = {
            "field": self.field,
            "calendar_interval": self.calendar_interval,
        }
        if self.format is not None:
            date_histogram["format"] = self.format
        return {"date_histogram": date_histogram}

    @override
    def clone(self) -> Self:
        duplicate = type(self)(
            self.name,
            field=self.field,
            calendar_interval=self.calendar_interval,
            format=self.format,
        )
        return self._copy_children_to(duplicate)


class Filter(NestableAggregation):
    """A single bucket holding the documents matching a query.

    The builder receives an empty QueryClauses to populate:

        Filter("failed", lambda q: q.term(field="status", value="failed"))
    """

    def __init__(
        self, name: str, builder: Callable[[QueryClauses], Any] | None = None
    ) -> None:
        """Create the aggregation and populate its filter query."""
        if builder is None:
            raise _missing_builder_error(type(self))

        super().__init__(name)
        self._query = QueryClauses()
        builder(self._query)

    @property
    def query(self) -> QueryClauses:
        """The filter query."""
        return self._query

    @override
    def body(self) -> DSLFragment:
        return {"filter": self._query.to_dict()}

    @override
    def clone(self) -> Self:
        duplicate = type(self)(self.name, _noop)
        duplicate._query = self._query.clone()
        return self._copy_children_to(duplicate)


class Composite(NestableAggregation):
    """Buckets built from combinations of several value sources, paginatable.

    The builder receives the Sources collection to populate:

        Composite("jobs", lambda s: s.terms("job", field="job.name"), size=100)
    """

    def __init__(
        self,
        name: str,
        builder: Callable[[Sources], Any] | None = None,
        *,
        size: int | None = None,
    ) -> None:
        """Create the aggregation and populate its sources."""
        if builder is None:
            raise _missing_builder_error(type(self))

        super().__init__(name)
        self.size = size
        self._sources = Sources()
        builder(self._sources)

    @property
    def sources(self) -> Sources:
        """The value sources."""
        return self._sources

    @override
    def body(self) -> DSLFragment:
        composite: dict[str, Any] = {"sources": self._sources.to_list()}
        if self.size is not None:
            composite["size"] = self.size
        return {"composite": composite}

    @override
    def clone(self) -> Self:
        duplicate = type(self)(self.name, _noop, size=self.size)
        duplicate._sources = self._sources.clone()
        return self._copy_children_to(duplicate)
