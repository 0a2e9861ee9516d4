from collections.abc import Callable, Iterator, Mapping
from typing import Any, Self

from loguru import logger as log

from querybuilder.aggregations.aggregation import Aggregation
from querybuilder.aggregations.buckets import (
    Composite,
    DateHistogram,
    Filter,
    Terms,
    TopHits,
)
from querybuilder.aggregations.metrics import (
    Avg,
    BucketSelector,
    Cardinality,
    Max,
    ScriptedMetric,
    Sum,
    ValueCount,
)
from querybuilder.aggregations.sources import Sources
from querybuilder.query_clauses.query_clauses import QueryClauses
from querybuilder.script import Script
from querybuilder.types.general import DSLFragment


class Aggregations:
    """An ordered collection of aggregations.

    Items are not keyed: two aggregations may share a name, in which case
    the later one takes the name's slot when serializing while both stay
    in the collection. Each constructor appends the new aggregation and
    returns it, so nested aggregations can be attached directly:

        aggregations.terms("build_jobs", field="job.name").aggs(
            lambda a: a.avg("avg_runtime", field="runtime")
        )
    """

    def __init__(self) -> None:
        """Create an empty collection."""
        self._aggregations: list[Aggregation] = []

    def terms(
        self,
        name: str,
        *,
        field: str | None = None,
        script: Script | None = None,
        size: int | None = None,
        order: Any = None,
    ) -> Terms:
        """Add a `terms` aggregation."""
        return self.add(
            Terms(name, field=field, script=script, size=size, order=order)
        )

    def avg(self, name: str, *, field: str, missing: Any = None) -> Avg:
        """Add an `avg` aggregation."""
        return self.add(Avg(name, field=field, missing=missing))

    def sum(self, name: str, *, field: str, missing: Any = None) -> Sum:
        """Add a `sum` aggregation."""
        return self.add(Sum(name, field=field, missing=missing))

    def max(self, name: str, *, field: str) -> Max:
        """Add a `max` aggregation."""
        return self.add(Max(name, field=field))

    def value_count(self, name: str, *, field: str) -> ValueCount:
        """Add a `value_count` aggregation."""
        return self.add(ValueCount(name, field=field))

    def cardinality(self, name: str, *, field: str) -> Cardinality:
        """Add a `cardinality` aggregation."""
        return self.add(Cardinality(name, field=field))

    def top_hits(self, name: str, *, size: int) -> TopHits:
        """Add a `top_hits` aggregation."""
        return self.add(TopHits(name, size=size))

    def filter(
        self, name: str, builder: Callable[[QueryClauses], Any] | None = None
    ) -> Filter:
        """Add a `filter` aggregation, the builder populates its query."""
        return self.add(Filter(name, builder))

    def composite(
        self,
        name: str,
        builder: Callable[[Sources], Any] | None = None,
        *,
        size: int | None = None,
    ) -> Composite:
        """Add a `composite` aggregation, the builder populates its sources."""
        return self.add(Composite(name, builder, size=size))

    def date_histogram(
        self,
        name: str,
        *,
        field: str,
        calendar_interval: str,
        format: str | None = None,  # noqa: A002
    ) -> DateHistogram:
        """Add a `date_histogram` aggregation."""
        return self.add(
            DateHistogram(
                name, field=field, calendar_interval=calendar_interval, format=format
            )
        )

    def scripted_metric(
        self,
        name: str,
        *,
        map_script: str | Script,
        combine_script: str | Script,
        reduce_script: str | Script,
        init_script: str | Script | None = None,
    ) -> ScriptedMetric:
        """Add a `scripted_metric` aggregation."""
        return self.add(
            ScriptedMetric(
                name,
                map_script=map_script,
                combine_script=combine_script,
                reduce_script=reduce_script,
                init_script=init_script,
            )
        )

    def bucket_selector(
        self,
        name: str,
        *,
        buckets_path: str | Mapping[str, str],
        script: Script,
        gap_policy: str | None = None,
    ) -> BucketSelector:
        """Add a `bucket_selector` pipeline aggregation."""
        return self.add(
            BucketSelector(
                name, buckets_path=buckets_path, script=script, gap_policy=gap_policy
            )
        )

    def add[T: Aggregation](self, aggregation: T) -> T:
        """Append an aggregation and return it."""
        self._aggregations.append(aggregation)
        return aggregation

    def any(self) -> bool:
        """Whether the collection holds at least one aggregation."""
        return len(self._aggregations) > 0

    def none(self) -> bool:
        """Whether the collection is empty."""
        return not self._aggregations

    def to_dict(self) -> DSLFragment:
        """Serialize as `{"aggs": {name: fragment, ...}}`, or `{}` when empty."""
        if self.none():
            return {}

        aggs: DSLFragment = {}
        for aggregation in self._aggregations:
            aggs.update(aggregation.to_dict())
        return {"aggs": aggs}

    def merge(self, other: "Aggregations") -> Self:
        """Return a new collection with clones of both, the receiver's first."""
        if not isinstance(other, Aggregations):  # pyright:ignore[reportUnnecessaryIsInstance] Runtime guard for untyped callers
            raise TypeError(
                f"Cannot merge {type(self).__name__} with {type(other).__name__}"
            )

        merged = type(self)()
        merged._aggregations = [
            aggregation.clone()
            for aggregation in (*self._aggregations, *other._aggregations)
        ]
        log.bind(builder=type(self).__name__).debug(
            f"Merged {len(self)} aggregation(s) with {len(other)} aggregation(s)"
        )
        return merged

    def clone(self) -> Self:
        """Return a deep copy of the collection."""
        copy = type(self)()
        copy._aggregations = [aggregation.clone() for aggregation in self._aggregations]
        return copy

    def __len__(self) -> int:
        """Number of aggregations, duplicates included."""
        return len(self._aggregations)

    def __iter__(self) -> Iterator[Aggregation]:
        """Iterate over the aggregations in insertion order."""
        return iter(self._aggregations)
