from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, ClassVar, NoReturn, Self, overload, override

from querybuilder.errors import AggregationsError
from querybuilder.types.general import DSLFragment

if TYPE_CHECKING:
    from querybuilder.aggregations.aggregations import Aggregations


class Aggregation(ABC):
    """A named computation over the matched documents.

    `name` is the key the engine reports the result under. Subclasses only
    describe their own body in `body`; `to_dict` wraps it under the name.
    """

    name: str

    @abstractmethod
    def body(self) -> DSLFragment:
        """The aggregation's own fragment, keyed by its type."""

    @abstractmethod
    def clone(self) -> Self:
        """Return an independent copy of the aggregation."""

    def to_dict(self) -> DSLFragment:
        """Serialize the aggregation as `{name: fragment}`."""
        return {self.name: self.body()}

    @override
    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class NestableAggregation(Aggregation, ABC):
    """A bucket aggregation, which may run sub-aggregations per bucket."""

    def __init__(self, name: str) -> None:
        """Create an aggregation with no sub-aggregations yet."""
        self.name = name
        self._aggregations: Aggregations | None = None

    @overload
    def aggs(self) -> Aggregations: ...

    @overload
    def aggs(self, builder: Callable[[Aggregations], Any]) -> Self: ...

    def aggs(
        self, builder: Callable[[Aggregations], Any] | None = None
    ) -> Aggregations | Self:
        """Access the nested aggregations, creating the container on first use.

        Without a builder the container is returned. With one, the builder
        is called with the container and the aggregation itself is returned,
        so that definitions can be chained.
        """
        if self._aggregations is None:
            from querybuilder.aggregations.aggregations import Aggregations  # noqa: PLC0415

            self._aggregations = Aggregations()

        if builder is None:
            return self._aggregations
        builder(self._aggregations)
        return self

    @override
    def to_dict(self) -> DSLFragment:
        fragment = self.body()
        if self._aggregations is not None:
            fragment.update(self._aggregations.to_dict())
        return {self.name: fragment}

    def _copy_children_to(self, copy: Self) -> Self:
        if self._aggregations is not None:
            copy._aggregations = self._aggregations.clone()
        return copy


class MetricAggregation(Aggregation, ABC):
    """A metric aggregation, which produces values and admits no children.

    Subclasses are frozen dataclasses: immutable once built, so clones and
    merges share them instead of copying.
    """

    display_name: ClassVar[str]

    def aggs(self, builder: Callable[[Aggregations], Any] | None = None) -> NoReturn:
        """Always fails, metric aggregations cannot have nested aggregations."""
        raise AggregationsError(
            f"The {self.display_name} aggregation cannot have nested aggregations."
        )

    @override
    def clone(self) -> Self:
        return self
