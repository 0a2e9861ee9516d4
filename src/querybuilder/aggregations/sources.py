from collections.abc import Iterator
from dataclasses import KW_ONLY, dataclass
from typing import Self

from querybuilder.types.dsl import ESTermsSource
from querybuilder.types.general import DSLFragment


@dataclass(frozen=True, slots=True)
class TermsSource:
    """A `terms` value source for a composite aggregation."""

    name: str
    _: KW_ONLY
    field: str
    order: str | None = None
    missing_bucket: bool | None = None
    missing_order: str | None = None

    def to_dict(self) -> DSLFragment:
        """Serialize as `{name: {"terms": {...}}}`, omitting unset options."""
        terms = ESTermsSource(field=self.field)
        if self.order is not None:
            terms["order"] = self.order
        if self.missing_bucket is not None:
            terms["missing_bucket"] = self.missing_bucket
        if self.missing_order is not None:
            terms["missing_order"] = self.missing_order
        return {self.name: {"terms": terms}}


class Sources:
    """The ordered value sources of a composite aggregation."""

    def __init__(self) -> None:
        """Create an empty list of sources."""
        self._sources: list[TermsSource] = []

    def terms(
        self,
        name: str,
        *,
        field: str,
        order: str | None = None,
        missing_bucket: bool | None = None,
        missing_order: str | None = None,
    ) -> Self:
        """Append a `terms` source."""
        self._sources.append(
            TermsSource(
                name,
                field=field,
                order=order,
                missing_bucket=missing_bucket,
                missing_order=missing_order,
            )
        )
        return self

    def to_list(self) -> list[DSLFragment]:
        """Serialize every source, in insertion order."""
        return [source.to_dict() for source in self._sources]

    def clone(self) -> Self:
        """Return an independent copy; sources themselves are immutable."""
        copy = type(self)()
        copy._sources = list(self._sources)
        return copy

    def __len__(self) -> int:
        """Number of sources."""
        return len(self._sources)

    def __iter__(self) -> Iterator[TermsSource]:
        """Iterate over the sources."""
        return iter(self._sources)
