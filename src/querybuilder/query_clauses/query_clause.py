from abc import ABC, abstractmethod
from typing import Self

from querybuilder.types.general import DSLFragment


class QueryClause(ABC):
    """A single unit of search criteria, serializable to one DSL fragment.

    Leaf clauses are immutable, so cloning them returns the same instance;
    compound clauses override `clone` to copy their structure.
    """

    @abstractmethod
    def to_dict(self) -> DSLFragment:
        """Serialize the clause to its DSL fragment."""

    def clone(self) -> Self:
        """Return an independent copy of the clause."""
        return self
