from collections.abc import Callable
from typing import Any, Self, override

from loguru import logger as log

from querybuilder.errors import QueryBuilderError
from querybuilder.query_clauses.bool import Bool
from querybuilder.query_clauses.leaves import MatchAll
from querybuilder.query_clauses.match_clauses import MatchClauses
from querybuilder.query_clauses.negator import negate
from querybuilder.query_clauses.query_clause import QueryClause
from querybuilder.types.general import DSLFragment, SlotState


class QueryClauses(MatchClauses):
    """The `query` slot of a request: holds at most one top-level clause.

    The slot moves through three states. It starts `empty`; installing a
    clause makes it `single`, after which any further installation fails.
    `boolean()` is the only way to grow past one clause: it creates a Bool
    when the slot is empty, or reuses the one already installed, putting
    the slot in the `boolean` state.
    """

    def __init__(self) -> None:
        """Create an empty set of clauses, serializing as match_all."""
        self._top_level_clause: QueryClause | None = None

    @property
    def top_level_clause(self) -> QueryClause | None:
        """The clause occupying the slot, if any."""
        return self._top_level_clause

    @property
    def state(self) -> SlotState:
        """Which of the empty, single and boolean states the slot is in."""
        if self._top_level_clause is None:
            return "empty"
        if isinstance(self._top_level_clause, Bool):
            return "boolean"
        return "single"

    @property
    def is_empty(self) -> bool:
        """Whether no top-level clause has been installed."""
        return self._top_level_clause is None

    @property
    def is_boolean_query(self) -> bool:
        """Whether the top-level clause is a Bool."""
        return isinstance(self._top_level_clause, Bool)

    def boolean(self, builder: Callable[[Bool], Any] | None = None) -> Bool:
        """Return the top-level Bool, creating it if the slot is empty.

        When a builder is given it is called with the Bool before it is
        returned.
        """
        if isinstance(self._top_level_clause, Bool):
            clause = self._top_level_clause
        else:
            clause = Bool()
            self._replace_top_level_clause(clause)

        if builder is not None:
            builder(clause)
        return clause

    @override
    def add(self, query_clause: QueryClause) -> Self:
        """Install a clause as the top-level clause."""
        return self._replace_top_level_clause(query_clause)

    def to_dict(self) -> DSLFragment:
        """Serialize the top-level clause; an empty slot matches everything."""
        if self._top_level_clause is None:
            return MatchAll().to_dict()
        return self._top_level_clause.to_dict()

    def clone(self) -> Self:
        """Return an independent copy of the clauses."""
        copy = type(self)()
        if self._top_level_clause is not None:
            copy._top_level_clause = self._top_level_clause.clone()
        return copy

    def merge(self, other: "QueryClauses") -> "QueryClauses":
        """Combine two sets of clauses into a new one.

        When one side is empty the result is a clone of the other. Otherwise
        both top-level clauses are merged into a fresh Bool, receiver first:
        a leaf clause lands in `must`, while a Bool has its roles unioned in.
        """
        if not isinstance(other, QueryClauses):  # pyright:ignore[reportUnnecessaryIsInstance] Runtime guard for untyped callers
            raise TypeError(
                f"Cannot merge {type(self).__name__} with {type(other).__name__}"
            )

        if other.is_empty:
            return self.clone()
        if self.is_empty:
            return other.clone()

        merged = type(self)()
        bool_clause = merged.boolean()
        for clause in (self._top_level_clause, other.top_level_clause):
            if clause is not None:
                bool_clause.merge_in_place(clause)
        log.bind(builder=type(self).__name__).debug(
            f"Merged {self.state} query clauses with {other.state} ones"
        )
        return merged

    def negate_in_place(self) -> Self:
        """Replace the top-level clause with its logical inverse.

        With no clause installed the slot becomes match_none, the negation of
        "no constraint".
        """
        if self._top_level_clause is None:
            return self.match_none()
        self._top_level_clause = negate(self._top_level_clause)
        return self

    def negate(self) -> Self:
        """Return a negated copy, leaving the receiver untouched."""
        return self.clone().negate_in_place()

    def _replace_top_level_clause(self, query_clause: QueryClause) -> Self:
        if self._top_level_clause is not None:
            raise QueryBuilderError(
                "Queries can only have one top-level query clause, "
                "to use multiple clauses add a compound query, "
                "for example: `boolean()`"
            )
        self._top_level_clause = query_clause
        return self
