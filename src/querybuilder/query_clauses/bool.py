from collections.abc import Callable
from typing import Any, Self, override

from loguru import logger as log

from querybuilder.errors import QueryBuilderError
from querybuilder.query_clauses.match_clauses import MatchClauses
from querybuilder.query_clauses.query_clause import QueryClause
from querybuilder.types.general import BoolRole, DSLFragment

BoolBuilder = Callable[["Bool"], Any]


class Bool(MatchClauses, QueryClause):
    """A compound clause holding ordered sub-clause lists keyed by role.

    Roles are opened with `must`, `filter`, `should` or `must_not`; clauses
    added afterwards (through `add` or any leaf constructor) go to the role
    opened most recently:

        bool_clause.must().term(field="user", value="kimchy").range(
            field="age", gte=10
        )
        bool_clause.must_not(lambda b: b.exists(field="deleted_at"))

    Unlike leaf clauses a Bool is mutable, so clones copy its role lists.
    """

    def __init__(self) -> None:
        """Create a Bool with no roles opened."""
        self._query_clauses: dict[BoolRole, list[QueryClause]] = {}
        self._current_role: BoolRole | None = None

    @property
    def query_clauses(self) -> dict[BoolRole, list[QueryClause]]:
        """The sub-clauses keyed by role, in the order roles were opened."""
        return self._query_clauses

    def must(self, builder: BoolBuilder | None = None) -> Self:
        """Open (or reuse) the `must` role."""
        return self._add_boolean_clause("must", builder)

    def filter(self, builder: BoolBuilder | None = None) -> Self:
        """Open (or reuse) the `filter` role."""
        return self._add_boolean_clause("filter", builder)

    def should(self, builder: BoolBuilder | None = None) -> Self:
        """Open (or reuse) the `should` role."""
        return self._add_boolean_clause("should", builder)

    def must_not(self, builder: BoolBuilder | None = None) -> Self:
        """Open (or reuse) the `must_not` role."""
        return self._add_boolean_clause("must_not", builder)

    @override
    def add(self, query_clause: QueryClause) -> Self:
        """Append a clause to the role opened most recently."""
        if self._current_role is None:
            raise QueryBuilderError(
                "Please call must, filter, should or must_not in order "
                "to add query clauses inside a boolean clause"
            )
        self._query_clauses[self._current_role].append(query_clause)
        return self

    @override
    def to_dict(self) -> DSLFragment:
        if not self._query_clauses:
            raise QueryBuilderError(
                "A boolean clause has been defined but no boolean sub-clauses were added"
            )
        if not all(self._query_clauses.values()):
            raise QueryBuilderError(
                "A boolean clause and a sub-clause were defined but no match clauses were added"
            )
        return {
            "bool": {
                role: [clause.to_dict() for clause in clauses]
                for role, clauses in self._query_clauses.items()
            }
        }

    @override
    def clone(self) -> Self:
        copy = type(self)()
        copy._query_clauses = {
            role: [clause.clone() for clause in clauses]
            for role, clauses in self._query_clauses.items()
        }
        return copy

    def merge_in_place(self, other: QueryClause) -> Self:
        """Merge another clause into this one.

        Another Bool has its roles unioned into this one, with its clauses
        (cloned) appended after the receiver's for every role both share. Any
        other clause is cloned and appended to the `must` role, which becomes
        the role later clauses are added to.
        """
        if isinstance(other, Bool):
            self._merge_clauses(other)
        elif isinstance(other, QueryClause):  # pyright:ignore[reportUnnecessaryIsInstance] Runtime guard for untyped callers
            self.must().add(other.clone())
        else:
            raise self._cannot_merge_error(other)
        log.bind(builder=type(self).__name__).trace(
            f"Merged {type(other).__name__} into Bool"
        )
        return self

    def merge(self, other: QueryClause) -> Self:
        """Return a new Bool combining this one and `other`, see `merge_in_place`."""
        if not isinstance(other, QueryClause):  # pyright:ignore[reportUnnecessaryIsInstance]
            raise self._cannot_merge_error(other)
        return self.clone().merge_in_place(other)

    def _add_boolean_clause(self, role: BoolRole, builder: BoolBuilder | None) -> Self:
        self._query_clauses.setdefault(role, [])
        self._current_role = role
        if builder is not None:
            builder(self)
        return self

    def _merge_clauses(self, other: "Bool") -> None:
        for role, clauses in other.query_clauses.items():
            # Materialized first, `other` may be the receiver itself.
            cloned = [clause.clone() for clause in clauses]
            self._query_clauses.setdefault(role, []).extend(cloned)

    def _cannot_merge_error(self, other: object) -> TypeError:
        return TypeError(f"Cannot merge {type(self).__name__} with {type(other).__name__}")
