from abc import abstractmethod
from collections.abc import Sequence
from typing import Any, Self

from querybuilder.query_clauses.leaves import (
    Exists,
    MatchAll,
    MatchNone,
    MatchPhrase,
    QueryString,
    Range,
    Regexp,
    Term,
    Terms,
    Wildcard,
)
from querybuilder.query_clauses.query_clause import QueryClause


class MatchClauses:
    """Convenience constructors for every leaf clause.

    Each constructor builds the clause and hands it to `add`, returning
    whatever `add` returns so that calls can be chained.
    """

    @abstractmethod
    def add(self, query_clause: QueryClause) -> Self:
        """Install a clause into the receiver."""

    def term(self, *, field: str, value: Any) -> Self:
        """Add a `term` clause."""
        return self.add(Term(field=field, value=value))

    def terms(self, *, field: str, terms: Sequence[Any]) -> Self:
        """Add a `terms` clause."""
        return self.add(Terms(field=field, terms=terms))

    def range(self, **params: Any) -> Self:
        """Add a `range` clause, takes `field` plus gt, gte, lt and/or lte."""
        return self.add(Range(**params))

    def regexp(self, *, field: str, value: str) -> Self:
        """Add a `regexp` clause."""
        return self.add(Regexp(field=field, value=value))

    def wildcard(self, *, field: str, value: str) -> Self:
        """Add a `wildcard` clause."""
        return self.add(Wildcard(field=field, value=value))

    def exists(self, *, field: str) -> Self:
        """Add an `exists` clause."""
        return self.add(Exists(field=field))

    def match_phrase(self, *, field: str, phrase: str) -> Self:
        """Add a `match_phrase` clause."""
        return self.add(MatchPhrase(field=field, phrase=phrase))

    def query_string(
        self, *, query: str, fields: str | Sequence[str] | None = None
    ) -> Self:
        """Add a `query_string` clause."""
        return self.add(QueryString(query=query, fields=fields))

    def match_all(self) -> Self:
        """Add a `match_all` clause."""
        return self.add(MatchAll())

    def match_none(self) -> Self:
        """Add a `match_none` clause."""
        return self.add(MatchNone())

    def __lshift__(self, query_clause: QueryClause) -> Self:
        """Alias of `add`."""
        return self.add(query_clause)
