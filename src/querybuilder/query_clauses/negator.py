from loguru import logger as log

from querybuilder.query_clauses.bool import Bool
from querybuilder.query_clauses.leaves import MatchAll, MatchNone
from querybuilder.query_clauses.query_clause import QueryClause

INVERSE_CLAUSES: dict[type[QueryClause], type[QueryClause]] = {
    MatchAll: MatchNone,
    MatchNone: MatchAll,
}


def negate(query_clause: QueryClause) -> QueryClause:
    """Compute the logical inverse of a clause.

    `match_all` and `match_none` invert into each other. Any other clause is
    wrapped, by reference, in the `must_not` role of a new Bool; clone the
    clause beforehand if the result must not share it. No simplification is
    attempted, so negating twice nests `must_not` clauses rather than
    restoring the original clause.
    """
    negator_log = log.bind(builder="negate")
    inverse = INVERSE_CLAUSES.get(type(query_clause))
    if inverse is not None:
        negator_log.trace(
            f"Negated {type(query_clause).__name__} into {inverse.__name__}"
        )
        return inverse()

    negator_log.trace(f"Negated {type(query_clause).__name__} through must_not")
    return Bool().must_not().add(query_clause)
