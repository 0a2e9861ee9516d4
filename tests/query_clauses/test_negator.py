from querybuilder.query_clauses.bool import Bool
from querybuilder.query_clauses.leaves import MatchAll, MatchNone, Term
from querybuilder.query_clauses.negator import negate


def test_match_all_becomes_match_none() -> None:
    assert isinstance(negate(MatchAll()), MatchNone)


def test_match_none_becomes_match_all() -> None:
    assert isinstance(negate(MatchNone()), MatchAll)


def test_other_clauses_are_wrapped_in_must_not() -> None:
    term = Term(field="user", value="kimchy")

    negated = negate(term)

    assert isinstance(negated, Bool)
    assert negated.query_clauses == {"must_not": [term]}
    assert negated.query_clauses["must_not"][0] is term


def test_bool_is_wrapped_by_reference() -> None:
    bool_clause = Bool().must().term(field="user", value="kimchy")

    negated = negate(bool_clause)

    assert isinstance(negated, Bool)
    assert negated.query_clauses["must_not"][0] is bool_clause


def test_double_negation_nests() -> None:
    term = Term(field="user", value="kimchy")

    twice = negate(negate(term))

    assert twice.to_dict() == {
        "bool": {
            "must_not": [
                {"bool": {"must_not": [{"term": {"user": {"value": "kimchy"}}}]}}
            ]
        }
    }
    assert twice.to_dict() != term.to_dict()
