"""Composable builder for Elasticsearch query DSL request bodies."""

from loguru import logger

from querybuilder.aggregations.aggregation import (
    Aggregation,
    MetricAggregation,
    NestableAggregation,
)
from querybuilder.aggregations.aggregations import Aggregations
from querybuilder.errors import AggregationsError, QueryBuilderError
from querybuilder.query_builder import QueryBuilder
from querybuilder.query_clauses.bool import Bool
from querybuilder.query_clauses.query_clause import QueryClause
from querybuilder.query_clauses.query_clauses import QueryClauses
from querybuilder.script import Script

# Silent until the embedding application opts in, see config.logger.
logger.disable("querybuilder")

__all__ = [
    "Aggregation",
    "Aggregations",
    "AggregationsError",
    "Bool",
    "MetricAggregation",
    "NestableAggregation",
    "QueryBuilder",
    "QueryBuilderError",
    "QueryClause",
    "QueryClauses",
    "Script",
]
