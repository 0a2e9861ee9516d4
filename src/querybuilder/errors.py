class QueryBuilderError(Exception):
    """A query was composed in a way that cannot be serialized."""


class AggregationsError(QueryBuilderError):
    """An aggregation was composed in a way the search engine does not allow."""
