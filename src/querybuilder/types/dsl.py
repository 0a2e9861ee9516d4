from typing import Any, NotRequired, TypedDict

from querybuilder.types.general import DSLFragment, SourceFilter


class ESCollapse(TypedDict):
    """An Elasticsearch field collapse clause."""

    field: str


class ESScript(TypedDict):
    """An Elasticsearch script object."""

    source: str
    lang: str
    params: NotRequired[dict[str, Any]]


# `from` is a keyword, hence the functional form.
ESPayload = TypedDict(
    "ESPayload",
    {
        "from": NotRequired[int],
        "size": NotRequired[int],
        "_source": NotRequired[SourceFilter],
        "query": DSLFragment,
        "sort": NotRequired[list[dict[str, dict[str, Any]]]],
        "collapse": NotRequired[ESCollapse],
        "aggs": NotRequired[dict[str, DSLFragment]],
    },
)


class ESTermsSource(TypedDict):
    """A `terms` value source of a composite aggregation."""

    field: str
    order: NotRequired[str]
    missing_bucket: NotRequired[bool]
    missing_order: NotRequired[str]
