from typing import Annotated, Any, Literal

from pydantic import BeforeValidator

JsonSerializable = (
    dict[str, "JsonSerializable"]
    | list["JsonSerializable"]
    | str
    | int
    | float
    | bool
    | None
)

LogLevel = Annotated[
    Literal[
        "TRACE",
        "DEBUG",
        "INFO",
        "SUCCESS",
        "WARNING",
        "ERROR",
        "CRITICAL",
    ],
    BeforeValidator(lambda a: str(a).upper()),
]

# A serialized DSL fragment, as handed to the search engine.
DSLFragment = dict[str, Any]

# Accepted shapes for `_source` filtering, `True` is not one of them.
SourceFilter = Literal[False] | str | list[str] | dict[str, Any]

SlotState = Literal["empty", "single", "boolean"]

BoolRole = Literal["must", "filter", "should", "must_not"]
