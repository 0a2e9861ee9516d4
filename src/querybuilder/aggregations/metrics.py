from collections.abc import Mapping
from dataclasses import KW_ONLY, dataclass
from types import MappingProxyType
from typing import Any, ClassVar, override

from querybuilder.aggregations.aggregation import MetricAggregation
from querybuilder.script import Script
from querybuilder.types.general import DSLFragment


def _compact(fragment: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in fragment.items() if value is not None}


def _script_value(script: str | Script | None) -> Any:
    return script.to_dict() if isinstance(script, Script) else script


@dataclass(frozen=True, slots=True)
class Avg(MetricAggregation):
    """Average of a numeric field, `missing` substitutes absent values."""

    display_name: ClassVar[str] = "Avg"

    name: str
    _: KW_ONLY
    field: str
    missing: Any = None

    @override
    def body(self) -> DSLFragment:
        return {"avg": _compact({"field": self.field, "missing": self.missing})}


@dataclass(frozen=True, slots=True)
class Sum(MetricAggregation):
    """Sum of a numeric field, `missing` substitutes absent values."""

    display_name: ClassVar[str] = "Sum"

    name: str
    _: KW_ONLY
    field: str
    missing: Any = None

    @override
    def body(self) -> DSLFragment:
        return {"sum": _compact({"field": self.field, "missing": self.missing})}


@dataclass(frozen=True, slots=True)
class Max(MetricAggregation):
    """Maximum value of a numeric field."""

    display_name: ClassVar[str] = "Max"

    name: str
    _: KW_ONLY
    field: str

    @override
    def body(self) -> DSLFragment:
        return {"max": {"field": self.field}}


@dataclass(frozen=True, slots=True)
class ValueCount(MetricAggregation):
    """Number of values extracted from a field."""

    display_name: ClassVar[str] = "Value Count"

    name: str
    _: KW_ONLY
    field: str

    @override
    def body(self) -> DSLFragment:
        return {"value_count": {"field": self.field}}


@dataclass(frozen=True, slots=True)
class Cardinality(MetricAggregation):
    """Approximate count of distinct values of a field."""

    display_name: ClassVar[str] = "Cardinality"

    name: str
    _: KW_ONLY
    field: str

    @override
    def body(self) -> DSLFragment:
        return {"cardinality": {"field": self.field}}


@dataclass(frozen=True, slots=True)
class ScriptedMetric(MetricAggregation):
    """A metric computed by scripts run in the map/combine/reduce phases.

    Scripts may be given as inline source strings or as Script objects.
    """

    display_name: ClassVar[str] = "Scripted Metric"

    name: str
    _: KW_ONLY
    map_script: str | Script
    combine_script: str | Script
    reduce_script: str | Script
    init_script: str | Script | None = None

    @override
    def body(self) -> DSLFragment:
        return {
            "scripted_metric": _compact(
                {
                    "init_script": _script_value(self.init_script),
                    "map_script": _script_value(self.map_script),
                    "combine_script": _script_value(self.combine_script),
                    "reduce_script": _script_value(self.reduce_script),
                }
            )
        }


@dataclass(frozen=True, slots=True)
class BucketSelector(MetricAggregation):
    """A pipeline aggregation keeping the parent buckets its script accepts.

    `buckets_path` maps script variables to metric paths (or is a single
    path); a mapping is copied into a read-only view on construction.
    """

    display_name: ClassVar[str] = "Bucket Selector"

    name: str
    _: KW_ONLY
    buckets_path: str | Mapping[str, str]
    script: Script
    gap_policy: str | None = None

    def __post_init__(self) -> None:
        """Freeze a private copy of a mapping `buckets_path`."""
        if isinstance(self.buckets_path, Mapping):
            object.__setattr__(
                self, "buckets_path", MappingProxyType(dict(self.buckets_path))
            )

    @override
    def body(self) -> DSLFragment:
        buckets_path = (
            dict(self.buckets_path)
            if isinstance(self.buckets_path, Mapping)
            else self.buckets_path
        )
        return {
            "bucket_selector": _compact(
                {
                    "buckets_path": buckets_path,
                    "script": self.script.to_dict(),
                    "gap_policy": self.gap_policy,
                }
            )
        }
