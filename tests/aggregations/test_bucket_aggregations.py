import pytest

from querybuilder.aggregations.buckets import (
    Composite,
    DateHistogram,
    Filter,
    Terms,
    TopHits,
)
from querybuilder.aggregations.sources import Sources, TermsSource
from querybuilder.errors import AggregationsError
from querybuilder.script import Script

JOB_SCRIPT = Script(source="doc['job.name'].value", lang="painless")


def test_terms_by_field() -> None:
    aggregation = Terms("build_jobs", field="job.name", size=5)

    assert aggregation.to_dict() == {
        "build_jobs": {"terms": {"field": "job.name", "size": 5}}
    }


def test_terms_by_script_with_order() -> None:
    aggregation = Terms("build_jobs", script=JOB_SCRIPT, order={"_count": "desc"})

    assert aggregation.to_dict() == {
        "build_jobs": {
            "terms": {
                "script": {"source": "doc['job.name'].value", "lang": "painless"},
                "order": {"_count": "desc"},
            }
        }
    }


@pytest.mark.parametrize(
    "field,script",
    [(None, None), ("job.name", JOB_SCRIPT), ("", None)],
    ids=["neither", "both", "empty field"],
)
def test_terms_requires_field_or_script(field: str | None, script: Script | None) -> None:
    with pytest.raises(ValueError, match="Either 'field' or 'script' must be provided"):
        Terms("build_jobs", field=field, script=script)


def test_terms_with_nested_aggregation() -> None:
    aggregation = Terms("build_jobs", field="job.name").aggs(
        lambda a: a.avg("avg_runtime", field="runtime")
    )

    assert isinstance(aggregation, Terms)
    assert aggregation.to_dict() == {
        "build_jobs": {
            "terms": {"field": "job.name"},
            "aggs": {"avg_runtime": {"avg": {"field": "runtime"}}},
        }
    }


def test_aggs_without_builder_returns_container() -> None:
    aggregation = Terms("build_jobs", field="job.name")
    container = aggregation.aggs()

    container.max("slowest", field="runtime")

    assert aggregation.aggs() is container
    assert aggregation.to_dict()["build_jobs"]["aggs"] == {
        "slowest": {"max": {"field": "runtime"}}
    }


def test_aggs_accessed_but_empty() -> None:
    aggregation = Terms("build_jobs", field="job.name")
    aggregation.aggs()

    assert aggregation.to_dict() == {"build_jobs": {"terms": {"field": "job.name"}}}


def test_terms_clone_is_independent() -> None:
    order = {"_count": "desc"}
    aggregation = Terms("build_jobs", field="job.name", order=order)
    aggregation.aggs().avg("avg_runtime", field="runtime")

    clone = aggregation.clone()
    clone.aggs().max("slowest", field="runtime")
    order["_count"] = "asc"

    assert clone is not aggregation
    assert aggregation.to_dict()["build_jobs"]["aggs"] == {
        "avg_runtime": {"avg": {"field": "runtime"}}
    }
    assert clone.to_dict()["build_jobs"]["terms"]["order"] == {"_count": "desc"}
    assert len(clone.aggs()) == 2


def test_terms_serialization_does_not_expose_order() -> None:
    aggregation = Terms("build_jobs", field="job.name", order={"_key": "asc"})

    aggregation.to_dict()["build_jobs"]["terms"]["order"]["_key"] = "desc"

    assert aggregation.order == {"_key": "asc"}


def test_top_hits() -> None:
    aggregation = TopHits("latest", size=3)

    assert aggregation.to_dict() == {"latest": {"top_hits": {"size": 3}}}


def test_top_hits_clone_keeps_children() -> None:
    aggregation = TopHits("latest", size=3)
    aggregation.aggs().cardinality("jobs", field="job.name")

    clone = aggregation.clone()

    assert clone.to_dict() == aggregation.to_dict()
    assert clone.aggs() is not aggregation.aggs()


def test_date_histogram() -> None:
    aggregation = DateHistogram(
        "per_day", field="started_at", calendar_interval="day", format="yyyy-MM-dd"
    )

    assert aggregation.to_dict() == {
        "per_day": {
            "date_histogram": {
                "field": "started_at",
                "calendar_interval": "day",
                "format": "yyyy-MM-dd",
            }
        }
    }


def test_date_histogram_without_format() -> None:
    aggregation = DateHistogram("per_week", field="started_at", calendar_interval="week")

    assert aggregation.to_dict() == {
        "per_week": {
            "date_histogram": {"field": "started_at", "calendar_interval": "week"}
        }
    }


def test_date_histogram_clone_is_independent() -> None:
    aggregation = DateHistogram("per_day", field="started_at", calendar_interval="day")

    clone = aggregation.clone()
    clone.aggs().sum("total", field="runtime")

    assert aggregation.to_dict() == {
        "per_day": {"date_histogram": {"field": "started_at", "calendar_interval": "day"}}
    }


def test_filter() -> None:
    aggregation = Filter("failed", lambda q: q.term(field="status", value="failed"))

    assert aggregation.to_dict() == {
        "failed": {"filter": {"term": {"status": {"value": "failed"}}}}
    }


def test_filter_with_empty_builder_matches_all() -> None:
    aggregation = Filter("everything", lambda _: None)

    assert aggregation.to_dict() == {"everything": {"filter": {"match_all": {}}}}


def test_filter_requires_builder() -> None:
    with pytest.raises(
        AggregationsError, match="The Filter aggregation must be initialized with a builder"
    ):
        Filter("failed")


def test_filter_with_nested_aggregation() -> None:
    aggregation = Filter(
        "failed", lambda q: q.boolean().must().term(field="status", value="failed")
    ).aggs(lambda a: a.value_count("runs", field="job.id"))

    assert aggregation.to_dict() == {
        "failed": {
            "filter": {"bool": {"must": [{"term": {"status": {"value": "failed"}}}]}},
            "aggs": {"runs": {"value_count": {"field": "job.id"}}},
        }
    }


def test_filter_clone_is_independent() -> None:
    aggregation = Filter(
        "failed", lambda q: q.boolean().must().term(field="status", value="failed")
    )

    clone = aggregation.clone()
    clone.query.boolean().must_not().exists(field="retried")

    assert aggregation.to_dict() == {
        "failed": {
            "filter": {"bool": {"must": [{"term": {"status": {"value": "failed"}}}]}}
        }
    }
    assert clone.query is not aggregation.query


def test_composite() -> None:
    aggregation = Composite(
        "jobs",
        lambda s: s.terms("job", field="job.name").terms(
            "status", field="status", order="desc", missing_bucket=True
        ),
        size=100,
    )

    assert aggregation.to_dict() == {
        "jobs": {
            "composite": {
                "sources": [
                    {"job": {"terms": {"field": "job.name"}}},
                    {
                        "status": {
                            "terms": {
                                "field": "status",
                                "order": "desc",
                                "missing_bucket": True,
                            }
                        }
                    },
                ],
                "size": 100,
            }
        }
    }


def test_composite_without_size() -> None:
    aggregation = Composite("jobs", lambda s: s.terms("job", field="job.name"))

    assert aggregation.to_dict() == {
        "jobs": {"composite": {"sources": [{"job": {"terms": {"field": "job.name"}}}]}}
    }


def test_composite_requires_builder() -> None:
    with pytest.raises(
        AggregationsError,
        match="The Composite aggregation must be initialized with a builder",
    ):
        Composite("jobs", size=10)


def test_composite_clone_is_independent() -> None:
    aggregation = Composite("jobs", lambda s: s.terms("job", field="job.name"))

    clone = aggregation.clone()
    clone.sources.terms("status", field="status")

    assert len(aggregation.sources) == 1
    assert len(clone.sources) == 2


def test_sources() -> None:
    sources = Sources().terms("job", field="job.name", missing_order="last")

    assert len(sources) == 1
    assert list(sources) == [TermsSource("job", field="job.name", missing_order="last")]
    assert sources.to_list() == [
        {"job": {"terms": {"field": "job.name", "missing_order": "last"}}}
    ]
