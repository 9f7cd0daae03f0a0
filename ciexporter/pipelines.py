"""Pipelines, jobs and test reports as seen by the exporter."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping

log = logging.getLogger(__name__)


def _unix_seconds(value: Any) -> float:
    """Whole seconds since the epoch for a datetime or ISO 8601 string; 0 if absent."""
    if value is None or value == "":
        return 0.0
    if isinstance(value, str):
        text = value[:-1] + "+00:00" if value.endswith("Z") else value
        value = datetime.fromisoformat(text)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return float(math.floor(value.timestamp()))


@dataclass
class Runner:
    description: str = ""


@dataclass
class Job:
    id: int = 0
    name: str = ""
    stage: str = ""
    timestamp: float = 0.0
    duration_seconds: float = 0.0
    queued_duration_seconds: float = 0.0
    status: str = ""
    tag_list: str = ""
    artifact_size: float = 0.0
    failure_reason: str = ""
    runner: Runner = field(default_factory=Runner)


@dataclass
class TestCase:
    __test__ = False

    name: str = ""
    classname: str = ""
    execution_time: float = 0.0
    status: str = ""


@dataclass
class TestSuite:
    __test__ = False

    name: str = ""
    total_time: float = 0.0
    total_count: int = 0
    success_count: int = 0
    failed_count: int = 0
    skipped_count: int = 0
    error_count: int = 0
    test_cases: list[TestCase] = field(default_factory=list)


@dataclass
class TestReport:
    __test__ = False

    total_time: float = 0.0
    total_count: int = 0
    success_count: int = 0
    failed_count: int = 0
    skipped_count: int = 0
    error_count: int = 0
    test_suites: list[TestSuite] = field(default_factory=list)


@dataclass
class Pipeline:
    id: int = 0
    coverage: float = 0.0
    timestamp: float = 0.0
    duration_seconds: float = 0.0
    queued_duration_seconds: float = 0.0
    source: str = ""
    status: str = ""
    variables: str = ""
    test_report: TestReport = field(default_factory=TestReport)


def job_from_api(data: Mapping[str, Any]) -> Job:
    """Build a Job from a job object returned by the GitLab API."""
    artifact_size = sum(float(a.get("size") or 0) for a in data.get("artifacts") or [])
    runner = data.get("runner") or {}
    return Job(
        id=data.get("id") or 0,
        name=data.get("name") or "",
        stage=data.get("stage") or "",
        timestamp=_unix_seconds(data.get("created_at")),
        duration_seconds=float(data.get("duration") or 0),
        queued_duration_seconds=float(data.get("queued_duration") or 0),
        status=data.get("status") or "",
        tag_list=",".join(data.get("tag_list") or []),
        artifact_size=artifact_size,
        failure_reason=data.get("failure_reason") or "",
        runner=Runner(description=runner.get("description") or ""),
    )


def _parse_coverage(raw: str) -> float:
    try:
        return float(raw)
    except ValueError as exc:
        log.warning(
            "could not parse coverage string returned from GitLab API '%s' into Float64: %s",
            raw,
            exc,
        )
        return 0.0


def pipeline_from_api(data: Mapping[str, Any]) -> Pipeline:
    """Build a Pipeline from a pipeline object returned by the GitLab API."""
    raw_coverage = data.get("coverage") or ""
    detailed = data.get("detailed_status")
    status = (detailed.get("group") or "") if detailed is not None else (data.get("status") or "")
    return Pipeline(
        id=data.get("id") or 0,
        coverage=_parse_coverage(raw_coverage) if raw_coverage else 0.0,
        timestamp=_unix_seconds(data.get("updated_at")),
        duration_seconds=float(data.get("duration") or 0),
        queued_duration_seconds=float(data.get("queued_duration") or 0),
        source=data.get("source") or "",
        status=status,
    )


def test_case_from_api(data: Mapping[str, Any]) -> TestCase:
    """Build a TestCase from a test case object returned by the GitLab API."""
    return TestCase(
        name=data.get("name") or "",
        classname=data.get("classname") or "",
        execution_time=float(data.get("execution_time") or 0),
        status=data.get("status") or "",
    )


def test_suite_from_api(data: Mapping[str, Any]) -> TestSuite:
    """Build a TestSuite from a test suite object returned by the GitLab API."""
    return TestSuite(
        name=data.get("name") or "",
        total_time=float(data.get("total_time") or 0),
        total_count=data.get("total_count") or 0,
        success_count=data.get("success_count") or 0,
        failed_count=data.get("failed_count") or 0,
        skipped_count=data.get("skipped_count") or 0,
        error_count=data.get("error_count") or 0,
        test_cases=[test_case_from_api(c) for c in data.get("test_cases") or []],
    )


def test_report_from_api(data: Mapping[str, Any]) -> TestReport:
    """Build a TestReport from a pipeline test report returned by the GitLab API."""
    return TestReport(
        total_time=float(data.get("total_time") or 0),
        total_count=data.get("total_count") or 0,
        success_count=data.get("success_count") or 0,
        failed_count=data.get("failed_count") or 0,
        skipped_count=data.get("skipped_count") or 0,
        error_count=data.get("error_count") or 0,
        test_suites=[test_suite_from_api(s) for s in data.get("test_suites") or []],
    )


test_case_from_api.__test__ = False  # type: ignore[attr-defined]
test_suite_from_api.__test__ = False  # type: ignore[attr-defined]
test_report_from_api.__test__ = False  # type: ignore[attr-defined]