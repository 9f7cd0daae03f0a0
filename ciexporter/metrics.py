"""Metric records and their identity keys."""

from __future__ import annotations

import zlib
from dataclasses import dataclass, field
from enum import IntEnum


class MetricKind(IntEnum):
    """Every metric the exporter can produce."""

    COVERAGE = 0
    DURATION_SECONDS = 1
    ENVIRONMENT_BEHIND_COMMITS_COUNT = 2
    ENVIRONMENT_BEHIND_DURATION_SECONDS = 3
    ENVIRONMENT_DEPLOYMENT_COUNT = 4
    ENVIRONMENT_DEPLOYMENT_DURATION_SECONDS = 5
    ENVIRONMENT_DEPLOYMENT_JOB_ID = 6
    ENVIRONMENT_DEPLOYMENT_STATUS = 7
    ENVIRONMENT_DEPLOYMENT_TIMESTAMP = 8
    ENVIRONMENT_INFORMATION = 9
    ID = 10
    JOB_ARTIFACT_SIZE_BYTES = 11
    JOB_DURATION_SECONDS = 12
    JOB_ID = 13
    JOB_QUEUED_DURATION_SECONDS = 14
    JOB_RUN_COUNT = 15
    JOB_STATUS = 16
    JOB_TIMESTAMP = 17
    QUEUED_DURATION_SECONDS = 18
    RUN_COUNT = 19
    STATUS = 20
    TIMESTAMP = 21
    TEST_REPORT_TOTAL_TIME = 22
    TEST_REPORT_TOTAL_COUNT = 23
    TEST_REPORT_SUCCESS_COUNT = 24
    TEST_REPORT_FAILED_COUNT = 25
    TEST_REPORT_SKIPPED_COUNT = 26
    TEST_REPORT_ERROR_COUNT = 27
    TEST_SUITE_TOTAL_TIME = 28
    TEST_SUITE_TOTAL_COUNT = 29
    TEST_SUITE_SUCCESS_COUNT = 30
    TEST_SUITE_FAILED_COUNT = 31
    TEST_SUITE_SKIPPED_COUNT = 32
    TEST_SUITE_ERROR_COUNT = 33
    TEST_CASE_EXECUTION_TIME = 34
    TEST_CASE_STATUS = 35


_K = MetricKind

# Which labels identify a metric, depending on its kind.
_KEY_LABELS: dict[frozenset[MetricKind], tuple[str, ...]] = {
    frozenset({
        _K.COVERAGE, _K.DURATION_SECONDS, _K.ID, _K.QUEUED_DURATION_SECONDS,
        _K.RUN_COUNT, _K.STATUS, _K.TIMESTAMP, _K.TEST_REPORT_TOTAL_COUNT,
        _K.TEST_REPORT_ERROR_COUNT, _K.TEST_REPORT_FAILED_COUNT,
        _K.TEST_REPORT_SKIPPED_COUNT, _K.TEST_REPORT_SUCCESS_COUNT,
        _K.TEST_REPORT_TOTAL_TIME,
    }): ("project", "kind", "ref", "source"),
    frozenset({
        _K.JOB_ARTIFACT_SIZE_BYTES, _K.JOB_DURATION_SECONDS, _K.JOB_ID,
        _K.JOB_QUEUED_DURATION_SECONDS, _K.JOB_RUN_COUNT, _K.JOB_STATUS,
        _K.JOB_TIMESTAMP,
    }): ("project", "kind", "ref", "stage", "tag_list", "job_name", "failure_reason"),
    frozenset({
        _K.ENVIRONMENT_BEHIND_COMMITS_COUNT, _K.ENVIRONMENT_BEHIND_DURATION_SECONDS,
        _K.ENVIRONMENT_DEPLOYMENT_COUNT, _K.ENVIRONMENT_DEPLOYMENT_DURATION_SECONDS,
        _K.ENVIRONMENT_DEPLOYMENT_JOB_ID, _K.ENVIRONMENT_DEPLOYMENT_STATUS,
        _K.ENVIRONMENT_DEPLOYMENT_TIMESTAMP, _K.ENVIRONMENT_INFORMATION,
    }): ("project", "environment"),
    frozenset({
        _K.TEST_SUITE_ERROR_COUNT, _K.TEST_SUITE_FAILED_COUNT,
        _K.TEST_SUITE_SKIPPED_COUNT, _K.TEST_SUITE_SUCCESS_COUNT,
        _K.TEST_SUITE_TOTAL_COUNT, _K.TEST_SUITE_TOTAL_TIME,
    }): ("project", "kind", "ref", "test_suite_name"),
    frozenset({
        _K.TEST_CASE_EXECUTION_TIME, _K.TEST_CASE_STATUS,
    }): ("project", "kind", "ref", "test_suite_name", "test_case_name", "test_case_classname"),
}

_STATUS_KINDS = frozenset({
    _K.JOB_STATUS, _K.ENVIRONMENT_DEPLOYMENT_STATUS, _K.STATUS, _K.TEST_CASE_STATUS,
})


@dataclass
class Metric:
    """A single metric value with its labels."""

    kind: MetricKind
    labels: dict[str, str] = field(default_factory=dict)
    value: float = 0.0

    def key(self) -> str:
        """Return a stable identifier built from the kind and identifying labels."""
        kind = MetricKind(self.kind)
        raw = str(int(kind))
        for kinds, names in _KEY_LABELS.items():
            if kind in kinds:
                raw += "[" + " ".join(self.labels.get(name, "") for name in names) + "]"
                break
        if kind in _STATUS_KINDS:
            raw += self.labels.get("status", "")
        return str(zlib.crc32(raw.encode("utf-8")))