"""A store kept in Redis, shared by every exporter process using the same server."""

from __future__ import annotations

import dataclasses
from datetime import timedelta
from enum import Enum
from typing import Any, Mapping, TypeVar

import msgpack
import redis

from ciexporter.entities import Deployment, Environment, Project, Ref, RefKind
from ciexporter.metrics import Metric, MetricKind
from ciexporter.pipelines import Job, Pipeline, Runner, TestCase, TestReport, TestSuite
from ciexporter.store.base import Store
from ciexporter.tasks import TaskType

_PROJECTS_KEY = "projects"
_ENVIRONMENTS_KEY = "environments"
_REFS_KEY = "refs"
_METRICS_KEY = "metrics"
_TASK_KEY = "task"
_TASKS_EXECUTED_COUNT_KEY = "tasksExecutedCount"
_KEEPALIVE_KEY = "keepalive"

T = TypeVar("T")


def redis_queue_key(task_type: TaskType | str, task_uuid: str) -> str:
    """Return the Redis key that marks a task as queued."""
    return f"{_TASK_KEY}:{task_type}:{task_uuid}"


def _text(value: Any) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else str(value)


def _plain(value: Any) -> Any:
    """Turn entities into structures msgpack can pack."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _plain(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items()}
    return value


def _pack(entity: Any) -> bytes:
    return msgpack.packb(_plain(entity), use_bin_type=True)


def _unpack(raw: bytes | str) -> dict[str, Any]:
    if isinstance(raw, str):
        raw = raw.encode("latin-1")
    return msgpack.unpackb(raw, raw=False)


def _build(cls: type[T], data: Mapping[str, Any], **nested: Any) -> T:
    names = {f.name for f in dataclasses.fields(cls)}
    kwargs = {k: v for k, v in data.items() if k in names}
    kwargs.update(nested)
    return cls(**kwargs)


def _project_from(data: Mapping[str, Any]) -> Project:
    return _build(Project, data)


def _deployment_from(data: Mapping[str, Any]) -> Deployment:
    kind = data.get("ref_kind")
    return _build(Deployment, data, ref_kind=RefKind(kind) if kind else None)


def _environment_from(data: Mapping[str, Any]) -> Environment:
    return _build(
        Environment,
        data,
        latest_deployment=_deployment_from(data.get("latest_deployment") or {}),
    )


def _test_suite_from(data: Mapping[str, Any]) -> TestSuite:
    return _build(
        TestSuite,
        data,
        test_cases=[_build(TestCase, c) for c in data.get("test_cases") or []],
    )


def _pipeline_from(data: Mapping[str, Any]) -> Pipeline:
    report = data.get("test_report") or {}
    return _build(
        Pipeline,
        data,
        test_report=_build(
            TestReport,
            report,
            test_suites=[_test_suite_from(s) for s in report.get("test_suites") or []],
        ),
    )


def _job_from(data: Mapping[str, Any]) -> Job:
    return _build(Job, data, runner=_build(Runner, data.get("runner") or {}))


def _ref_from(data: Mapping[str, Any]) -> Ref:
    return _build(
        Ref,
        data,
        project=_project_from(data.get("project") or {}),
        kind=RefKind(data["kind"]),
        latest_pipeline=_pipeline_from(data.get("latest_pipeline") or {}),
        latest_jobs={k: _job_from(v) for k, v in (data.get("latest_jobs") or {}).items()},
    )


def _metric_from(data: Mapping[str, Any]) -> Metric:
    return _build(
        Metric,
        data,
        kind=MetricKind(data["kind"]),
        labels=dict(data.get("labels") or {}),
    )


class RedisStore(Store):
    """Store backed by Redis hashes, with task locks that survive dead processes."""

    def __init__(self, client: redis.Redis) -> None:
        self.client = client

    # Generic hash helpers

    def _set(self, hash_name: str, key: str, entity: Any) -> None:
        self.client.hset(hash_name, key, _pack(entity))

    def _del(self, hash_name: str, key: str) -> None:
        self.client.hdel(hash_name, key)

    def _exists(self, hash_name: str, key: str) -> bool:
        return bool(self.client.hexists(hash_name, key))

    def _get(self, hash_name: str, key: str, default: T, decode: Any) -> T:
        if not self._exists(hash_name, key):
            return default
        raw = self.client.hget(hash_name, key)
        if raw is None:
            return default
        return decode(_unpack(raw))

    def _all(self, hash_name: str, decode: Any) -> dict[str, Any]:
        return {
            _text(key): decode(_unpack(raw))
            for key, raw in self.client.hgetall(hash_name).items()
        }

    def _count(self, hash_name: str) -> int:
        return int(self.client.hlen(hash_name))

    # Projects

    def set_project(self, project: Project) -> None:
        self._set(_PROJECTS_KEY, project.key(), project)

    def del_project(self, key: str) -> None:
        self._del(_PROJECTS_KEY, key)

    def get_project(self, project: Project) -> Project:
        return self._get(_PROJECTS_KEY, project.key(), project, _project_from)

    def project_exists(self, key: str) -> bool:
        return self._exists(_PROJECTS_KEY, key)

    def projects(self) -> dict[str, Project]:
        return self._all(_PROJECTS_KEY, _project_from)

    def projects_count(self) -> int:
        return self._count(_PROJECTS_KEY)

    # Environments

    def set_environment(self, environment: Environment) -> None:
        self._set(_ENVIRONMENTS_KEY, environment.key(), environment)

    def del_environment(self, key: str) -> None:
        self._del(_ENVIRONMENTS_KEY, key)

    def get_environment(self, environment: Environment) -> Environment:
        return self._get(_ENVIRONMENTS_KEY, environment.key(), environment, _environment_from)

    def environment_exists(self, key: str) -> bool:
        return self._exists(_ENVIRONMENTS_KEY, key)

    def environments(self) -> dict[str, Environment]:
        return self._all(_ENVIRONMENTS_KEY, _environment_from)

    def environments_count(self) -> int:
        return self._count(_ENVIRONMENTS_KEY)

    # Refs

    def set_ref(self, ref: Ref) -> None:
        self._set(_REFS_KEY, ref.key(), ref)

    def del_ref(self, key: str) -> None:
        self._del(_REFS_KEY, key)

    def get_ref(self, ref: Ref) -> Ref:
        return self._get(_REFS_KEY, ref.key(), ref, _ref_from)

    def ref_exists(self, key: str) -> bool:
        return self._exists(_REFS_KEY, key)

    def refs(self) -> dict[str, Ref]:
        return self._all(_REFS_KEY, _ref_from)

    def refs_count(self) -> int:
        return self._count(_REFS_KEY)

    # Metrics

    def set_metric(self, metric: Metric) -> None:
        self._set(_METRICS_KEY, metric.key(), metric)

    def del_metric(self, key: str) -> None:
        self._del(_METRICS_KEY, key)

    def get_metric(self, metric: Metric) -> Metric:
        return self._get(_METRICS_KEY, metric.key(), metric, _metric_from)

    def metric_exists(self, key: str) -> bool:
        return self._exists(_METRICS_KEY, key)

    def metrics(self) -> dict[str, Metric]:
        return self._all(_METRICS_KEY, _metric_from)

    def metrics_count(self) -> int:
        return self._count(_METRICS_KEY)

    # Keepalive

    def set_keepalive(self, uuid: str, ttl: float | timedelta) -> bool:
        """Mark the process *uuid* as alive for *ttl*; return False if already marked."""
        seconds = ttl.total_seconds() if isinstance(ttl, timedelta) else float(ttl)
        key = f"{_KEEPALIVE_KEY}:{uuid}"
        if seconds > 0:
            result = self.client.set(key, "", nx=True, px=max(1, int(seconds * 1000)))
        else:
            result = self.client.set(key, "", nx=True)
        return bool(result)

    def keepalive_exists(self, uuid: str) -> bool:
        """Tell whether the process *uuid* is still marked alive."""
        return self.client.exists(f"{_KEEPALIVE_KEY}:{uuid}") == 1

    # Tasks

    def queue_task(self, task_type: TaskType | str, task_uuid: str, process_uuid: str) -> bool:
        """Mark a task as queued by *process_uuid*; return False if another live process holds it."""
        key = redis_queue_key(task_type, task_uuid)
        if self.client.set(key, process_uuid, nx=True):
            return True

        raw_owner = self.client.get(key)
        if raw_owner is None:
            raise redis.RedisError(f"task lock {key} vanished while being read")
        owner = _text(raw_owner)
        if owner != process_uuid and not self.keepalive_exists(owner):
            self.client.set(key, process_uuid)
            return True
        return False

    def unqueue_task(self, task_type: TaskType | str, task_uuid: str) -> None:
        if self.client.delete(redis_queue_key(task_type, task_uuid)) > 0:
            self.client.incr(_TASKS_EXECUTED_COUNT_KEY)

    def currently_queued_tasks_count(self) -> int:
        return sum(1 for _ in self.client.scan_iter(match=f"{_TASK_KEY}:*"))

    def executed_tasks_count(self) -> int:
        """Return the number of tasks executed so far, 0 before the first one."""
        raw = self.client.get(_TASKS_EXECUTED_COUNT_KEY)
        if raw is None:
            return 0
        return int(_text(raw))