"""A store kept in the memory of the running process."""

from __future__ import annotations

import threading
from typing import Generic, TypeVar

from ciexporter.entities import Environment, Project, Ref
from ciexporter.metrics import Metric
from ciexporter.store.base import Store
from ciexporter.tasks import TaskType

T = TypeVar("T")


class _Table(Generic[T]):
    """A dictionary guarded by its own lock."""

    def __init__(self) -> None:
        self._items: dict[str, T] = {}
        self._lock = threading.Lock()

    def put(self, key: str, item: T) -> None:
        with self._lock:
            self._items[key] = item

    def delete(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def get(self, key: str, default: T) -> T:
        with self._lock:
            return self._items.get(key, default)

    def contains(self, key: str) -> bool:
        with self._lock:
            return key in self._items

    def snapshot(self) -> dict[str, T]:
        with self._lock:
            return dict(self._items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class LocalStore(Store):
    """In-memory store, safe to share between threads."""

    def __init__(self) -> None:
        self._projects: _Table[Project] = _Table()
        self._environments: _Table[Environment] = _Table()
        self._refs: _Table[Ref] = _Table()
        self._metrics: _Table[Metric] = _Table()
        self._tasks: dict[TaskType, set[str]] = {}
        self._executed_tasks_count = 0
        self._tasks_lock = threading.Lock()

    # Projects

    def set_project(self, project: Project) -> None:
        self._projects.put(project.key(), project)

    def del_project(self, key: str) -> None:
        self._projects.delete(key)

    def get_project(self, project: Project) -> Project:
        return self._projects.get(project.key(), project)

    def project_exists(self, key: str) -> bool:
        return self._projects.contains(key)

    def projects(self) -> dict[str, Project]:
        return self._projects.snapshot()

    def projects_count(self) -> int:
        return len(self._projects)

    # Environments

    def set_environment(self, environment: Environment) -> None:
        self._environments.put(environment.key(), environment)

    def del_environment(self, key: str) -> None:
        self._environments.delete(key)

    def get_environment(self, environment: Environment) -> Environment:
        return self._environments.get(environment.key(), environment)

    def environment_exists(self, key: str) -> bool:
        return self._environments.contains(key)

    def environments(self) -> dict[str, Environment]:
        return self._environments.snapshot()

    def environments_count(self) -> int:
        return len(self._environments)

    # Refs

    def set_ref(self, ref: Ref) -> None:
        self._refs.put(ref.key(), ref)

    def del_ref(self, key: str) -> None:
        self._refs.delete(key)

    def get_ref(self, ref: Ref) -> Ref:
        return self._refs.get(ref.key(), ref)

    def ref_exists(self, key: str) -> bool:
        return self._refs.contains(key)

    def refs(self) -> dict[str, Ref]:
        return self._refs.snapshot()

    def refs_count(self) -> int:
        return len(self._refs)

    # Metrics

    def set_metric(self, metric: Metric) -> None:
        self._metrics.put(metric.key(), metric)

    def del_metric(self, key: str) -> None:
        self._metrics.delete(key)

    def get_metric(self, metric: Metric) -> Metric:
        return self._metrics.get(metric.key(), metric)

    def metric_exists(self, key: str) -> bool:
        return self._metrics.contains(key)

    def metrics(self) -> dict[str, Metric]:
        return self._metrics.snapshot()

    def metrics_count(self) -> int:
        return len(self._metrics)

    # Tasks

    def queue_task(self, task_type: TaskType | str, task_uuid: str, process_uuid: str = "") -> bool:
        """Mark a task as queued; return False if it already was.

        The process UUID is irrelevant here since only one process uses the store.
        """
        with self._tasks_lock:
            queued = self._tasks.setdefault(TaskType(task_type), set())
            if task_uuid in queued:
                return False
            queued.add(task_uuid)
            return True

    def unqueue_task(self, task_type: TaskType | str, task_uuid: str) -> None:
        with self._tasks_lock:
            queued = self._tasks.setdefault(TaskType(task_type), set())
            if task_uuid in queued:
                queued.discard(task_uuid)
                self._executed_tasks_count += 1

    def currently_queued_tasks_count(self) -> int:
        with self._tasks_lock:
            return sum(len(queued) for queued in self._tasks.values())

    def executed_tasks_count(self) -> int:
        with self._tasks_lock:
            return self._executed_tasks_count