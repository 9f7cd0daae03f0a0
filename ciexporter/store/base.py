"""The interface every store of projects, refs, environments and metrics provides."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ciexporter.entities import Environment, Project, Ref
from ciexporter.metrics import Metric
from ciexporter.tasks import TaskType


class Store(ABC):
    """Keeps track of discovered entities, computed metrics and queued tasks.

    The ``get_*`` methods return the stored entity sharing the key of the one
    given, or the given entity itself when nothing is stored under that key.
    """

    @abstractmethod
    def set_project(self, project: Project) -> None:
        """Store *project* under its key, replacing any previous value."""

    @abstractmethod
    def del_project(self, key: str) -> None:
        """Remove the project stored under *key*, if any."""

    @abstractmethod
    def get_project(self, project: Project) -> Project:
        """Return the stored project with the key of *project*, else *project*."""

    @abstractmethod
    def project_exists(self, key: str) -> bool:
        """Tell whether a project is stored under *key*."""

    @abstractmethod
    def projects(self) -> dict[str, Project]:
        """Return all stored projects by key."""

    @abstractmethod
    def projects_count(self) -> int:
        """Return the number of stored projects."""

    @abstractmethod
    def set_environment(self, environment: Environment) -> None:
        """Store *environment* under its key, replacing any previous value."""

    @abstractmethod
    def del_environment(self, key: str) -> None:
        """Remove the environment stored under *key*, if any."""

    @abstractmethod
    def get_environment(self, environment: Environment) -> Environment:
        """Return the stored environment with the key of *environment*, else *environment*."""

    @abstractmethod
    def environment_exists(self, key: str) -> bool:
        """Tell whether an environment is stored under *key*."""

    @abstractmethod
    def environments(self) -> dict[str, Environment]:
        """Return all stored environments by key."""

    @abstractmethod
    def environments_count(self) -> int:
        """Return the number of stored environments."""

    @abstractmethod
    def set_ref(self, ref: Ref) -> None:
        """Store *ref* under its key, replacing any previous value."""

    @abstractmethod
    def del_ref(self, key: str) -> None:
        """Remove the ref stored under *key*, if any."""

    @abstractmethod
    def get_ref(self, ref: Ref) -> Ref:
        """Return the stored ref with the key of *ref*, else *ref*."""

    @abstractmethod
    def ref_exists(self, key: str) -> bool:
        """Tell whether a ref is stored under *key*."""

    @abstractmethod
    def refs(self) -> dict[str, Ref]:
        """Return all stored refs by key."""

    @abstractmethod
    def refs_count(self) -> int:
        """Return the number of stored refs."""

    @abstractmethod
    def set_metric(self, metric: Metric) -> None:
        """Store *metric* under its key, replacing any previous value."""

    @abstractmethod
    def del_metric(self, key: str) -> None:
        """Remove the metric stored under *key*, if any."""

    @abstractmethod
    def get_metric(self, metric: Metric) -> Metric:
        """Return the stored metric with the key of *metric*, else *metric*."""

    @abstractmethod
    def metric_exists(self, key: str) -> bool:
        """Tell whether a metric is stored under *key*."""

    @abstractmethod
    def metrics(self) -> dict[str, Metric]:
        """Return all stored metrics by key."""

    @abstractmethod
    def metrics_count(self) -> int:
        """Return the number of stored metrics."""

    @abstractmethod
    def queue_task(self, task_type: TaskType | str, task_uuid: str, process_uuid: str) -> bool:
        """Mark a task as queued; return False if it already was."""

    @abstractmethod
    def unqueue_task(self, task_type: TaskType | str, task_uuid: str) -> None:
        """Mark a queued task as done."""

    @abstractmethod
    def currently_queued_tasks_count(self) -> int:
        """Return the number of tasks currently queued."""

    @abstractmethod
    def executed_tasks_count(self) -> int:
        """Return the number of tasks executed so far."""