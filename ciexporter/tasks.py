"""Task kinds handled by the scheduler and their scheduling state."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class TaskType(str, Enum):
    """Kinds of tasks that can be queued for execution."""

    PULL_PROJECT = "PullProject"
    PULL_PROJECTS_FROM_WILDCARD = "PullProjectsFromWildcard"
    PULL_PROJECTS_FROM_WILDCARDS = "PullProjectsFromWildcards"
    PULL_ENVIRONMENTS_FROM_PROJECT = "PullEnvironmentsFromProject"
    PULL_ENVIRONMENTS_FROM_PROJECTS = "PullEnvironmentsFromProjects"
    PULL_ENVIRONMENT_METRICS = "PullEnvironmentMetrics"
    PULL_METRICS = "PullMetrics"
    PULL_REFS_FROM_PROJECT = "PullRefsFromProject"
    PULL_REFS_FROM_PROJECTS = "PullRefsFromProjects"
    PULL_REF_METRICS = "PullRefMetrics"
    GARBAGE_COLLECT_PROJECTS = "GarbageCollectProjects"
    GARBAGE_COLLECT_ENVIRONMENTS = "GarbageCollectEnvironments"
    GARBAGE_COLLECT_REFS = "GarbageCollectRefs"
    GARBAGE_COLLECT_METRICS = "GarbageCollectMetrics"

    def __str__(self) -> str:
        return self.value


@dataclass
class TaskSchedulingStatus:
    """When a recurring task last ran and when it runs next."""

    last: datetime | None = None
    next: datetime | None = None