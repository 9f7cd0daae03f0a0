"""Creation of the store the exporter runs with."""

from __future__ import annotations

import logging
from typing import Iterable

import redis

from ciexporter.entities import Project
from ciexporter.store.base import Store
from ciexporter.store.local import LocalStore
from ciexporter.store.redis_store import RedisStore

log = logging.getLogger(__name__)


def new_store(redis_client: redis.Redis | None, projects: Iterable[Project]) -> Store:
    """Create a Redis store if a client is given, else a local one, and load *projects* into it.

    Projects already present in the store are left as they are; failures to read
    or write a project are logged and do not stop the loading.
    """
    store: Store = RedisStore(redis_client) if redis_client is not None else LocalStore()

    for project in projects:
        exists = False
        try:
            exists = store.project_exists(project.key())
        except redis.RedisError as exc:
            log.error("reading project from the store (project-name=%s): %s", project.name, exc)

        if not exists:
            try:
                store.set_project(project)
            except redis.RedisError as exc:
                log.error("writing project in the store (project-name=%s): %s", project.name, exc)

    return store