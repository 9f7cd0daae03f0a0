# ciexporter

Building blocks for an exporter that turns CI pipeline activity into metrics.

## What is in the package

- `ciexporter.entities`: `Project`, `Ref`, `RefKind` (`branch`, `tag`,
  `merge-request`), `Environment` and `Deployment`. Projects, refs and
  environments have a `key()` that is the decimal CRC32 checksum of their
  identifying fields, so the same entity always lands in the same slot of a
  store. `Ref.default_labels_values()`, `Environment.default_labels_values()` and
  `Environment.information_labels_values()` give the label sets used for metrics.
  `get_ref_regexp(kind, branches_regexp, tags_regexp)` returns the compiled
  pattern refs of a kind must match (raising `ValueError` for an unknown kind),
  and `merge_request_iid_from_ref_name(ref_name)` extracts the IID from `"1234"`
  or `"refs/merge-requests/1234/head"`, raising `ValueError` otherwise.
- `ciexporter.pipelines`: `Pipeline`, `Job`, `Runner`, `TestReport`,
  `TestSuite` and `TestCase`, with `pipeline_from_api`, `job_from_api`,
  `test_report_from_api`, `test_suite_from_api` and `test_case_from_api` to build
  them from the decoded JSON objects the GitLab API returns.
- `ciexporter.metrics`: `MetricKind` and `Metric`, whose `key()` depends on the
  kind and on the labels that identify a metric of that kind.
- `ciexporter.tasks`: `TaskType`, the kinds of tasks that can be queued, and
  `TaskSchedulingStatus`, holding when a recurring task last ran and runs next.
- `ciexporter.store`: the `Store` interface (`store.base`), the in-memory,
  thread-safe `LocalStore` (`store.local`), the Redis-backed `RedisStore`
  (`store.redis_store`) and `new_store` (`store.factory`). Stores keep projects,
  environments, refs and metrics by key, and track queued tasks so a task is not
  scheduled twice. `RedisStore` also offers `set_keepalive(uuid, ttl)` and
  `keepalive_exists(uuid)`: a task held by a process whose keepalive has expired
  is handed over to the next process that queues it.
- `ciexporter.ratelimit`: `LocalLimiter`, a token bucket for one process,
  `RedisLimiter`, a limit shared through Redis by every process using the same
  server, and `take(limiter)`, which blocks until a request may be sent.

## Installation

```
pip install ciexporter
```

## Usage

```python
from ciexporter.entities import Project, Ref, RefKind
from ciexporter.metrics import Metric, MetricKind
from ciexporter.store.factory import new_store

store = new_store(None, [Project(name="group/project")])

ref = Ref(project=Project(name="group/project"), kind=RefKind.BRANCH, name="main")
store.set_ref(ref)

metric = Metric(kind=MetricKind.COVERAGE, labels=ref.default_labels_values(), value=87.5)
store.set_metric(metric)

print(store.projects_count(), store.refs_count(), store.metrics_count())
```

Pass a `redis.Redis` client instead of `None` to `new_store` to keep state in
Redis. Projects already in the store are left untouched.

Tracking tasks:

```python
from ciexporter.tasks import TaskType

if store.queue_task(TaskType.PULL_METRICS, "group/project", "process-1"):
    ...  # do the work
    store.unqueue_task(TaskType.PULL_METRICS, "group/project")

print(store.currently_queued_tasks_count(), store.executed_tasks_count())
```

Limiting requests to the CI server's API:

```python
from ciexporter.ratelimit import LocalLimiter, take

limiter = LocalLimiter(10, 1)  # 10 requests per second, bursts of 1
take(limiter)                  # blocks until a request may be made
```

## What the package does not do

It has no command, no client that talks to the GitLab API, no scheduler that runs
the pull and garbage-collection tasks, no HTTP endpoint serving metrics and no
monitoring screen. It provides the data model, the stores and the rate limiters
such a program is built on.

## Running the tests

```
pip install -e ".[test]"
pytest
```