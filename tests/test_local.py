import threading

from ciexporter.entities import Environment, Project, Ref, RefKind
from ciexporter.metrics import Metric, MetricKind
from ciexporter.store.local import LocalStore
from ciexporter.tasks import TaskType


def test_project_functions():
    project = Project("foo/bar", topics="amazing")
    store = LocalStore()
    store.set_project(project)

    projects = store.projects()
    assert project.key() in projects
    assert projects[project.key()] == project

    assert store.project_exists(project.key()) is True

    fetched = store.get_project(Project("foo/bar"))
    assert fetched == project

    assert store.projects_count() == 1

    store.del_project(project.key())
    assert project.key() not in store.projects()
    assert store.project_exists(project.key()) is False

    query = Project("foo/bar")
    fetched = store.get_project(query)
    assert fetched == query
    assert fetched.topics == ""


def test_projects_returns_a_copy():
    store = LocalStore()
    store.set_project(Project("foo"))
    snapshot = store.projects()
    snapshot.clear()
    assert store.projects_count() == 1


def test_environment_functions():
    environment = Environment(project_name="foo", id=1)
    store = LocalStore()
    store.set_environment(environment)

    environments = store.environments()
    assert environment.key() in environments
    assert environments[environment.key()] == environment

    assert store.environment_exists(environment.key()) is True

    fetched = store.get_environment(Environment(project_name="foo", id=1))
    assert fetched == environment

    assert store.environments_count() == 1

    store.del_environment(environment.key())
    assert environment.key() not in store.environments()
    assert store.environment_exists(environment.key()) is False

    query = Environment(project_name="foo", id=1, external_url="foo")
    fetched = store.get_environment(query)
    assert fetched != environment
    assert fetched.external_url == "foo"


def test_ref_functions():
    project = Project("foo/bar", topics="salty")
    ref = Ref(project=project, kind=RefKind.BRANCH, name="sweet")
    store = LocalStore()
    store.set_ref(ref)

    refs = store.refs()
    assert ref.key() in refs
    assert refs[ref.key()] == ref

    assert store.ref_exists(ref.key()) is True

    fetched = store.get_ref(Ref(project=Project("foo/bar"), kind=RefKind.BRANCH, name="sweet"))
    assert fetched == ref
    assert fetched.project.topics == "salty"

    assert store.refs_count() == 1

    store.del_ref(ref.key())
    assert ref.key() not in store.refs()
    assert store.ref_exists(ref.key()) is False

    query = Ref(project=Project("foo/bar"), kind=RefKind.BRANCH, name="sweet")
    fetched = store.get_ref(query)
    assert fetched != ref
    assert fetched.project.topics == ""


def test_metric_functions():
    metric = Metric(kind=MetricKind.COVERAGE, labels={"foo": "bar"}, value=5)
    store = LocalStore()
    store.set_metric(metric)

    metrics = store.metrics()
    assert metric.key() in metrics
    assert metrics[metric.key()] == metric

    assert store.metric_exists(metric.key()) is True

    fetched = store.get_metric(Metric(kind=MetricKind.COVERAGE, labels={"foo": "bar"}))
    assert fetched == metric

    assert store.metrics_count() == 1

    store.del_metric(metric.key())
    assert metric.key() not in store.metrics()
    assert store.metric_exists(metric.key()) is False

    fetched = store.get_metric(Metric(kind=MetricKind.COVERAGE, labels={"foo": "bar"}))
    assert fetched != metric
    assert fetched.value == 0


def test_queue_task():
    store = LocalStore()
    assert store.queue_task(TaskType.PULL_METRICS, "foo", "") is True
    assert store.queue_task(TaskType.PULL_METRICS, "foo", "") is False

    store.queue_task(TaskType.PULL_METRICS, "bar", "")
    assert store.queue_task(TaskType.PULL_METRICS, "bar", "") is False


def test_queue_task_distinguishes_task_types():
    store = LocalStore()
    assert store.queue_task(TaskType.PULL_METRICS, "foo", "") is True
    assert store.queue_task(TaskType.PULL_REF_METRICS, "foo", "") is True
    assert store.currently_queued_tasks_count() == 2


def test_unqueue_task():
    store = LocalStore()
    store.queue_task(TaskType.PULL_METRICS, "foo", "")
    assert store.executed_tasks_count() == 0
    store.unqueue_task(TaskType.PULL_METRICS, "foo")
    assert store.executed_tasks_count() == 1


def test_task_can_be_queued_again_once_unqueued():
    store = LocalStore()
    store.queue_task(TaskType.PULL_METRICS, "foo", "")
    store.unqueue_task(TaskType.PULL_METRICS, "foo")
    assert store.queue_task(TaskType.PULL_METRICS, "foo", "") is True


def test_currently_queued_tasks_count():
    store = LocalStore()
    store.queue_task(TaskType.PULL_METRICS, "foo", "")
    store.queue_task(TaskType.PULL_METRICS, "bar", "")
    store.queue_task(TaskType.PULL_METRICS, "baz", "")

    assert store.currently_queued_tasks_count() == 3
    store.unqueue_task(TaskType.PULL_METRICS, "foo")
    assert store.currently_queued_tasks_count() == 2


def test_executed_tasks_count():
    store = LocalStore()
    store.queue_task(TaskType.PULL_METRICS, "foo", "")
    store.queue_task(TaskType.PULL_METRICS, "bar", "")
    store.unqueue_task(TaskType.PULL_METRICS, "foo")
    store.unqueue_task(TaskType.PULL_METRICS, "foo")

    assert store.executed_tasks_count() == 1


def test_unqueue_unknown_task_counts_nothing():
    store = LocalStore()
    store.unqueue_task(TaskType.GARBAGE_COLLECT_REFS, "never-queued")
    assert store.executed_tasks_count() == 0
    assert store.currently_queued_tasks_count() == 0


def test_concurrent_queueing_succeeds_once():
    store = LocalStore()
    results = []
    lock = threading.Lock()

    def worker():
        queued = store.queue_task(TaskType.PULL_METRICS, "shared", "")
        with lock:
            results.append(queued)

    threads = [threading.Thread(target=worker) for _ in range(16)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results.count(True) == 1
    assert store.currently_queued_tasks_count() == 1