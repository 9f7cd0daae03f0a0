from ciexporter.metrics import Metric, MetricKind


def test_metric_key_coverage_ignores_unrelated_labels():
    metric = Metric(kind=MetricKind.COVERAGE, labels={"foo": "bar"})
    assert metric.key() == "3797596385"


def test_metric_key_environment_information():
    metric = Metric(
        kind=MetricKind.ENVIRONMENT_INFORMATION,
        labels={"project": "foo", "environment": "bar", "foo": "bar"},
    )
    assert metric.key() == "77312310"


def test_metric_key_without_labels():
    assert Metric(kind=MetricKind.ENVIRONMENT_INFORMATION).key() == "1288741005"


def test_metric_key_does_not_depend_on_value():
    a = Metric(kind=MetricKind.COVERAGE, labels={"project": "p"}, value=1)
    b = Metric(kind=MetricKind.COVERAGE, labels={"project": "p"}, value=2)
    assert a.key() == b.key()


def test_status_label_distinguishes_status_metrics():
    a = Metric(kind=MetricKind.STATUS, labels={"project": "p", "status": "success"})
    b = Metric(kind=MetricKind.STATUS, labels={"project": "p", "status": "failed"})
    assert a.key() != b.key()
    c = Metric(kind=MetricKind.COVERAGE, labels={"project": "p", "status": "success"})
    d = Metric(kind=MetricKind.COVERAGE, labels={"project": "p", "status": "failed"})
    assert c.key() == d.key()


def test_metric_kind_numbering():
    assert MetricKind(0) is MetricKind.COVERAGE
    assert MetricKind(35) is MetricKind.TEST_CASE_STATUS
    labels = {"project": "p", "environment": "e"}
    assert (
        Metric(kind=MetricKind(9), labels=labels).key()
        == Metric(kind=MetricKind.ENVIRONMENT_INFORMATION, labels=labels).key()
    )