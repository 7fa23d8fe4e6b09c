import pytest
import requests

from uirun.bridge import (
    HttpDriverBridge,
    LoggingBridge,
    RecordingBridge,
    RetryPolicy,
    create_bridge,
    no_retry_policy,
)
from uirun.errors import BridgeError
from uirun.runner import RunReport, UnitOutcome


def make_report():
    return RunReport(
        run_id=7,
        requested_count=3,
        outcomes=[UnitOutcome("a", True, 10), UnitOutcome("b", False, 5, error="boom")],
        duration_ms=20,
    )


def make_response(url, status_code):
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    response.reason = "test"
    response._content = b"{}"
    return response


@pytest.fixture
def requests_log(monkeypatch):
    """Replace Session.request with a scripted sequence of answers."""
    log = {"calls": [], "answers": []}

    def fake_request(session, method, url, **kwargs):
        log["calls"].append((method, url, kwargs))
        answer = log["answers"].pop(0)
        if isinstance(answer, Exception):
            raise answer
        return make_response(url, answer)

    monkeypatch.setattr(requests.Session, "request", fake_request)
    return log


def test_signal_posts_summary(requests_log):
    requests_log["answers"] = [200]
    bridge = HttpDriverBridge("http://driver:51330/")

    bridge.signal_finished(make_report())

    method, url, kwargs = requests_log["calls"][0]
    assert method == "POST"
    assert url == "http://driver:51330/driver/finish"
    assert kwargs["json"] == {
        "event": "finished",
        "run_id": 7,
        "passed": 1,
        "failed": 1,
        "total": 2,
        "duration_ms": 20,
    }


def test_retries_server_errors(requests_log):
    requests_log["answers"] = [503, 502, 200]
    sleeps = []
    bridge = HttpDriverBridge("http://driver", sleep=sleeps.append)

    bridge.signal_finished(make_report())

    assert len(requests_log["calls"]) == 3
    assert sleeps == [0.5, 1.0]


def test_gives_up_after_connection_errors(requests_log):
    requests_log["answers"] = [requests.ConnectionError("refused")] * 3
    sleeps = []
    bridge = HttpDriverBridge(
        "http://driver",
        retry_policy=RetryPolicy(max_retries=2, initial_delay=0.1),
        sleep=sleeps.append,
    )

    with pytest.raises(BridgeError) as exc_info:
        bridge.signal_finished(make_report())

    assert isinstance(exc_info.value, ConnectionError)
    assert len(requests_log["calls"]) == 3
    assert sleeps == [0.1, 0.2]


def test_client_error_not_retried(requests_log):
    requests_log["answers"] = [404]
    bridge = HttpDriverBridge("http://driver", sleep=lambda s: None)

    with pytest.raises(BridgeError):
        bridge.signal_finished(make_report())

    assert len(requests_log["calls"]) == 1


def test_no_retry_policy(requests_log):
    requests_log["answers"] = [500]
    bridge = HttpDriverBridge("http://driver", retry_policy=no_retry_policy())

    with pytest.raises(BridgeError):
        bridge.signal_finished(make_report())

    assert len(requests_log["calls"]) == 1


def test_health_check_unreachable(monkeypatch):
    def refuse(session, url, **kwargs):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(requests.Session, "get", refuse)

    with HttpDriverBridge("http://driver") as bridge:
        assert bridge.health_check() is False


def test_retry_policy_caps_delay():
    policy = RetryPolicy(initial_delay=1.0, backoff_factor=10.0, max_delay=5.0)
    assert [policy.get_delay(i) for i in range(3)] == [1.0, 5.0, 5.0]
    assert policy.allows_retry(2)
    assert not policy.allows_retry(3)
    assert not no_retry_policy().allows_retry(0)


def test_create_bridge():
    assert isinstance(create_bridge(None), LoggingBridge)
    assert isinstance(create_bridge("http://driver"), HttpDriverBridge)


def test_recording_bridge():
    bridge = RecordingBridge()
    assert bridge.wait(0) is False

    report = make_report()
    bridge.signal_finished(report)

    assert bridge.wait(0) is True
    assert bridge.signals == [report]


def test_logging_bridge_logs(caplog):
    caplog.set_level("INFO", logger="uirun")

    LoggingBridge().signal_finished(make_report())

    assert "Testing finished: run 7, 1/2 unit(s) passed" in caplog.text
