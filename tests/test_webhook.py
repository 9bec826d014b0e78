import json
import threading

import httpx
import pytest

from voting_node.election_api import build_executor
from voting_node.election_runtime.events import Voted
from voting_node.notify.webhook import WebhookNotifier


def _client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_deliver_posts_event_json():
    seen = []

    def handler(request):
        seen.append(json.loads(request.content))
        return httpx.Response(204)

    hook = WebhookNotifier("http://hooks.test/election")
    with _client(handler) as client:
        hook._deliver(client, Voted(principal="alice", index=2, seq=4))

    assert seen == [{"kind": "Voted", "principal": "alice", "index": 2, "seq": 4}]
    assert hook.delivered == 1
    assert hook.failed == 0


def test_deliver_failure_is_counted_not_raised():
    hook = WebhookNotifier("http://hooks.test/election")
    with _client(lambda request: httpx.Response(500)) as client:
        hook._deliver(client, Voted(principal="alice", index=0, seq=1))
    assert hook.failed == 1
    assert hook.delivered == 0


def test_publish_drops_when_queue_full():
    hook = WebhookNotifier("http://hooks.test/election", max_queue=1)
    hook.publish(Voted(principal="a", index=0, seq=1))
    hook.publish(Voted(principal="b", index=0, seq=2))
    assert hook.failed == 1


def test_empty_url_rejected():
    with pytest.raises(ValueError):
        WebhookNotifier("  ")


def test_build_executor_wires_webhook():
    cfg = {
        "election": {"administrator": "chair", "name": "w"},
        "notify": {"log_events": False, "webhook_url": "http://hooks.test/e", "webhook_timeout_sec": 1.0},
    }
    ex = build_executor(cfg)
    kinds = [type(p).__name__ for p in ex.notifier.ports]
    assert kinds == ["EventLog", "WebhookNotifier"]
    assert ex.access.is_administrator("chair")


def test_invalid_url_rejected():
    with pytest.raises(ValueError):
        WebhookNotifier("http://[::1")


def test_worker_delivers_in_order_and_stops():
    seen = []

    def handler(request):
        seen.append(json.loads(request.content)["seq"])
        return httpx.Response(200)

    hook = WebhookNotifier("http://hooks.test/election", transport=httpx.MockTransport(handler))
    hook.start()
    for seq in (1, 2, 3):
        hook.publish(Voted(principal="alice", index=0, seq=seq))
    hook.stop(timeout=5.0)

    assert seen == [1, 2, 3]
    assert hook.delivered == 3
    assert hook.failed == 0


def test_worker_survives_unexpected_error():
    calls = []

    def handler(request):
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("boom")
        return httpx.Response(200)

    hook = WebhookNotifier("http://hooks.test/election", transport=httpx.MockTransport(handler))
    hook.start()
    hook.publish(Voted(principal="a", index=0, seq=1))
    hook.publish(Voted(principal="b", index=0, seq=2))
    hook.stop(timeout=5.0)

    assert hook.failed == 1
    assert hook.delivered == 1


def test_stop_returns_with_full_queue():
    entered = threading.Event()
    release = threading.Event()

    def handler(request):
        entered.set()
        release.wait(5.0)
        return httpx.Response(200)

    hook = WebhookNotifier("http://hooks.test/election", max_queue=2, transport=httpx.MockTransport(handler))
    hook.start()
    worker = hook._thread
    hook.publish(Voted(principal="a", index=0, seq=1))
    assert entered.wait(5.0)
    for seq in (2, 3, 4):
        hook.publish(Voted(principal="x", index=0, seq=seq))
    assert hook.failed == 1  # seq 4 did not fit

    stopper = threading.Thread(target=hook.stop, kwargs={"timeout": 5.0})
    stopper.start()
    release.set()
    stopper.join(10.0)

    assert not stopper.is_alive()
    assert not worker.is_alive()
    assert hook.delivered == 3


def test_stop_without_start_is_noop():
    hook = WebhookNotifier("http://hooks.test/election")
    hook.stop(timeout=1.0)
    assert hook.delivered == 0


def test_drop_counter_is_exact_under_contention():
    hook = WebhookNotifier("http://hooks.test/election", max_queue=1)
    hook.publish(Voted(principal="a", index=0, seq=0))

    def flood():
        for seq in range(500):
            hook.publish(Voted(principal="b", index=0, seq=seq))

    threads = [threading.Thread(target=flood) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert hook.failed == 8 * 500
