#!/usr/bin/env python3
"""
voting_node/notify/webhook.py
-----------------------------

NotificationPort that forwards election events to an HTTP endpoint.

publish() only enqueues, so the executor never waits on the network while
holding its lock. A single worker thread drains the queue in order and
POSTs each event as JSON. Delivery is best-effort: failures are logged
and the event is dropped, but the worker keeps running.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Optional

import httpx

from voting_node.election_runtime.events import ElectionEvent

log = logging.getLogger(__name__)

_STOP = object()
_POLL_SEC = 0.2


class WebhookNotifier:
    def __init__(
        self,
        url: str,
        timeout: float = 2.5,
        *,
        max_queue: int = 1000,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.url = str(url).strip()
        if not self.url:
            raise ValueError("webhook url must not be empty")
        try:
            httpx.URL(self.url)
        except httpx.InvalidURL as e:
            raise ValueError(f"invalid webhook url {self.url!r}: {e}") from e
        self.timeout = float(timeout)
        self._transport = transport
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize=max_queue)
        self._thread: Optional[threading.Thread] = None
        self._stopping = threading.Event()
        self._stats_lock = threading.Lock()
        self._delivered = 0
        self._failed = 0

    @property
    def delivered(self) -> int:
        with self._stats_lock:
            return self._delivered

    @property
    def failed(self) -> int:
        with self._stats_lock:
            return self._failed

    def _count(self, *, delivered: int = 0, failed: int = 0) -> None:
        with self._stats_lock:
            self._delivered += delivered
            self._failed += failed

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stopping.clear()
        self._thread = threading.Thread(target=self._run, name="webhook-notifier", daemon=True)
        self._thread.start()
        log.info("webhook notifier started (url=%s)", self.url)

    def stop(self, timeout: Optional[float] = None) -> None:
        """Ask the worker to finish the queued events and exit.

        Never blocks on a full queue: the stop flag alone ends the worker
        once the queue runs dry.
        """
        thread = self._thread
        if thread is None:
            return
        self._stopping.set()
        try:
            self._queue.put_nowait(_STOP)
        except queue.Full:
            log.warning("webhook queue full at shutdown, worker will exit when drained")
        thread.join(timeout)
        if thread.is_alive():
            log.warning("webhook worker still busy after %ss, leaving it behind", timeout)
        self._thread = None

    def publish(self, event: ElectionEvent) -> None:
        try:
            self._queue.put_nowait(event)
        except queue.Full:
            self._count(failed=1)
            log.warning("webhook queue full, dropping %s (seq=%s)", event.kind, getattr(event, "seq", None))

    def _run(self) -> None:
        with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
            while True:
                try:
                    item = self._queue.get(timeout=_POLL_SEC)
                except queue.Empty:
                    if self._stopping.is_set():
                        return
                    continue
                if item is _STOP:
                    # a marker left over from an earlier stop() is ignored after restart
                    if self._stopping.is_set():
                        return
                    continue
                self._deliver(client, item)  # type: ignore[arg-type]

    def _deliver(self, client: httpx.Client, event: ElectionEvent) -> None:
        seq = getattr(event, "seq", None)
        try:
            r = client.post(self.url, json=event.to_dict())
            r.raise_for_status()
        except httpx.HTTPError as e:
            self._count(failed=1)
            log.warning("webhook delivery of %s (seq=%s) failed: %s", event.kind, seq, e)
            return
        except Exception:
            self._count(failed=1)
            log.exception("webhook delivery of %s (seq=%s) crashed", event.kind, seq)
            return
        self._count(delivered=1)
