"""
voting_node/election_runtime/events.py
-------------------------------------

Election events and the NotificationPort they are published to.

The executor publishes one event per applied mutation, in the order the
mutations were applied, while still holding its lock. Publication is
best-effort: a port that raises is logged and skipped, the state change
that produced the event stays applied.

Adapters in this module:
- EventLog        in-memory ordered log (tests, /election/events)
- LoggingNotifier writes each event to the ``voting_node.events`` logger
- FanoutNotifier  publishes to several ports, isolating failures per port
"""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple

from .phases import WorkflowPhase

log = logging.getLogger(__name__)
event_log = logging.getLogger("voting_node.events")


class ElectionEvent:
    kind: str = "event"

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)  # type: ignore[call-overload]
        for k, v in list(out.items()):
            if isinstance(v, WorkflowPhase):
                out[k] = v.value
            elif isinstance(v, tuple):
                out[k] = list(v)
        out["kind"] = self.kind
        return out


@dataclass(frozen=True)
class VoterRegistered(ElectionEvent):
    kind = "VoterRegistered"

    principal: str
    seq: int = 0


@dataclass(frozen=True)
class WorkflowStatusChange(ElectionEvent):
    kind = "WorkflowStatusChange"

    previous: WorkflowPhase
    new: WorkflowPhase
    seq: int = 0


@dataclass(frozen=True)
class ProposalRegistered(ElectionEvent):
    kind = "ProposalRegistered"

    index: int
    seq: int = 0


@dataclass(frozen=True)
class Voted(ElectionEvent):
    kind = "Voted"

    principal: str
    index: int
    seq: int = 0


@dataclass(frozen=True)
class TieDetected(ElectionEvent):
    kind = "TieDetected"

    indices: Tuple[int, ...] = field(default_factory=tuple)
    seq: int = 0


class NotificationPort(Protocol):
    def publish(self, event: ElectionEvent) -> None:
        ...


class NullNotifier:
    def publish(self, event: ElectionEvent) -> None:
        return None


class EventLog:
    """Ordered in-memory event sink."""

    def __init__(self, max_events: Optional[int] = None) -> None:
        self.max_events = max_events
        self._events: List[ElectionEvent] = []
        self._lock = threading.Lock()

    def publish(self, event: ElectionEvent) -> None:
        with self._lock:
            self._events.append(event)
            if self.max_events is not None and len(self._events) > self.max_events:
                del self._events[: len(self._events) - self.max_events]

    def events(self, since: int = 0) -> List[ElectionEvent]:
        with self._lock:
            return [e for e in self._events if getattr(e, "seq", 0) > since]

    def kinds(self) -> List[str]:
        with self._lock:
            return [e.kind for e in self._events]

    def clear(self) -> None:
        with self._lock:
            self._events.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)


class LoggingNotifier:
    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.INFO) -> None:
        self.logger = logger or event_log
        self.level = level

    def publish(self, event: ElectionEvent) -> None:
        self.logger.log(self.level, "%s %s", event.kind, event.to_dict())


class FanoutNotifier:
    def __init__(self, ports: Iterable[NotificationPort] = ()) -> None:
        self.ports: List[NotificationPort] = list(ports)

    def add(self, port: NotificationPort) -> None:
        self.ports.append(port)

    def publish(self, event: ElectionEvent) -> None:
        for port in self.ports:
            safe_publish(port, event)


def safe_publish(port: NotificationPort, event: ElectionEvent) -> bool:
    try:
        port.publish(event)
        return True
    except Exception:
        log.exception("notification port %s failed on %s (seq=%s)", type(port).__name__, event.kind, getattr(event, "seq", None))
        return False
