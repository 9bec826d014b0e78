import logging

from voting_node.election_runtime.events import (
    EventLog,
    FanoutNotifier,
    LoggingNotifier,
    TieDetected,
    Voted,
    WorkflowStatusChange,
    safe_publish,
)
from voting_node.election_runtime.phases import WorkflowPhase


class _Broken:
    def publish(self, event):
        raise ConnectionError("nope")


def test_event_to_dict():
    e = WorkflowStatusChange(
        previous=WorkflowPhase.VOTING_SESSION_STARTED,
        new=WorkflowPhase.VOTING_SESSION_ENDED,
        seq=7,
    )
    assert e.to_dict() == {
        "kind": "WorkflowStatusChange",
        "previous": "VotingSessionStarted",
        "new": "VotingSessionEnded",
        "seq": 7,
    }
    assert TieDetected(indices=(0, 2), seq=1).to_dict()["indices"] == [0, 2]


def test_event_log_since_and_cap():
    log = EventLog(max_events=3)
    for i in range(1, 6):
        log.publish(Voted(principal="v%d" % i, index=0, seq=i))
    assert [e.seq for e in log.events()] == [3, 4, 5]
    assert [e.seq for e in log.events(since=4)] == [5]


def test_fanout_isolates_failures():
    good = EventLog()
    fan = FanoutNotifier([_Broken(), good])
    fan.publish(Voted(principal="a", index=1, seq=1))
    assert len(good) == 1


def test_safe_publish_reports_failure(caplog):
    assert safe_publish(_Broken(), Voted(principal="a", index=1, seq=1)) is False
    assert "_Broken" in caplog.text


def test_logging_notifier(caplog):
    caplog.set_level(logging.INFO, logger="voting_node.events")
    LoggingNotifier().publish(Voted(principal="alice", index=3, seq=9))
    assert "Voted" in caplog.text
    assert "alice" in caplog.text
