from typing import List, Sequence

import pytest
from fastapi.testclient import TestClient

from voting_node.election_api import create_app
from voting_node.election_executor import ElectionExecutor
from voting_node.election_runtime.events import EventLog
from voting_node.election_runtime.phases import WorkflowPhase

ADMIN = "admin"


@pytest.fixture
def event_log():
    return EventLog()


@pytest.fixture(scope="function")
def executor(event_log):
    """Fresh election per test, admin = "admin", events captured in event_log"""
    return ElectionExecutor.for_administrator(ADMIN, event_log, name="test")


@pytest.fixture
def cfg():
    return {
        "election": {"name": "api-test", "administrator": ADMIN},
        "security": {"caller_header": "X-Principal"},
        "notify": {"log_events": False, "event_log_max": 1000, "webhook_url": ""},
        "logging": {"level": "WARNING"},
        "cors": {"origins": ["*"]},
    }


@pytest.fixture
def client(cfg):
    return TestClient(create_app(cfg=cfg))


def as_admin():
    return {"X-Principal": ADMIN}


def as_user(principal: str):
    return {"X-Principal": principal}


def run_to_voting(ex: ElectionExecutor, voters: Sequence[str], descriptions: Sequence[str]) -> None:
    """Register voters, let the first voter submit every proposal, open voting."""
    for v in voters:
        ex.register_voter(v, caller=ADMIN)
    ex.start_proposals_registration(caller=ADMIN)
    for d in descriptions:
        ex.register_proposal(d, caller=voters[0])
    ex.end_proposals_registration(caller=ADMIN)
    ex.start_voting_session(caller=ADMIN)


def election_with_counts(ex: ElectionExecutor, counts: Sequence[int]) -> List[str]:
    """
    Drive ``ex`` to VotingSessionEnded with proposal i holding counts[i] votes.
    Returns the voter principals.
    """
    voters = ["v%d" % i for i in range(max(1, sum(counts)))]
    run_to_voting(ex, voters, ["P%d" % i for i in range(len(counts))])
    it = iter(voters)
    for index, n in enumerate(counts):
        for _ in range(n):
            ex.vote(index, caller=next(it))
    ex.end_voting_session(caller=ADMIN)
    assert ex.phase is WorkflowPhase.VOTING_SESSION_ENDED
    return voters
