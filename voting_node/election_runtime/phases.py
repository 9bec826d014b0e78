from __future__ import annotations

"""
Election workflow phases.

The election moves through a fixed, ordered sequence:

    RegisteringVoters
      -> ProposalsRegistrationStarted
      -> ProposalsRegistrationEnded
      -> VotingSessionStarted
      -> VotingSessionEnded
      -> VotesTallied

Each transition is one step forward. VotesTallied is terminal.
"""

from enum import Enum
from typing import Dict, Optional, Tuple


class WorkflowPhase(str, Enum):
    REGISTERING_VOTERS = "RegisteringVoters"
    PROPOSALS_REGISTRATION_STARTED = "ProposalsRegistrationStarted"
    PROPOSALS_REGISTRATION_ENDED = "ProposalsRegistrationEnded"
    VOTING_SESSION_STARTED = "VotingSessionStarted"
    VOTING_SESSION_ENDED = "VotingSessionEnded"
    VOTES_TALLIED = "VotesTallied"

    @property
    def ordinal(self) -> int:
        return PHASE_ORDER.index(self)


PHASE_ORDER: Tuple[WorkflowPhase, ...] = (
    WorkflowPhase.REGISTERING_VOTERS,
    WorkflowPhase.PROPOSALS_REGISTRATION_STARTED,
    WorkflowPhase.PROPOSALS_REGISTRATION_ENDED,
    WorkflowPhase.VOTING_SESSION_STARTED,
    WorkflowPhase.VOTING_SESSION_ENDED,
    WorkflowPhase.VOTES_TALLIED,
)

INITIAL_PHASE = WorkflowPhase.REGISTERING_VOTERS


def next_phase(phase: WorkflowPhase) -> Optional[WorkflowPhase]:
    """Immediate successor of ``phase``, or None for the terminal phase."""
    i = phase.ordinal
    if i + 1 >= len(PHASE_ORDER):
        return None
    return PHASE_ORDER[i + 1]


def _step(required: WorkflowPhase) -> Tuple[WorkflowPhase, WorkflowPhase]:
    successor = next_phase(required)
    assert successor is not None
    return required, successor


# transition name -> (required predecessor, successor)
TRANSITIONS: Dict[str, Tuple[WorkflowPhase, WorkflowPhase]] = {
    "start_proposals_registration": _step(WorkflowPhase.REGISTERING_VOTERS),
    "end_proposals_registration": _step(WorkflowPhase.PROPOSALS_REGISTRATION_STARTED),
    "start_voting_session": _step(WorkflowPhase.PROPOSALS_REGISTRATION_ENDED),
    "end_voting_session": _step(WorkflowPhase.VOTING_SESSION_STARTED),
    "tally_votes": _step(WorkflowPhase.VOTING_SESSION_ENDED),
}
