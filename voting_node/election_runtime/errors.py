"""
voting_node/election_runtime/errors.py
-------------------------------------

Typed failures for election operations.

Every error here is a precondition violation: it is raised before any
state is touched, so a failed call leaves the election exactly as it was.
The API layer maps ``code`` to an HTTP status.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from .phases import WorkflowPhase


class ElectionError(Exception):
    code: str = "election_error"

    def __init__(self, message: str, *, detail: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.detail = dict(detail or {})

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"error": self.code, "message": self.message}
        if self.detail:
            out.update(self.detail)
        return out


class Unauthorized(ElectionError):
    code = "unauthorized"

    def __init__(self, caller: Optional[str], action: str):
        super().__init__(
            f"{caller!r} is not allowed to {action}",
            detail={"caller": caller, "action": action},
        )
        self.caller = caller
        self.action = action


class WrongPhase(ElectionError):
    code = "wrong_phase"

    def __init__(self, expected: WorkflowPhase, actual: WorkflowPhase, action: str):
        super().__init__(
            f"{action} requires phase {expected.value}, current phase is {actual.value}",
            detail={"expected": expected.value, "actual": actual.value, "action": action},
        )
        self.expected = expected
        self.actual = actual


class AlreadyRegistered(ElectionError):
    code = "already_registered"

    def __init__(self, principal: str):
        super().__init__(f"{principal!r} is already registered", detail={"principal": principal})
        self.principal = principal


class InvalidPrincipal(ElectionError):
    code = "invalid_principal"

    def __init__(self, principal: Any):
        super().__init__("principal must be a non-empty string", detail={"principal": principal})
        self.principal = principal


class SelfRegistrationForbidden(ElectionError):
    code = "self_registration_forbidden"

    def __init__(self, principal: str):
        super().__init__("the administrator cannot register as a voter", detail={"principal": principal})
        self.principal = principal


class NotRegisteredVoter(ElectionError):
    code = "not_registered_voter"

    def __init__(self, principal: Optional[str]):
        super().__init__(f"{principal!r} is not a registered voter", detail={"principal": principal})
        self.principal = principal


class AlreadyVoted(ElectionError):
    code = "already_voted"

    def __init__(self, principal: str):
        super().__init__(f"{principal!r} has already voted", detail={"principal": principal})
        self.principal = principal


class InvalidProposalIndex(ElectionError):
    code = "invalid_proposal_index"

    def __init__(self, index: Any, count: int):
        super().__init__(
            f"proposal index {index!r} out of range (have {count})",
            detail={"index": index, "count": count},
        )
        self.index = index
        self.count = count


class EmptyProposalDescription(ElectionError):
    code = "empty_proposal_description"

    def __init__(self) -> None:
        super().__init__("proposal description must not be empty")


class NoProposals(ElectionError):
    code = "no_proposals"

    def __init__(self) -> None:
        super().__init__("cannot tally an election with no proposals")


class NoWinner(ElectionError):
    code = "no_winner"

    def __init__(self, tied: Any = ()):
        super().__init__("the tally ended in a tie, no winner was recorded", detail={"tied": list(tied)})
        self.tied = tuple(tied)
