"""
VoterRegistry – who may take part in the election and how they voted.

Records are never deleted. A voter's ``has_voted`` flag flips to True once
and stays there.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Optional

from .errors import AlreadyRegistered, AlreadyVoted, NotRegisteredVoter


@dataclass(frozen=True)
class Voter:
    registered: bool = False
    has_voted: bool = False
    voted_proposal_index: Optional[int] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "registered": self.registered,
            "has_voted": self.has_voted,
            "voted_proposal_index": self.voted_proposal_index,
        }


UNREGISTERED = Voter()


class VoterRegistry:
    def __init__(self) -> None:
        self._voters: Dict[str, Voter] = {}

    def __len__(self) -> int:
        return len(self._voters)

    def __contains__(self, principal: object) -> bool:
        return self.is_registered(principal)

    def is_registered(self, principal: object) -> bool:
        v = self._voters.get(principal) if isinstance(principal, str) else None
        return bool(v and v.registered)

    def get(self, principal: str) -> Voter:
        return self._voters.get(principal, UNREGISTERED)

    def check_can_register(self, principal: str) -> None:
        if self.is_registered(principal):
            raise AlreadyRegistered(principal)

    def register(self, principal: str) -> Voter:
        self.check_can_register(principal)
        voter = Voter(registered=True)
        self._voters[principal] = voter
        return voter

    def check_can_vote(self, principal: Optional[str]) -> Voter:
        if not principal or not self.is_registered(principal):
            raise NotRegisteredVoter(principal)
        voter = self._voters[principal]
        if voter.has_voted:
            raise AlreadyVoted(principal)
        return voter

    def mark_voted(self, principal: str, proposal_index: int) -> Voter:
        voter = self.check_can_vote(principal)
        voter = replace(voter, has_voted=True, voted_proposal_index=int(proposal_index))
        self._voters[principal] = voter
        return voter

    def voted_count(self) -> int:
        return sum(1 for v in self._voters.values() if v.has_voted)
