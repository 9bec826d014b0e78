"""
TallyEngine – records votes and computes the election result.

Tally algorithm (single pass over proposals in index order):

    best = -1, tied = []
    for each proposal i:
        count >  best -> best = count, tied = [i]
        count == best -> tied.append(i)

One index left in ``tied`` is the winner. More than one is a tie and no
winner is recorded. No proposals at all is an explicit NoProposals failure.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .errors import NoProposals
from .proposals import Proposal, ProposalRegistry
from .voters import VoterRegistry


@dataclass(frozen=True)
class TallyResult:
    tied: Tuple[int, ...]
    max_votes: int

    @property
    def is_tie(self) -> bool:
        return len(self.tied) > 1

    @property
    def winner(self) -> Optional[int]:
        if len(self.tied) == 1:
            return self.tied[0]
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "winner": self.winner,
            "tied": list(self.tied),
            "is_tie": self.is_tie,
            "max_votes": self.max_votes,
        }


def compute_tally(proposals: Sequence[Proposal]) -> TallyResult:
    if not proposals:
        raise NoProposals()

    best = -1
    tied: List[int] = []
    for i, p in enumerate(proposals):
        if p.vote_count > best:
            best = p.vote_count
            tied = [i]
        elif p.vote_count == best:
            tied.append(i)

    return TallyResult(tied=tuple(tied), max_votes=best)


class TallyEngine:
    def __init__(self, voters: VoterRegistry, proposals: ProposalRegistry) -> None:
        self.voters = voters
        self.proposals = proposals
        self.result: Optional[TallyResult] = None

    def check_vote(self, principal: str, proposal_index: Any) -> int:
        self.voters.check_can_vote(principal)
        return self.proposals.check_index(proposal_index)

    def vote(self, principal: str, proposal_index: Any) -> Proposal:
        index = self.check_vote(principal, proposal_index)
        # both checks passed; neither of the two writes below can fail
        self.voters.mark_voted(principal, index)
        return self.proposals.add_vote(index)

    def tally(self) -> TallyResult:
        result = compute_tally(self.proposals.snapshot())
        self.result = result
        return result
