"""
ProposalRegistry – append-only ordered list of proposals.

A proposal's index is its registration order and is its identity.
Only ``vote_count`` ever changes after submission.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, List, Tuple

from .errors import EmptyProposalDescription, InvalidProposalIndex


@dataclass(frozen=True)
class Proposal:
    description: str
    vote_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"description": self.description, "vote_count": self.vote_count}


class ProposalRegistry:
    def __init__(self) -> None:
        self._proposals: List[Proposal] = []

    def __len__(self) -> int:
        return len(self._proposals)

    @staticmethod
    def normalize_description(description: Any) -> str:
        text = str(description if description is not None else "")
        if not text.strip():
            raise EmptyProposalDescription()
        return text

    def check_index(self, index: Any) -> int:
        # bools are ints in Python; an index of True is a caller bug
        if isinstance(index, bool) or not isinstance(index, int):
            raise InvalidProposalIndex(index, len(self._proposals))
        if index < 0 or index >= len(self._proposals):
            raise InvalidProposalIndex(index, len(self._proposals))
        return index

    def submit(self, description: Any) -> int:
        text = self.normalize_description(description)
        self._proposals.append(Proposal(description=text))
        return len(self._proposals) - 1

    def get(self, index: Any) -> Proposal:
        return self._proposals[self.check_index(index)]

    def add_vote(self, index: int) -> Proposal:
        i = self.check_index(index)
        updated = replace(self._proposals[i], vote_count=self._proposals[i].vote_count + 1)
        self._proposals[i] = updated
        return updated

    def snapshot(self) -> Tuple[Proposal, ...]:
        return tuple(self._proposals)
