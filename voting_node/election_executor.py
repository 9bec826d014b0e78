from __future__ import annotations

"""
Election executor.

Owns the whole state of one election (phase, voters, proposals, tally
result) and is the only thing allowed to touch it.

- Every operation runs under one re-entrant lock, so mutating calls never
  interleave and reads never see a half-applied change.
- Each operation validates everything first, then applies, then publishes
  its events (still under the lock, so events come out in operation order).
- Publication is best-effort. A failing NotificationPort is logged and the
  applied change stands.

Who is calling is decided by the AccessControl port. Every caller-gated
operation accepts ``caller=``; when omitted the port's current_caller() is
used.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .election_runtime.errors import (
    ElectionError,
    InvalidPrincipal,
    NoWinner,
    NotRegisteredVoter,
    SelfRegistrationForbidden,
    Unauthorized,
    WrongPhase,
)
from .election_runtime.events import (
    ElectionEvent,
    NotificationPort,
    NullNotifier,
    ProposalRegistered,
    TieDetected,
    Voted,
    VoterRegistered,
    WorkflowStatusChange,
    safe_publish,
)
from .election_runtime.phases import INITIAL_PHASE, TRANSITIONS, WorkflowPhase
from .election_runtime.proposals import Proposal, ProposalRegistry
from .election_runtime.tally import TallyEngine, TallyResult
from .election_runtime.voters import Voter, VoterRegistry
from .security.access import AccessControl, StaticAccessControl

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ElectionStatus:
    name: str
    phase: WorkflowPhase
    administrator: Optional[str]
    voter_count: int
    voted_count: int
    proposal_count: int
    winner: Optional[int]
    tied: Tuple[int, ...]
    last_event_seq: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "phase": self.phase.value,
            "administrator": self.administrator,
            "voter_count": self.voter_count,
            "voted_count": self.voted_count,
            "proposal_count": self.proposal_count,
            "winner": self.winner,
            "tied": list(self.tied),
            "last_event_seq": self.last_event_seq,
        }


class ElectionExecutor:
    def __init__(
        self,
        access: AccessControl,
        notifier: Optional[NotificationPort] = None,
        *,
        name: str = "default",
    ) -> None:
        self.access = access
        self.notifier: NotificationPort = notifier or NullNotifier()
        self.name = str(name)

        self._lock = threading.RLock()
        self._phase: WorkflowPhase = INITIAL_PHASE
        self._seq = 0

        self.voters = VoterRegistry()
        self.proposals = ProposalRegistry()
        self.engine = TallyEngine(self.voters, self.proposals)

    @classmethod
    def for_administrator(
        cls, administrator: str, notifier: Optional[NotificationPort] = None, *, name: str = "default"
    ) -> "ElectionExecutor":
        return cls(StaticAccessControl(administrator), notifier, name=name)

    # ----------------------- guards ------------------

    def _caller(self, caller: Optional[str]) -> Optional[str]:
        if caller is not None:
            return caller
        return self.access.current_caller()

    def _require_admin(self, caller: Optional[str], action: str) -> str:
        who = self._caller(caller)
        if not self.access.is_administrator(who):
            raise Unauthorized(who, action)
        return str(who)

    def _require_voter(self, caller: Optional[str]) -> str:
        who = self._caller(caller)
        if not who or not self.voters.is_registered(who):
            raise NotRegisteredVoter(who)
        return who

    def _require_phase(self, expected: WorkflowPhase, action: str) -> None:
        if self._phase is not expected:
            raise WrongPhase(expected, self._phase, action)

    # ----------------------- events ------------------

    def _next_seq(self) -> int:
        self._seq += 1
        return self._seq

    def _publish(self, event: ElectionEvent) -> None:
        # caller holds self._lock
        safe_publish(self.notifier, event)

    # ----------------------- workflow ------------------

    def _check_transition(self, action: str, caller: Optional[str]) -> None:
        required, _ = TRANSITIONS[action]
        self._require_admin(caller, action)
        self._require_phase(required, action)

    def _advance(self, action: str) -> WorkflowStatusChange:
        required, successor = TRANSITIONS[action]
        self._phase = successor
        event = WorkflowStatusChange(previous=required, new=successor, seq=self._next_seq())
        log.info("election %s: %s -> %s", self.name, required.value, successor.value)
        return event

    def _transition(self, action: str, caller: Optional[str]) -> WorkflowPhase:
        with self._lock:
            try:
                self._check_transition(action, caller)
            except ElectionError as e:
                log.debug("%s rejected: %s", action, e)
                raise
            event = self._advance(action)
            self._publish(event)
            return event.new

    def start_proposals_registration(self, *, caller: Optional[str] = None) -> WorkflowPhase:
        return self._transition("start_proposals_registration", caller)

    def end_proposals_registration(self, *, caller: Optional[str] = None) -> WorkflowPhase:
        return self._transition("end_proposals_registration", caller)

    def start_voting_session(self, *, caller: Optional[str] = None) -> WorkflowPhase:
        return self._transition("start_voting_session", caller)

    def end_voting_session(self, *, caller: Optional[str] = None) -> WorkflowPhase:
        return self._transition("end_voting_session", caller)

    def tally_votes(self, *, caller: Optional[str] = None) -> TallyResult:
        action = "tally_votes"
        with self._lock:
            try:
                self._check_transition(action, caller)
                # NoProposals raises here, before the phase moves
                result = self.engine.tally()
            except ElectionError as e:
                log.debug("%s rejected: %s", action, e)
                raise
            # tie event is numbered (and published) before the status change
            tie_event = TieDetected(indices=result.tied, seq=self._next_seq()) if result.is_tie else None
            status_event = self._advance(action)

            if tie_event is not None:
                log.info("election %s: tie between proposals %s at %d votes", self.name, list(result.tied), result.max_votes)
                self._publish(tie_event)
            else:
                log.info("election %s: proposal %d wins with %d votes", self.name, result.winner, result.max_votes)
            self._publish(status_event)
            return result

    # ----------------------- voters ------------------

    def register_voter(self, principal: str, *, caller: Optional[str] = None) -> Voter:
        action = "register_voter"
        with self._lock:
            try:
                self._require_admin(caller, action)
                self._require_phase(WorkflowPhase.REGISTERING_VOTERS, action)
                principal = str(principal or "").strip()
                if not principal:
                    raise InvalidPrincipal(principal)
                if self.access.is_administrator(principal):
                    raise SelfRegistrationForbidden(principal)
                voter = self.voters.register(principal)
            except ElectionError as e:
                log.debug("%s rejected: %s", action, e)
                raise
            log.info("election %s: registered voter %s", self.name, principal)
            self._publish(VoterRegistered(principal=principal, seq=self._next_seq()))
            return voter

    def get_voter(self, principal: str, *, caller: Optional[str] = None) -> Voter:
        with self._lock:
            who = self._caller(caller)
            if not self.access.is_administrator(who):
                self._require_voter(who)
            return self.voters.get(principal)

    # ----------------------- proposals ------------------

    def register_proposal(self, description: str, *, caller: Optional[str] = None) -> int:
        action = "register_proposal"
        with self._lock:
            try:
                # phase first: outside the proposal window every caller gets WrongPhase
                self._require_phase(WorkflowPhase.PROPOSALS_REGISTRATION_STARTED, action)
                who = self._require_voter(caller)
                index = self.proposals.submit(description)
            except ElectionError as e:
                log.debug("%s rejected: %s", action, e)
                raise
            log.info("election %s: %s registered proposal %d", self.name, who, index)
            self._publish(ProposalRegistered(index=index, seq=self._next_seq()))
            return index

    def get_proposal(self, index: int) -> Proposal:
        with self._lock:
            return self.proposals.get(index)

    def list_proposals(self) -> Tuple[Proposal, ...]:
        with self._lock:
            return self.proposals.snapshot()

    # ----------------------- voting ------------------

    def vote(self, proposal_index: int, *, caller: Optional[str] = None) -> Proposal:
        action = "vote"
        with self._lock:
            try:
                who = self._require_voter(caller)
                self._require_phase(WorkflowPhase.VOTING_SESSION_STARTED, action)
                proposal = self.engine.vote(who, proposal_index)
            except ElectionError as e:
                log.debug("%s rejected: %s", action, e)
                raise
            log.info("election %s: %s voted", self.name, who)
            self._publish(Voted(principal=who, index=int(proposal_index), seq=self._next_seq()))
            return proposal

    # ----------------------- results ------------------

    def get_tally_result(self) -> TallyResult:
        with self._lock:
            self._require_phase(WorkflowPhase.VOTES_TALLIED, "get_tally_result")
            assert self.engine.result is not None
            return self.engine.result

    def get_winner(self) -> Proposal:
        with self._lock:
            self._require_phase(WorkflowPhase.VOTES_TALLIED, "get_winner")
            result = self.engine.result
            if result is None or result.winner is None:
                raise NoWinner(result.tied if result else ())
            return self.proposals.get(result.winner)

    # ----------------------- introspection ------------------

    @property
    def phase(self) -> WorkflowPhase:
        with self._lock:
            return self._phase

    def status(self) -> ElectionStatus:
        with self._lock:
            result = self.engine.result
            return ElectionStatus(
                name=self.name,
                phase=self._phase,
                administrator=getattr(self.access, "administrator", None),
                voter_count=len(self.voters),
                voted_count=self.voters.voted_count(),
                proposal_count=len(self.proposals),
                winner=result.winner if result else None,
                tied=result.tied if result and result.is_tie else (),
                last_event_seq=self._seq,
            )

    def vote_totals(self) -> List[int]:
        with self._lock:
            return [p.vote_count for p in self.proposals.snapshot()]
