from __future__ import annotations

"""
Election API.

Routes
------
- GET  /election/status
- POST /election/voters                      (admin)
- GET  /election/voters/{principal}          (voter or admin)
- POST /election/workflow/start-proposals    (admin)
- POST /election/workflow/end-proposals      (admin)
- POST /election/workflow/start-voting       (admin)
- POST /election/workflow/end-voting         (admin)
- POST /election/workflow/tally              (admin)
- POST /election/proposals                   (voter)
- GET  /election/proposals
- GET  /election/proposals/{index}
- POST /election/votes                       (voter)
- GET  /election/winner
- GET  /election/result
- GET  /election/events?since=N

The caller is taken from the configured header (X-Principal by default),
set by whatever authenticates requests in front of this node.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel, Field

from voting_node.election_executor import ElectionExecutor
from voting_node.election_runtime import errors
from voting_node.election_runtime.events import EventLog
from voting_node.election_runtime.proposals import Proposal
from voting_node.security.current_user import (
    current_caller_from_header_optional,
    require_current_caller,
)

router = APIRouter(prefix="/election", tags=["election"])
log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class StatusResponse(BaseModel):
    ok: bool = True
    name: str
    phase: str
    administrator: Optional[str] = None
    voter_count: int
    voted_count: int
    proposal_count: int
    winner: Optional[int] = None
    tied: List[int] = Field(default_factory=list)
    last_event_seq: int = 0


class VoterRegisterRequest(BaseModel):
    principal: str = Field(..., min_length=1)


class VoterModel(BaseModel):
    principal: str
    registered: bool
    has_voted: bool
    voted_proposal_index: Optional[int] = None


class ProposalCreate(BaseModel):
    description: str


class ProposalModel(BaseModel):
    index: int
    description: str
    vote_count: int


class ProposalCreated(BaseModel):
    ok: bool = True
    index: int


class VoteRequest(BaseModel):
    proposal_index: int


class PhaseResponse(BaseModel):
    ok: bool = True
    phase: str


class TallyResultModel(BaseModel):
    winner: Optional[int] = None
    tied: List[int] = Field(default_factory=list)
    is_tie: bool = False
    max_votes: int = 0


class EventModel(BaseModel):
    seq: int
    kind: str
    data: Dict[str, Any] = Field(default_factory=dict)


class EventsResponse(BaseModel):
    ok: bool = True
    events: List[EventModel]


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


_STATUS_BY_CODE: Dict[str, int] = {
    errors.Unauthorized.code: 403,
    errors.NotRegisteredVoter.code: 403,
    errors.WrongPhase.code: 409,
    errors.AlreadyRegistered.code: 409,
    errors.AlreadyVoted.code: 409,
    errors.NoProposals.code: 409,
    errors.NoWinner.code: 409,
    errors.SelfRegistrationForbidden.code: 400,
    errors.EmptyProposalDescription.code: 400,
    errors.InvalidPrincipal.code: 400,
    errors.InvalidProposalIndex.code: 404,
}


def http_status_for(e: errors.ElectionError) -> int:
    return _STATUS_BY_CODE.get(e.code, 400)


@contextmanager
def _election_errors() -> Iterator[None]:
    try:
        yield
    except errors.ElectionError as e:
        raise HTTPException(status_code=http_status_for(e), detail=e.to_dict())


def get_executor(request: Request) -> ElectionExecutor:
    return request.app.state.executor


def get_event_log(request: Request) -> Optional[EventLog]:
    return getattr(request.app.state, "event_log", None)


def _proposal_model(index: int, p: Proposal) -> ProposalModel:
    return ProposalModel(index=index, description=p.description, vote_count=p.vote_count)


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------


@router.get("/status", response_model=StatusResponse)
def election_status(ex: ElectionExecutor = Depends(get_executor)) -> StatusResponse:
    return StatusResponse(**ex.status().to_dict())


# ---------------------------------------------------------------------------
# Voters
# ---------------------------------------------------------------------------


@router.post("/voters", response_model=VoterModel)
def register_voter(
    payload: VoterRegisterRequest,
    caller: str = Depends(require_current_caller),
    ex: ElectionExecutor = Depends(get_executor),
) -> VoterModel:
    with _election_errors():
        voter = ex.register_voter(payload.principal, caller=caller)
    return VoterModel(principal=payload.principal.strip(), **voter.to_dict())


@router.get("/voters/{principal}", response_model=VoterModel)
def get_voter(
    principal: str,
    caller: str = Depends(require_current_caller),
    ex: ElectionExecutor = Depends(get_executor),
) -> VoterModel:
    with _election_errors():
        voter = ex.get_voter(principal, caller=caller)
    return VoterModel(principal=principal, **voter.to_dict())


# ---------------------------------------------------------------------------
# Workflow
# ---------------------------------------------------------------------------


@router.post("/workflow/start-proposals", response_model=PhaseResponse)
def start_proposals_registration(
    caller: str = Depends(require_current_caller),
    ex: ElectionExecutor = Depends(get_executor),
) -> PhaseResponse:
    with _election_errors():
        phase = ex.start_proposals_registration(caller=caller)
    return PhaseResponse(phase=phase.value)


@router.post("/workflow/end-proposals", response_model=PhaseResponse)
def end_proposals_registration(
    caller: str = Depends(require_current_caller),
    ex: ElectionExecutor = Depends(get_executor),
) -> PhaseResponse:
    with _election_errors():
        phase = ex.end_proposals_registration(caller=caller)
    return PhaseResponse(phase=phase.value)


@router.post("/workflow/start-voting", response_model=PhaseResponse)
def start_voting_session(
    caller: str = Depends(require_current_caller),
    ex: ElectionExecutor = Depends(get_executor),
) -> PhaseResponse:
    with _election_errors():
        phase = ex.start_voting_session(caller=caller)
    return PhaseResponse(phase=phase.value)


@router.post("/workflow/end-voting", response_model=PhaseResponse)
def end_voting_session(
    caller: str = Depends(require_current_caller),
    ex: ElectionExecutor = Depends(get_executor),
) -> PhaseResponse:
    with _election_errors():
        phase = ex.end_voting_session(caller=caller)
    return PhaseResponse(phase=phase.value)


@router.post("/workflow/tally", response_model=TallyResultModel)
def tally_votes(
    caller: str = Depends(require_current_caller),
    ex: ElectionExecutor = Depends(get_executor),
) -> TallyResultModel:
    with _election_errors():
        result = ex.tally_votes(caller=caller)
    return TallyResultModel(**result.to_dict())


# ---------------------------------------------------------------------------
# Proposals
# ---------------------------------------------------------------------------


@router.post("/proposals", response_model=ProposalCreated)
def register_proposal(
    payload: ProposalCreate,
    caller: str = Depends(require_current_caller),
    ex: ElectionExecutor = Depends(get_executor),
) -> ProposalCreated:
    with _election_errors():
        index = ex.register_proposal(payload.description, caller=caller)
    return ProposalCreated(index=index)


@router.get("/proposals", response_model=List[ProposalModel])
def list_proposals(ex: ElectionExecutor = Depends(get_executor)) -> List[ProposalModel]:
    return [_proposal_model(i, p) for i, p in enumerate(ex.list_proposals())]


@router.get("/proposals/{index}", response_model=ProposalModel)
def get_proposal(index: int, ex: ElectionExecutor = Depends(get_executor)) -> ProposalModel:
    with _election_errors():
        p = ex.get_proposal(index)
    return _proposal_model(index, p)


# ---------------------------------------------------------------------------
# Voting & results
# ---------------------------------------------------------------------------


@router.post("/votes", response_model=ProposalModel)
def vote(
    payload: VoteRequest,
    caller: str = Depends(require_current_caller),
    ex: ElectionExecutor = Depends(get_executor),
) -> ProposalModel:
    with _election_errors():
        p = ex.vote(payload.proposal_index, caller=caller)
    return _proposal_model(payload.proposal_index, p)


@router.get("/winner", response_model=ProposalModel)
def get_winner(ex: ElectionExecutor = Depends(get_executor)) -> ProposalModel:
    with _election_errors():
        result = ex.get_tally_result()
        p = ex.get_winner()
    return _proposal_model(int(result.winner), p)


@router.get("/result", response_model=TallyResultModel)
def get_result(ex: ElectionExecutor = Depends(get_executor)) -> TallyResultModel:
    with _election_errors():
        result = ex.get_tally_result()
    return TallyResultModel(**result.to_dict())


@router.get("/events", response_model=EventsResponse)
def list_events(
    since: int = Query(default=0, ge=0, description="Only events with seq greater than this."),
    caller: Optional[str] = Depends(current_caller_from_header_optional),
    event_log: Optional[EventLog] = Depends(get_event_log),
) -> EventsResponse:
    if event_log is None:
        raise HTTPException(status_code=404, detail="event_log_disabled")
    out: List[EventModel] = []
    for e in event_log.events(since=since):
        data = e.to_dict()
        seq = int(data.pop("seq", 0))
        kind = str(data.pop("kind", e.kind))
        out.append(EventModel(seq=seq, kind=kind, data=data))
    log.debug("served %d events since %d to %s", len(out), since, caller or "anonymous")
    return EventsResponse(events=out)
