"""
voting_node.election_runtime
Registries, tally and event types for a single election. No I/O here.
"""

from voting_node.election_runtime.phases import PHASE_ORDER, WorkflowPhase
from voting_node.election_runtime.proposals import Proposal, ProposalRegistry
from voting_node.election_runtime.tally import TallyEngine, TallyResult, compute_tally
from voting_node.election_runtime.voters import Voter, VoterRegistry

__all__ = [
    "PHASE_ORDER",
    "WorkflowPhase",
    "Proposal",
    "ProposalRegistry",
    "TallyEngine",
    "TallyResult",
    "compute_tally",
    "Voter",
    "VoterRegistry",
]
