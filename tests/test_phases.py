from voting_node.election_runtime.phases import (
    INITIAL_PHASE,
    PHASE_ORDER,
    TRANSITIONS,
    WorkflowPhase,
    next_phase,
)


def test_initial_and_terminal():
    assert INITIAL_PHASE is WorkflowPhase.REGISTERING_VOTERS
    assert PHASE_ORDER[-1] is WorkflowPhase.VOTES_TALLIED
    assert next_phase(WorkflowPhase.VOTES_TALLIED) is None


def test_transitions_are_single_forward_steps():
    for action, (before, after) in TRANSITIONS.items():
        assert next_phase(before) is after, action
        assert after.ordinal == before.ordinal + 1


def test_every_non_terminal_phase_has_exactly_one_transition():
    predecessors = [before for before, _ in TRANSITIONS.values()]
    assert sorted(p.ordinal for p in predecessors) == list(range(len(PHASE_ORDER) - 1))


def test_transition_table_names():
    assert TRANSITIONS["tally_votes"] == (WorkflowPhase.VOTING_SESSION_ENDED, WorkflowPhase.VOTES_TALLIED)
    assert TRANSITIONS["start_proposals_registration"][1] is WorkflowPhase.PROPOSALS_REGISTRATION_STARTED
