import pytest

from voting_node.election_runtime.errors import NoProposals
from voting_node.election_runtime.proposals import Proposal
from voting_node.election_runtime.tally import compute_tally


def _props(*counts):
    return [Proposal(description="P%d" % i, vote_count=c) for i, c in enumerate(counts)]


def test_single_winner():
    r = compute_tally(_props(5, 3, 2))
    assert r.winner == 0
    assert not r.is_tie
    assert r.max_votes == 5


def test_winner_not_first():
    r = compute_tally(_props(1, 2, 7, 3))
    assert r.winner == 2
    assert r.tied == (2,)


def test_tie_at_top():
    r = compute_tally(_props(3, 3, 1))
    assert r.is_tie
    assert r.winner is None
    assert r.tied == (0, 1)


def test_tie_reset_by_higher_count():
    # 2,2 tie first, then 4 takes over alone
    r = compute_tally(_props(2, 2, 4))
    assert r.tied == (2,)
    assert r.winner == 2


def test_all_zero_is_a_tie_between_everyone():
    r = compute_tally(_props(0, 0, 0))
    assert r.tied == (0, 1, 2)
    assert r.max_votes == 0


def test_single_proposal_without_votes_wins():
    r = compute_tally(_props(0))
    assert r.winner == 0


def test_empty_raises():
    with pytest.raises(NoProposals):
        compute_tally([])


def test_result_to_dict():
    d = compute_tally(_props(1, 4, 4)).to_dict()
    assert d == {"winner": None, "tied": [1, 2], "is_tie": True, "max_votes": 4}
