"""
Voting Node package initializer

Keep this module lightweight. The HTTP layer (FastAPI) is only imported
from voting_node.election_api and voting_node.app.
"""

__all__ = []
