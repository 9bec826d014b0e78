"""
voting_node/app.py
------------------
Thin entrypoint for running the Voting Node FastAPI app via:

    uvicorn voting_node.app:app

All real route wiring lives in voting_node.election_api.
"""

from .election_api import create_app

app = create_app()


if __name__ == "__main__":
    # Convenience for: python -m voting_node.app
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000)
