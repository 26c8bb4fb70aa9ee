"""GitFlow agent worker.

FastAPI RPC server that hosts the session runtime.

Endpoints:
- GET /health: Health check
- POST /turn: Run a conversation turn
- GET /sessions: List known sessions
- GET /sessions/{session_id}: Workflow stage and repository metadata of a session
- DELETE /sessions/{session_id}: Forget a session
- GET /errors: Standardized error definitions
"""

from __future__ import annotations

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

import logging

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from gitflow_agent import agent_config
from gitflow_agent.errors import get_error_registry
from gitflow_agent.runtime import get_session_state, list_sessions, reset_session, run_turn

logger = logging.getLogger("gitflow.worker")

app = FastAPI(title="gitflow-agent")


# =============================================================================
# Request/Response Models
# =============================================================================


class TurnRequest(BaseModel):
    session_id: str
    text: str
    model: str | None = None


class UsageInfo(BaseModel):
    """Token usage summed over the model calls of a turn."""

    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0


class RepositoryInfoModel(BaseModel):
    url: str | None = None
    directory: str | None = None
    branch: str | None = None
    filesModified: list[str] = []


class TurnResponse(BaseModel):
    session_id: str
    text: str
    events: list[dict] = []
    workflow_stage: str
    repository: RepositoryInfoModel
    usage: UsageInfo | None = None
    error: dict | None = None


class SessionResponse(BaseModel):
    session_id: str
    workflow_stage: str
    repository: RepositoryInfoModel
    message_count: int


# =============================================================================
# Endpoints
# =============================================================================


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"ok": True, "name": "gitflow-agent"}


@app.post("/turn", response_model=TurnResponse)
def turn(req: TurnRequest):
    """Run a turn through the session runtime.

    Model failures do not produce an HTTP error; the response carries an
    ``error`` payload and the session keeps its previous state.
    """
    result = run_turn(session_id=req.session_id, text=req.text, model=req.model)
    if result.get("error"):
        logger.warning("Turn for %s failed: %s", req.session_id, result["error"]["code"])
    return TurnResponse(**result)


@app.get("/sessions")
def sessions():
    return {"ok": True, "sessions": list_sessions()}


@app.get("/sessions/{session_id}", response_model=SessionResponse)
def session_detail(session_id: str):
    state = get_session_state(session_id)
    if state is None:
        error = get_error_registry().create_error(
            "GF-INT-003", details={"session_id": session_id}
        )
        raise HTTPException(status_code=error.http_status, detail=error.to_dict()["error"])
    return SessionResponse(
        session_id=session_id,
        workflow_stage=state["workflow_stage"].value,
        repository=RepositoryInfoModel(**state["repository"].to_dict()),
        message_count=len(state["messages"]),
    )


@app.delete("/sessions/{session_id}")
def delete_session(session_id: str):
    if not reset_session(session_id):
        error = get_error_registry().create_error(
            "GF-INT-003", details={"session_id": session_id}
        )
        raise HTTPException(status_code=error.http_status, detail=error.to_dict()["error"])
    return {"ok": True, "message": f"Session '{session_id}' reset"}


@app.get("/errors")
def get_errors():
    """Get all standardized error definitions.

    Returns a dictionary of error codes to their definitions,
    useful for clients to understand error responses.
    """
    registry = get_error_registry()
    definitions = registry.get_all_definitions()
    return {
        "ok": True,
        "errors": {
            code: {
                "code": defn.code,
                "message": defn.message,
                "http_status": defn.http_status,
                "retryable": defn.retryable,
            }
            for code, defn in definitions.items()
        }
    }


def main(host: str | None = None, port: int | None = None) -> None:
    import uvicorn

    uvicorn.run(
        app,
        host=host or agent_config.WORKER_HOST,
        port=port or agent_config.WORKER_PORT,
    )


if __name__ == "__main__":
    main()
