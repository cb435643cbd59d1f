"""REST API routes: session list, roster editing, settlement."""
from __future__ import annotations
from dataclasses import replace
from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse

from chipledger.core.money import format_amount
from chipledger.ledger.session import LedgerSession, PlayerNotFoundError
from chipledger.managers.session_manager import default_parameters, session_manager
from chipledger.models.requests import (
    AddPlayerRequest,
    CreateSessionRequest,
    SessionParametersRequest,
    UpdatePlayerRequest,
)

router = APIRouter()


def _get_session_or_404(session_id: str) -> LedgerSession:
    session = session_manager.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@router.get("/", response_class=HTMLResponse)
async def lobby_page(request: Request):
    templates = request.app.state.templates
    sessions = session_manager.list_sessions()
    return templates.TemplateResponse(request, "lobby.html", {"sessions": sessions})


@router.get("/session/{session_id}", response_class=HTMLResponse)
async def session_page(request: Request, session_id: str):
    templates = request.app.state.templates
    session = _get_session_or_404(session_id)
    return templates.TemplateResponse(request, "session.html", {
        "session": session,
        "fmt": format_amount,
    })


@router.post("/api/sessions")
async def create_session(req: CreateSessionRequest) -> Dict[str, Any]:
    overrides = req.model_dump(exclude_none=True, exclude={"player_names"})
    session = session_manager.create_session(replace(default_parameters(), **overrides))

    for name in req.player_names:
        session.add_player(name)

    return session.to_dict()


@router.get("/api/sessions")
async def list_sessions() -> Dict[str, Any]:
    return {"sessions": session_manager.list_sessions()}


@router.get("/api/sessions/{session_id}")
async def get_session(session_id: str) -> Dict[str, Any]:
    return _get_session_or_404(session_id).to_dict()


@router.delete("/api/sessions/{session_id}")
async def delete_session(session_id: str) -> Dict[str, Any]:
    if not session_manager.delete_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return {"deleted": session_id}


@router.patch("/api/sessions/{session_id}/parameters")
async def update_parameters(session_id: str, req: SessionParametersRequest) -> Dict[str, Any]:
    session = _get_session_or_404(session_id)
    params = session.update_parameters(**req.model_dump(exclude_none=True))
    return {"parameters": params.to_dict(), "is_stale": session.is_stale}


@router.post("/api/sessions/{session_id}/players")
async def add_player(session_id: str, req: AddPlayerRequest) -> Dict[str, Any]:
    session = _get_session_or_404(session_id)
    player = session.add_player(req.name)
    return player.to_dict()


@router.patch("/api/sessions/{session_id}/players/{player_id}")
async def update_player(session_id: str, player_id: str, req: UpdatePlayerRequest) -> Dict[str, Any]:
    session = _get_session_or_404(session_id)
    try:
        player = session.update_player(player_id, **req.model_dump(exclude_none=True))
    except PlayerNotFoundError:
        raise HTTPException(status_code=404, detail="Player not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return player.to_dict()


@router.delete("/api/sessions/{session_id}/players/{player_id}")
async def remove_player(session_id: str, player_id: str) -> Dict[str, Any]:
    session = _get_session_or_404(session_id)
    if not session.remove_player(player_id):
        raise HTTPException(status_code=404, detail="Player not found")
    return {"deleted": player_id}


@router.post("/api/sessions/{session_id}/settle")
async def settle_session(session_id: str) -> Dict[str, Any]:
    session = _get_session_or_404(session_id)
    session.compute()
    return session.to_dict()
