"""In-memory LedgerSession store."""
from __future__ import annotations
import logging
import uuid
from typing import Dict, List, Optional

from chipledger.config import settings
from chipledger.core.settlement import SessionParameters
from chipledger.ledger.session import LedgerSession

logger = logging.getLogger(__name__)


def default_parameters() -> SessionParameters:
    return SessionParameters(
        buy_in_unit_price=settings.default_buy_in_unit_price,
        chip_price=settings.default_chip_price,
        fee_pool=settings.default_fee_pool,
    )


class SessionManager:
    def __init__(self) -> None:
        self._sessions: Dict[str, LedgerSession] = {}

    def create_session(self, parameters: Optional[SessionParameters] = None) -> LedgerSession:
        session_id = str(uuid.uuid4())[:8]
        session = LedgerSession(session_id, parameters or default_parameters())
        self._sessions[session_id] = session
        logger.info(f"Created session {session_id}")
        return session

    def get_session(self, session_id: str) -> Optional[LedgerSession]:
        return self._sessions.get(session_id)

    def list_sessions(self) -> List[dict]:
        result = []
        for sid, session in self._sessions.items():
            params = session.parameters
            result.append({
                "session_id": sid,
                "players": len(session.players),
                "buy_in_unit_price": float(params.buy_in_unit_price),
                "chip_price": float(params.chip_price),
                "fee_pool": float(params.fee_pool),
                "net_pl": float(session.totals.net_pl),
                "is_stale": session.is_stale,
            })
        return result

    def delete_session(self, session_id: str) -> bool:
        if session_id in self._sessions:
            del self._sessions[session_id]
            logger.info(f"Deleted session {session_id}")
            return True
        return False


# Global singleton
session_manager = SessionManager()
