"""LedgerSession — roster and parameters for one table, plus the compute action."""
from __future__ import annotations
import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional

from chipledger.core.money import Number, to_decimal
from chipledger.core.settlement import (
    PlayerRecord,
    SessionParameters,
    SessionTotals,
    settle,
)

logger = logging.getLogger(__name__)


class PlayerNotFoundError(KeyError):
    """Raised when a player id is not on the roster."""


class LedgerSession:
    """
    Holds the editable state of one settlement table.

    Edits only touch inputs (name, buy-ins, chips, parameters); derived fields
    change only in compute(), which hands a snapshot of the roster to settle()
    and keeps the returned records.
    """

    def __init__(self, session_id: str, parameters: Optional[SessionParameters] = None) -> None:
        self.session_id = session_id
        self._parameters = parameters or SessionParameters()
        self._players: List[PlayerRecord] = []
        self._next_id = 1           # never decremented, so ids are not reused
        self._totals = SessionTotals()
        self._stale = False

    # -- Read access ----------------------------------------------------------

    @property
    def players(self) -> List[PlayerRecord]:
        return list(self._players)

    @property
    def parameters(self) -> SessionParameters:
        return self._parameters

    @property
    def totals(self) -> SessionTotals:
        return self._totals

    @property
    def is_stale(self) -> bool:
        """Inputs changed since the last compute()."""
        return self._stale

    def get_player(self, player_id: str) -> PlayerRecord:
        return self._players[self._index(player_id)]

    def _index(self, player_id: str) -> int:
        for i, p in enumerate(self._players):
            if p.player_id == player_id:
                return i
        raise PlayerNotFoundError(player_id)

    # -- Roster edits ---------------------------------------------------------

    def add_player(self, name: Optional[str] = None) -> PlayerRecord:
        player_id = str(self._next_id)
        self._next_id += 1
        if name is None or not name.strip():
            name = f"Player {player_id}"
        player = PlayerRecord(player_id=player_id, name=name.strip())
        self._players.append(player)
        self._stale = True
        logger.info(f"Added player {player_id} ({player.name}) to session {self.session_id}")
        return player

    def update_player(
        self,
        player_id: str,
        name: Optional[str] = None,
        buy_in_count: Optional[int] = None,
        chip_balance: Optional[Number] = None,
    ) -> PlayerRecord:
        idx = self._index(player_id)
        changes: Dict[str, Any] = {}
        if name is not None:
            if not name.strip():
                raise ValueError("Player name cannot be blank")
            changes["name"] = name.strip()
        if buy_in_count is not None:
            if buy_in_count < 0:
                raise ValueError(f"Buy-in count cannot be negative: {buy_in_count}")
            changes["buy_in_count"] = buy_in_count
        if chip_balance is not None:
            balance = to_decimal(chip_balance)
            if balance < 0:
                raise ValueError(f"Chip balance cannot be negative: {chip_balance}")
            changes["chip_balance"] = balance

        updated = replace(self._players[idx], **changes)
        self._players[idx] = updated
        if changes:
            self._stale = True
        return updated

    def remove_player(self, player_id: str) -> bool:
        try:
            idx = self._index(player_id)
        except PlayerNotFoundError:
            return False
        del self._players[idx]
        self._stale = True
        logger.info(f"Removed player {player_id} from session {self.session_id}")
        return True

    def update_parameters(
        self,
        buy_in_unit_price: Optional[Number] = None,
        chip_price: Optional[Number] = None,
        fee_pool: Optional[Number] = None,
    ) -> SessionParameters:
        """Replace parameters; they apply from the next compute()."""
        changes: Dict[str, Any] = {}
        if buy_in_unit_price is not None:
            changes["buy_in_unit_price"] = buy_in_unit_price
        if chip_price is not None:
            changes["chip_price"] = chip_price
        if fee_pool is not None:
            changes["fee_pool"] = fee_pool
        if changes:
            self._parameters = replace(self._parameters, **changes)
            self._stale = True
        return self._parameters

    # -- Compute --------------------------------------------------------------

    def compute(self) -> SessionTotals:
        snapshot = tuple(self._players)
        players, totals = settle(snapshot, self._parameters)
        self._players = list(players)
        self._totals = totals
        self._stale = False
        logger.info(
            f"Session {self.session_id} settled: {len(players)} players, "
            f"net P/L {totals.net_pl}, winnings {totals.gross_winnings}"
        )
        if not totals.is_balanced:
            logger.warning(
                f"Session {self.session_id} does not balance: net P/L is {totals.net_pl}"
            )
        return totals

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "parameters": self._parameters.to_dict(),
            "players": [p.to_dict() for p in self._players],
            "totals": self._totals.to_dict(),
            "total_fees": float(sum(p.fee_owed for p in self._players)),
            "is_stale": self._stale,
        }
