"""Unit tests for session.py — LedgerSession roster editing and compute."""
import logging
from decimal import Decimal

import pytest
from chipledger.core.settlement import SessionParameters
from chipledger.ledger.session import LedgerSession, PlayerNotFoundError


def _session(**params) -> LedgerSession:
    return LedgerSession("test", SessionParameters(**params) if params else None)


class TestRoster:
    def test_add_player_defaults(self):
        s = _session()
        p = s.add_player()
        assert p.player_id == "1"
        assert p.name == "Player 1"
        assert p.buy_in_count == 0
        assert p.chip_balance == 0
        assert s.is_stale

    def test_add_player_named(self):
        s = _session()
        assert s.add_player("  Alice ").name == "Alice"

    def test_ids_never_reused(self):
        s = _session()
        s.add_player()
        second = s.add_player()
        s.remove_player(second.player_id)
        third = s.add_player()
        assert third.player_id == "3"
        assert [p.player_id for p in s.players] == ["1", "3"]

    def test_update_player(self):
        s = _session()
        pid = s.add_player().player_id
        p = s.update_player(pid, name="Bob", buy_in_count=2, chip_balance=Decimal("450.5"))
        assert (p.name, p.buy_in_count, p.chip_balance) == ("Bob", 2, Decimal("450.5"))
        assert s.get_player(pid) == p

    def test_update_player_balance_number(self):
        s = _session()
        pid = s.add_player().player_id
        assert s.update_player(pid, chip_balance=450).chip_balance == Decimal(450)

    def test_update_unknown_player(self):
        s = _session()
        with pytest.raises(PlayerNotFoundError):
            s.update_player("99", name="x")

    def test_update_rejects_blank_name(self):
        s = _session()
        pid = s.add_player().player_id
        with pytest.raises(ValueError):
            s.update_player(pid, name="   ")

    def test_update_rejects_negative_inputs(self):
        s = _session()
        pid = s.add_player().player_id
        with pytest.raises(ValueError):
            s.update_player(pid, buy_in_count=-1)
        with pytest.raises(ValueError):
            s.update_player(pid, chip_balance=-5)

    def test_remove_unknown_player(self):
        assert _session().remove_player("nope") is False

    def test_players_is_a_copy(self):
        s = _session()
        s.add_player()
        s.players.clear()
        assert len(s.players) == 1


class TestCompute:
    def test_compute_updates_derived_fields(self):
        s = _session(buy_in_unit_price=200, chip_price=1, fee_pool=1000)
        a = s.add_player("A").player_id
        b = s.add_player("B").player_id
        s.update_player(a, buy_in_count=1, chip_balance=400)
        s.update_player(b, buy_in_count=1, chip_balance=0)
        totals = s.compute()
        assert totals.net_pl == 0
        assert totals.gross_winnings == 200
        assert s.get_player(a).fee_owed == 1000
        assert s.get_player(b).net_result == -200
        assert not s.is_stale

    def test_parameters_apply_on_next_compute(self):
        s = _session(buy_in_unit_price=200, chip_price=1, fee_pool=1000)
        pid = s.add_player().player_id
        s.update_player(pid, buy_in_count=1, chip_balance=400)
        s.compute()
        s.update_parameters(fee_pool=600)
        assert s.is_stale
        assert s.get_player(pid).fee_owed == 1000
        s.compute()
        assert s.get_player(pid).fee_owed == 600

    def test_edit_keeps_last_derived_values_until_compute(self):
        s = _session()
        pid = s.add_player().player_id
        s.update_player(pid, buy_in_count=1, chip_balance=400)
        s.compute()
        s.update_player(pid, chip_balance=0)
        assert s.get_player(pid).net_result == 200
        assert s.is_stale

    def test_update_parameters_without_changes(self):
        s = _session()
        before = s.parameters
        assert s.update_parameters() is before
        assert not s.is_stale

    def test_unbalanced_compute_logs_warning(self, caplog):
        s = _session()
        pid = s.add_player().player_id
        s.update_player(pid, buy_in_count=1, chip_balance=250)
        with caplog.at_level(logging.WARNING, logger="chipledger.ledger.session"):
            s.compute()
        assert "does not balance" in caplog.text

    def test_to_dict(self):
        s = _session(buy_in_unit_price=200, chip_price=1, fee_pool=1000)
        pid = s.add_player("A").player_id
        s.update_player(pid, buy_in_count=1, chip_balance=400)
        s.compute()
        d = s.to_dict()
        assert d["session_id"] == "test"
        assert d["parameters"] == {"buy_in_unit_price": 200.0, "chip_price": 1.0, "fee_pool": 1000.0}
        assert d["players"][0]["fee_owed"] == 1000.0
        assert d["totals"]["gross_winnings"] == 200.0
        assert d["total_fees"] == 1000.0
        assert d["is_stale"] is False
