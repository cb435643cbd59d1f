"""Session settlement: net results and proportional table-fee allocation."""
from __future__ import annotations
import logging
from dataclasses import dataclass, field, replace
from decimal import (
    ROUND_CEILING,
    ROUND_HALF_UP,
    Decimal,
    InvalidOperation,
    Overflow,
    localcontext,
)
from typing import Iterator, List, Sequence, Tuple

from chipledger.core.money import Number, to_decimal

logger = logging.getLogger(__name__)

ZERO = Decimal(0)
FEE_QUANTUM = Decimal(1)    # fees are settled in whole currency units
FEE_ROUNDING = ROUND_HALF_UP
DEFAULT_PRECISION = 28
MAX_PRECISION = 5000        # bounds the cost of pathological exponents


@dataclass(frozen=True)
class PlayerRecord:
    player_id: str
    name: str
    buy_in_count: int = 0
    chip_balance: Decimal = ZERO
    net_result: Decimal = ZERO     # derived
    fee_owed: Decimal = ZERO       # derived

    def __post_init__(self) -> None:
        object.__setattr__(self, "chip_balance", to_decimal(self.chip_balance))
        object.__setattr__(self, "net_result", to_decimal(self.net_result))
        object.__setattr__(self, "fee_owed", to_decimal(self.fee_owed))

    def to_dict(self) -> dict:
        return {
            "player_id": self.player_id,
            "name": self.name,
            "buy_in_count": self.buy_in_count,
            "chip_balance": float(self.chip_balance),
            "net_result": float(self.net_result),
            "fee_owed": float(self.fee_owed),
        }


@dataclass(frozen=True)
class SessionParameters:
    buy_in_unit_price: Decimal = Decimal(200)
    chip_price: Decimal = Decimal(1)
    fee_pool: Decimal = Decimal(1000)

    def __post_init__(self) -> None:
        for name in ("buy_in_unit_price", "chip_price", "fee_pool"):
            object.__setattr__(self, name, to_decimal(getattr(self, name)))

    def to_dict(self) -> dict:
        return {
            "buy_in_unit_price": float(self.buy_in_unit_price),
            "chip_price": float(self.chip_price),
            "fee_pool": float(self.fee_pool),
        }


@dataclass(frozen=True)
class SessionTotals:
    net_pl: Decimal = ZERO
    gross_winnings: Decimal = ZERO

    @property
    def is_balanced(self) -> bool:
        """True when cash-outs exactly cover buy-ins."""
        return self.net_pl == 0

    def to_dict(self) -> dict:
        return {
            "net_pl": float(self.net_pl),
            "gross_winnings": float(self.gross_winnings),
            "is_balanced": self.is_balanced,
        }


@dataclass(frozen=True)
class SettlementResult:
    players: Tuple[PlayerRecord, ...] = field(default_factory=tuple)
    totals: SessionTotals = field(default_factory=SessionTotals)

    def __iter__(self) -> Iterator:
        # Allows `players, totals = settle(...)`
        return iter((self.players, self.totals))

    @property
    def total_fees(self) -> Decimal:
        return sum((p.fee_owed for p in self.players), ZERO)


def net_result_for(player: PlayerRecord, params: SessionParameters) -> Decimal:
    """chip_balance * chip_price - buy_in_count * buy_in_unit_price"""
    buy_ins = to_decimal(player.buy_in_count)
    return player.chip_balance * params.chip_price - buy_ins * params.buy_in_unit_price


def _span(value: Decimal) -> int:
    """Digits needed to write value out in plain fixed-point notation."""
    if not value.is_finite():
        return 0
    _, digits, exponent = value.as_tuple()
    return max(len(digits) + exponent, 1) + max(-exponent, 0)


def _working_precision(players: Sequence[PlayerRecord], params: SessionParameters) -> int:
    """Enough digits to keep products, roster sums and fee shares exact."""
    chips = max((_span(p.chip_balance) for p in players), default=0)
    buy_ins = max((_span(to_decimal(p.buy_in_count)) for p in players), default=0)
    product = max(
        chips + _span(params.chip_price),
        buy_ins + _span(params.buy_in_unit_price),
    )
    net_digits = product + len(str(len(players))) + 2
    fee_digits = _span(params.fee_pool) + DEFAULT_PRECISION
    return min(max(DEFAULT_PRECISION, net_digits, fee_digits), MAX_PRECISION)


def _round_fee(share: Decimal) -> Decimal:
    if share.as_tuple().exponent >= 0:
        # already whole; quantize would need more digits than the context has
        return share
    return share.quantize(FEE_QUANTUM, rounding=FEE_ROUNDING)


def allocate_fees(winnings: Sequence[Tuple[str, Decimal]], fee_pool: Number) -> List[Decimal]:
    """
    Split fee_pool across winners in proportion to their winnings.

    winnings: (player_id, strictly positive net result) pairs.
    Returns one fee per pair, in the same order.

    Each share is rounded half-up to whole units. If rounding pushes the total
    above the pool, one unit is taken back from each of the shares that were
    rounded up the most (ties by player_id) until the total fits. A pool or
    total that is not finite allocates nothing.
    """
    pool = to_decimal(fee_pool)
    gross = sum((amount for _, amount in winnings), ZERO)
    if gross == 0 or not gross.is_finite() or not pool.is_finite():
        return [ZERO for _ in winnings]

    with localcontext() as ctx:
        ctx.prec = min(max(ctx.prec, _span(pool) + DEFAULT_PRECISION), MAX_PRECISION)
        exact = [amount * pool / gross for _, amount in winnings]
        fees = [_round_fee(share) for share in exact]

        excess = sum(fees, ZERO) - pool
        if excess > 0:
            units = int(excess.to_integral_value(rounding=ROUND_CEILING))
            by_rounding_gain = sorted(
                range(len(fees)),
                key=lambda i: (exact[i] - fees[i], winnings[i][0]),
            )
            for i in by_rounding_gain[:units]:
                fees[i] -= FEE_QUANTUM
    return fees


def settle(players: Sequence[PlayerRecord], params: SessionParameters) -> SettlementResult:
    """
    Compute net results, fee shares and session totals for a roster.

    Pure: the input records are not touched; a new tuple with the same
    identities and order is returned. Never raises for numeric input: NaN or
    overflowing results come back as non-finite values and never count as
    winners. When nobody won, every fee is zero.
    """
    with localcontext() as ctx:
        ctx.prec = _working_precision(players, params)
        ctx.traps[InvalidOperation] = False
        ctx.traps[Overflow] = False

        # Net-result pass
        scored: List[PlayerRecord] = []
        winner_index: List[int] = []
        net_pl = ZERO
        gross_winnings = ZERO
        for i, p in enumerate(players):
            net = net_result_for(p, params)
            net_pl += net
            if net.is_finite() and net > 0:
                gross_winnings += net
                winner_index.append(i)
            scored.append(replace(p, net_result=net, fee_owed=ZERO))

        # Fee-allocation pass
        if gross_winnings > 0:
            winnings = [(scored[i].player_id, scored[i].net_result) for i in winner_index]
            for i, fee in zip(winner_index, allocate_fees(winnings, params.fee_pool)):
                scored[i] = replace(scored[i], fee_owed=fee)

        settled = tuple(scored)
        totals = SessionTotals(net_pl=net_pl, gross_winnings=gross_winnings)
        logger.debug(
            f"Settled {len(settled)} players ({len(winner_index)} winners): "
            f"net_pl={net_pl} gross={gross_winnings} "
            f"fees={sum((p.fee_owed for p in settled), ZERO)}"
        )
    return SettlementResult(players=settled, totals=totals)
