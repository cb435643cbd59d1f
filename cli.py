#!/usr/bin/env python3
"""
CLI for settling a session without the web UI.

Usage:
    python cli.py --player Alice:1:400 --player Bob:1:0
    python cli.py --buy-in 100 --chip-price 0.5 --fee "¥ 1,000" --player Ann:2:600
    python cli.py --csv roster.csv         # columns: name,buy_in_count,chip_balance
    python cli.py --csv roster.csv --no-color -v
"""
from __future__ import annotations

import argparse
import csv
import logging
import sys
from decimal import Decimal
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from chipledger.config import settings
from chipledger.core.money import InvalidAmountError, format_amount, parse_amount
from chipledger.core.settlement import PlayerRecord, SessionParameters, SessionTotals, settle

logger = logging.getLogger("chipledger.cli")


# -- ANSI colors ---------------------------------------------------------------

RESET  = "\033[0m"
BOLD   = "\033[1m"
DIM    = "\033[2m"
RED    = "\033[91m"
GREEN  = "\033[92m"
YELLOW = "\033[93m"


class Palette:
    """Color codes, or empty strings when color is off."""

    def __init__(self, enabled: bool = True) -> None:
        self.reset = RESET if enabled else ""
        self.bold = BOLD if enabled else ""
        self.dim = DIM if enabled else ""
        self.red = RED if enabled else ""
        self.green = GREEN if enabled else ""
        self.yellow = YELLOW if enabled else ""


def fmt_money(value: Decimal, palette: Palette) -> str:
    return f"{palette.yellow}{format_amount(value)}{palette.reset}"


def fmt_net(value: Decimal, palette: Palette) -> str:
    color = palette.green if value > 0 else palette.red
    return f"{color}{format_amount(value)}{palette.reset}"


# -- Input helpers -------------------------------------------------------------

def parse_player_spec(spec: str) -> Tuple[str, int, Decimal]:
    """'NAME:BUYINS:CHIPS' → (name, buy-in count, chip balance)."""
    parts = spec.rsplit(":", 2)
    if len(parts) != 3 or not parts[0].strip():
        raise ValueError(f"expected NAME:BUYINS:CHIPS, got {spec!r}")
    name, buy_ins, chips = parts
    try:
        count = int(buy_ins)
    except ValueError as e:
        raise ValueError(f"buy-in count must be a whole number, got {buy_ins!r}") from e
    if count < 0:
        raise ValueError(f"buy-in count cannot be negative, got {count}")
    return name.strip(), count, parse_amount(chips)


def read_roster_csv(path: Path) -> List[Tuple[str, int, Decimal]]:
    """Read name,buy_in_count,chip_balance rows (header required)."""
    rows = []
    with path.open(newline="", encoding="utf-8-sig") as fh:
        reader = csv.DictReader(fh)
        for line_no, row in enumerate(reader, start=2):
            try:
                rows.append(parse_player_spec(
                    f"{row['name']}:{row['buy_in_count']}:{row['chip_balance']}"
                ))
            except (KeyError, TypeError, ValueError) as e:
                raise ValueError(f"{path}:{line_no}: {e}") from e
    return rows


def build_roster(entries: Sequence[Tuple[str, int, Decimal]]) -> List[PlayerRecord]:
    return [
        PlayerRecord(player_id=str(i), name=name, buy_in_count=count, chip_balance=chips)
        for i, (name, count, chips) in enumerate(entries, start=1)
    ]


# -- Display helpers -----------------------------------------------------------

def print_settlement(
    players: Sequence[PlayerRecord],
    totals: SessionTotals,
    params: SessionParameters,
    palette: Palette,
) -> None:
    p = palette
    print(f"\n{p.bold}{'=' * 60}{p.reset}")
    print(f"{p.bold}  Settlement{p.reset}  buy-in {fmt_money(params.buy_in_unit_price, p)}"
          f"  chip {fmt_money(params.chip_price, p)}  fee {fmt_money(params.fee_pool, p)}")
    print(f"{p.bold}{'=' * 60}{p.reset}")
    print(f"  {p.dim}{'No.':<4} {'Player':<14} {'Buy-ins':>7} {'Chips':>10} "
          f"{'Net':>12} {'Fee':>10}{p.reset}")

    for r in players:
        net = fmt_net(r.net_result, p)
        # pad on the visible text so colors do not shift the columns
        pad = " " * max(0, 12 - len(format_amount(r.net_result)))
        print(f"  {r.player_id:<4} {r.name:<14} {r.buy_in_count:>7} {str(r.chip_balance):>10} "
              f"{pad}{net} {format_amount(r.fee_owed):>10}")

    print()
    print(f"  Total P/L:      {fmt_net(totals.net_pl, p)}")
    print(f"  Total winnings: {p.green}{format_amount(totals.gross_winnings)}{p.reset}")
    print(f"  Fees collected: {format_amount(sum((r.fee_owed for r in players), Decimal(0)))}")
    if not totals.is_balanced:
        print(f"\n  {p.red}{p.bold}Warning:{p.reset} chips cashed out do not match buy-ins "
              f"({format_amount(totals.net_pl)}).")
    print()


# -- Entry point ---------------------------------------------------------------

def _amount_arg(text: str) -> Decimal:
    try:
        return parse_amount(text)
    except InvalidAmountError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _positive_amount_arg(text: str) -> Decimal:
    amount = _amount_arg(text)
    if amount <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than zero: {text!r}")
    return amount


def _player_arg(text: str) -> Tuple[str, int, Decimal]:
    try:
        return parse_player_spec(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Poker session settlement — CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
examples:
  python cli.py --player Alice:1:400 --player Bob:1:0
  python cli.py --fee 600 --csv roster.csv
""",
    )
    parser.add_argument("--buy-in", type=_positive_amount_arg, default=settings.default_buy_in_unit_price,
                        help="price of one buy-in (default: %(default)s)")
    parser.add_argument("--chip-price", type=_positive_amount_arg, default=settings.default_chip_price,
                        help="value of one chip (default: %(default)s)")
    parser.add_argument("--fee", type=_amount_arg, default=settings.default_fee_pool,
                        help="table fee split among winners (default: %(default)s)")
    parser.add_argument("--player", type=_player_arg, action="append", default=[],
                        metavar="NAME:BUYINS:CHIPS", help="add a player (repeatable)")
    parser.add_argument("--csv", type=Path, help="read players from a CSV file")
    parser.add_argument("--no-color", action="store_true", help="disable ANSI colors")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    entries = list(args.player)
    if args.csv:
        try:
            entries.extend(read_roster_csv(args.csv))
        except OSError as e:
            parser.error(f"cannot read {args.csv}: {e}")
        except ValueError as e:
            parser.error(str(e))
    if not entries:
        parser.error("no players given (use --player or --csv)")

    params = SessionParameters(
        buy_in_unit_price=args.buy_in,
        chip_price=args.chip_price,
        fee_pool=args.fee,
    )
    players, totals = settle(build_roster(entries), params)
    logger.debug(f"Settled {len(players)} players from the command line")
    print_settlement(players, totals, params, Palette(enabled=not args.no_color))
    return 0


if __name__ == "__main__":
    sys.exit(main())
