"""
Compute the expected returns of one blackjack situation.

Defaults to a pair of sevens against a dealer nine under the configured
table rules (8 decks, S17, DAS, no RSA, 3:2).

Usage:
    python -m scripts.compute_odds
    python -m scripts.compute_odds --player A,7 --dealer 6 --cache
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from blackjack.cards import format_hand, parse_cards
from blackjack.rules import Action
from core.config import settings
from core.logging import configure_logging
from manager.odds_service import OddsService


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--player", default="7,7", help="Player cards, comma separated")
    parser.add_argument("--dealer", default="9", help="Dealer up-card")
    parser.add_argument("--withdrawn", default="", help="Cards already out of the shoe")
    parser.add_argument(
        "--cache",
        action="store_true",
        help="Use the stand expectation cache (builds it on first run)",
    )
    parser.add_argument("--splits", type=int, default=settings.max_splits, help="Resplits allowed")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()

    service = OddsService(settings)
    player = parse_cards(args.player)
    dealer = parse_cards(args.dealer)
    withdrawn = parse_cards(args.withdrawn)

    report = service.evaluate(
        player,
        dealer,
        withdrawn,
        use_cache=args.cache,
        splits_left=args.splits,
    )

    print(f"Player {format_hand(player)} vs dealer {format_hand(dealer)}")
    for action in Action:
        value = report.expectations.get(action)
        if value is not None:
            print(f"{action.value} expectation: {value:+.6f}")
    print(f"Best action: {report.best_action.value}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
