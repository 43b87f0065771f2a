"""
Build the odds database for a rule set.

Computes stand, hit, double and split expectations for every player
hand and dealer up-card and writes them to a SQLite file. An existing
file is left untouched. The stand cache is built first if missing,
which takes a long time for a full shoe.

Usage:
    python -m scripts.build_odds_db
    python -m scripts.build_odds_db --output odds_H6.db --decks 6 --hit-soft-17
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from blackjack.cards import parse_cards
from blackjack.rules import TableRules
from core.config import settings
from core.database import dispose_engines
from core.logging import configure_logging, get_logger
from core.storage import create_odds_repository, create_stand_cache_store
from manager.odds_writer import OddsDBWriter


logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    defaults = settings.default_rules
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--output", default=settings.odds_db_path, help="Odds database file")
    parser.add_argument("--decks", type=int, default=defaults.num_decks)
    parser.add_argument(
        "--hit-soft-17",
        action="store_true",
        default=not defaults.dealer_stands_soft_17,
        help="Dealer hits soft 17",
    )
    parser.add_argument(
        "--no-double-after-split",
        action="store_true",
        default=not defaults.double_after_split,
    )
    parser.add_argument("--ace-resplits", action="store_true", default=defaults.ace_resplits)
    parser.add_argument("--blackjack-pays", type=float, default=defaults.blackjack_pays)
    parser.add_argument("--withdrawn", default="", help="Cards already out of the shoe")
    parser.add_argument("--splits", type=int, default=settings.max_splits, help="Resplits allowed")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()

    rules = TableRules(
        num_decks=args.decks,
        dealer_stands_soft_17=not args.hit_soft_17,
        double_after_split=not args.no_double_after_split,
        ace_resplits=args.ace_resplits,
        blackjack_pays=args.blackjack_pays,
    )
    writer = OddsDBWriter(
        rules,
        repository=create_odds_repository(settings, args.output),
        withdrawn=parse_cards(args.withdrawn),
        cache_store=create_stand_cache_store(settings),
        splits_left=args.splits,
    )

    try:
        written = writer.save_odds()
    except Exception as e:
        logger.error("Odds database build failed", error=str(e), exc_info=True)
        raise
    finally:
        dispose_engines()

    if written:
        print(f"Odds written to {args.output}")
    else:
        print(f"{args.output} already exists, nothing written")
    return 0


if __name__ == "__main__":
    sys.exit(main())
