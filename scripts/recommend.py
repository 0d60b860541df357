"""
Script to print recommendations for a user or similar items for a movie.
Useful for checking ranking quality against the live catalog database.
"""

import sys
from pathlib import Path

# Add parent directory to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

import argparse
import asyncio
import logging
from typing import List

import pandas as pd

from movie_recommendation_service.services import RecommendationService, build_recommendation_service
from movie_recommendation_service.types import CatalogItem

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


def items_to_dataframe(items: List[CatalogItem]) -> pd.DataFrame:
    """
    Convert ranked catalog items to a DataFrame, one row per rank.

    Args:
        items: Ranked catalog items

    Returns:
        DataFrame with a 1-based ``rank`` column
    """
    columns = ["rank", "id", "title", "year", "content_type", "genre_ids",
               "director", "view_count", "average_rating"]
    if not items:
        return pd.DataFrame(columns=columns)

    df = pd.DataFrame([item.to_dict() for item in items])
    df.insert(0, "rank", range(1, len(df) + 1))
    return df[columns]


async def fetch(service: RecommendationService, args: argparse.Namespace) -> List[CatalogItem]:
    """Run the query selected on the command line."""
    if args.item_id is not None:
        return await service.similar_to(args.item_id, args.limit)
    return await service.recommend(args.user_id, args.limit)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print movie recommendations")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--user-id", type=str, default=None,
                       help="User to recommend for (omit for popular items)")
    group.add_argument("--item-id", type=int, default=None,
                       help="Movie to find similar items for")
    parser.add_argument("--limit", type=int, default=10, help="Number of items")
    parser.add_argument("--output", type=str, default=None, help="Optional CSV output path")
    return parser.parse_args(argv)


def main(argv=None):
    """Main execution function."""
    args = parse_args(argv)
    service = build_recommendation_service()

    items = asyncio.run(fetch(service, args))
    df = items_to_dataframe(items)

    if args.item_id is not None:
        logger.info(f"Items similar to movie {args.item_id}:")
    else:
        logger.info(f"Recommendations for {args.user_id or 'anonymous visitor'}:")

    if df.empty:
        logger.info("  (no results)")
    else:
        for row in df.itertuples(index=False):
            logger.info(f"  {row.rank}. {row.title} (id: {row.id}, views: {row.view_count})")

    if args.output:
        df.to_csv(args.output, index=False)
        logger.info(f"✓ Wrote {len(df)} rows to {args.output}")

    return df


if __name__ == "__main__":
    main()
