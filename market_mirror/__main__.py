"""
Command-line interface for market_mirror.
"""

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime

from .config import get_config
from .models import RunOptions
from .pipeline import create_crawler
from .storage import create_storage

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def run_crawl(kind: str, options: RunOptions) -> dict:
    """
    Run one crawler and return its result with run metadata.

    Args:
        kind: Registered crawler name ("sellers" or "index").
        options: Run inputs.
    """
    config = get_config()
    storage = create_storage(config.storage)
    crawler = create_crawler(kind, storage, config)
    try:
        result = await crawler.run(options)
    finally:
        await crawler.close()

    output = result.model_dump()
    output["_meta"] = {
        "timestamp": datetime.now().isoformat(),
        "kind": kind,
        "storage": config.storage.type,
    }
    return output


def main():
    """Main function to parse arguments and run a crawl."""
    parser = argparse.ArgumentParser(
        description="Mirror seller profiles and build market indexes"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    sellers = subparsers.add_parser("sellers", help="Fetch and store seller profiles")
    sellers.add_argument("seller_ids", nargs="+", help="Upstream seller ids")
    sellers.add_argument(
        "--no-reviews",
        action="store_true",
        help="Skip collecting received reviews"
    )

    index = subparsers.add_parser("index", help="Build seller list and image lookup for a market")
    index.add_argument("market", help="Market code, e.g. gb")

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging"
    )

    args = parser.parse_args()
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.command == "sellers":
        options = RunOptions(seller_ids=args.seller_ids, include_reviews=not args.no_reviews)
    else:
        options = RunOptions(market=args.market)

    try:
        output = asyncio.run(run_crawl(args.command, options))
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        return 130
    except Exception as e:
        logger.error(f"Crawl failed: {str(e)}")
        return 1

    print(json.dumps(output, indent=2))
    return 1 if output.get("failed") else 0


if __name__ == "__main__":
    sys.exit(main())
