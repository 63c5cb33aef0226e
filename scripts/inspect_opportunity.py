from __future__ import annotations
# scripts/inspect_opportunity.py
import asyncio
import argparse
import json
from typing import Any, Dict

from buyictbot.utils.config import Config
from buyictbot.utils.helpers import preview
from buyictbot.utils.logger import logger
from buyictbot.scrapers import DetailExtractor, ExtractionError, NavigationError, PageSessionManager


def pretty_detail(url: str, details: Dict[str, Any], full: bool = False) -> str:
    """Console-friendly dump of one extracted page (description trimmed unless --full)."""
    payload = dict(details)
    if not full:
        payload["requirementsDescription"] = preview(payload.get("requirementsDescription"), 400)
    return json.dumps({"href": url, "details": payload}, ensure_ascii=False, indent=2)


async def main():
    parser = argparse.ArgumentParser(description="Extract a single BuyICT opportunity page and print the result.")
    parser.add_argument("url", help="Opportunity detail URL.")
    parser.add_argument("--full", action="store_true", help="Print the full requirements HTML.")
    parser.add_argument("--headed", action="store_true", help="Show the browser window.")
    args = parser.parse_args()

    cfg = Config.load()
    if args.headed:
        cfg.headless = False

    logger.info(f"[Inspect] start | url={args.url}")
    async with PageSessionManager(cfg) as sessions:
        try:
            details = await DetailExtractor(sessions).extract_details(args.url)
        except (NavigationError, ExtractionError) as e:
            logger.error(f"[Inspect] failed: {e}")
            raise SystemExit(1)

    print(pretty_detail(args.url, details.to_dict(), full=args.full))


if __name__ == "__main__":
    asyncio.run(main())
