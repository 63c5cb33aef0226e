from __future__ import annotations
# scripts/dump_listing.py
# Save the rendered listing page so selector changes on the portal can be diagnosed.
import asyncio
import argparse

from buyictbot.utils.config import Config
from buyictbot.scrapers import PageSessionManager, parse_listing_cards


async def main():
    parser = argparse.ArgumentParser(description="Dump the rendered BuyICT listing page (HTML + screenshot).")
    parser.add_argument("--url", help="Listing URL (defaults to ENTRY_URL).")
    parser.add_argument("--out", default="buyict_listing_dump", help="Output file prefix.")
    args = parser.parse_args()

    cfg = Config.load()
    url = args.url or cfg.entry_url

    async with PageSessionManager(cfg) as sessions:
        async with sessions.open(url) as session:
            html = await session.content()
            with open(f"{args.out}.html", "w", encoding="utf-8") as f:
                f.write(html)
            await session.page.screenshot(path=f"{args.out}.png", full_page=True)
            base_url = session.url

    # print the first 3 parsed cards so we can see whether the selectors still match
    cards = parse_listing_cards(html, base_url)
    print(f"[CARDS] {len(cards)} parsed from {url}")
    for card in cards[:3]:
        print("----")
        print(f"{card.title} | {card.type} | {card.href}")
        print(card.raw_text[:1000])


if __name__ == "__main__":
    asyncio.run(main())
