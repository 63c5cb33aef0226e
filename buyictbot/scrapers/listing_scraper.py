from __future__ import annotations
# buyictbot/scrapers/listing_scraper.py

from typing import List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from buyictbot.scrapers.errors import NavigationError
from buyictbot.scrapers.models import OpportunitySummary
from buyictbot.scrapers.page_selectors import LISTING_SELECTORS as SEL
from buyictbot.scrapers.session import PageSessionManager
from buyictbot.utils.helpers import canonicalize_url, normalize_ws
from buyictbot.utils.logger import logger


def parse_listing_cards(html: str, base_url: str) -> List[OpportunitySummary]:
    """
    Read every opportunity card on one rendered listing page.
    Cards without an href are skipped; relative hrefs are resolved against `base_url`.
    """
    soup = BeautifulSoup(html, "html.parser")
    out: List[OpportunitySummary] = []

    for card in soup.select(SEL["card"]):
        href = (card.get("href") or "").strip()
        if not href:
            logger.warning("Skipping listing card without href: %s", normalize_ws(card.get_text(" "))[:80])
            continue

        raw_text = card.get_text("\n", strip=True)
        title_el = card.select_one(SEL["card_title"])
        pill = card.select_one(SEL["card_type"])

        # Title falls back to the first visible line of the card
        title = normalize_ws(title_el.get_text(" ")) if title_el else ""
        if not title and raw_text:
            title = raw_text.splitlines()[0].strip()

        out.append(OpportunitySummary(
            href=urljoin(base_url, href),
            title=title,
            type=(normalize_ws(pill.get_text(" ")) or None) if pill else None,
            raw_text=raw_text,
        ))

    return out


class ListingPaginator:
    """
    Walks the paginated search results in one browser session, clicking the
    numbered pager link for the next page in place.
    """

    def __init__(self, sessions: PageSessionManager, max_pages: int = 0):
        self.sessions = sessions
        self.max_pages = max_pages

    async def collect_summaries(
        self,
        entry_url: str,
        accumulator: Optional[List[OpportunitySummary]] = None,
    ) -> List[OpportunitySummary]:
        acc: List[OpportunitySummary] = accumulator if accumulator is not None else []
        seen = {canonicalize_url(s.href) for s in acc}

        async with self.sessions.open(entry_url) as session:
            page_no = 1
            html = await session.content()
            while True:
                logger.info(f"Indexing listing page {page_no}...")
                cards = parse_listing_cards(html, session.url)

                added = 0
                for card in cards:
                    key = canonicalize_url(card.href)
                    if key in seen:
                        logger.debug(f"Duplicate listing entry ignored: {card.href}")
                        continue
                    seen.add(key)
                    acc.append(card)
                    added += 1
                logger.info(f"Listing page {page_no}: {len(cards)} cards, {added} new (total {len(acc)})")

                if not cards:
                    break
                if self.max_pages and page_no >= self.max_pages:
                    logger.warning(f"Stopping pagination at MAX_PAGES={self.max_pages}")
                    break

                next_label = str(page_no + 1)
                try:
                    control = await session.find_control(SEL["pagination_link"], next_label)
                    if control is None:
                        break
                    await session.click(control)
                    html = await session.content()
                except NavigationError as e:
                    # Keep what we have rather than failing the whole run
                    logger.error(f"Could not advance to listing page {next_label}: {e}")
                    break
                page_no += 1

        logger.info(f"Pagination finished after {page_no} page(s): {len(acc)} opportunities")
        return acc
