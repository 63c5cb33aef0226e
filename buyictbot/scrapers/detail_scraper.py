from __future__ import annotations
# buyictbot/scrapers/detail_scraper.py

from dataclasses import replace
from typing import List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from buyictbot.scrapers.errors import ExtractionError
from buyictbot.scrapers.models import Criterion, LabelValue, OpportunityDetail
from buyictbot.scrapers.page_selectors import CLOSING_DATE_LABEL, DETAIL_SELECTORS as SEL
from buyictbot.scrapers.session import PageSessionManager
from buyictbot.utils.helpers import normalize_ws, parse_when
from buyictbot.utils.logger import logger


def _text(el: Optional[Tag]) -> str:
    return normalize_ws(el.get_text(" ")) if el is not None else ""

def _required(row: Tag, selector: str, what: str, url: Optional[str]) -> Tag:
    el = row.select_one(selector)
    if el is None:
        raise ExtractionError(f"{what} row is missing its {selector!r} cell", url, fixture=selector)
    return el

def _label_value_rows(soup: BeautifulSoup, row_selector: str, what: str, url: Optional[str]) -> List[LabelValue]:
    return [
        LabelValue(
            label=_text(_required(row, SEL["row_label"], what, url)),
            value=_text(_required(row, SEL["row_value"], what, url)),
        )
        for row in soup.select(row_selector)
    ]

def _criteria_rows(soup: BeautifulSoup, row_selector: str, what: str, url: Optional[str]) -> List[Criterion]:
    out: List[Criterion] = []
    for row in soup.select(row_selector):
        desc = _text(_required(row, SEL["criteria_description"], what, url))
        weight = _text(row.select_one(SEL["criteria_weight"])) or None
        out.append(Criterion(description=desc, weight=weight))
    return out


def parse_detail(html: str, url: Optional[str] = None) -> OpportunityDetail:
    """
    Extract an OpportunityDetail from a rendered detail page.

    The requirements description block is the one fixture every opportunity
    page carries; without it the page is not a (fully rendered) detail page
    and ExtractionError is raised. Row-based sections may legitimately be
    empty, but a row missing its label/value cells is treated as broken markup.
    """
    soup = BeautifulSoup(html, "html.parser")

    desc_el = soup.select_one(SEL["requirements_description"])
    if desc_el is None:
        raise ExtractionError("Requirements description not found", url, fixture=SEL["requirements_description"])

    detail = OpportunityDetail(
        overview=tuple(_label_value_rows(soup, SEL["overview_row"], "Overview", url)),
        requirements_description=desc_el.decode_contents().strip(),
        requirements_data=tuple(_label_value_rows(soup, SEL["requirements_row"], "Requirements", url)),
        essential_criteria=tuple(_criteria_rows(soup, SEL["essential_criteria_row"], "Essential criteria", url)),
        desirable_criteria=tuple(_criteria_rows(soup, SEL["desirable_criteria_row"], "Desirable criteria", url)),
        submission_requirements=tuple(
            t for t in (_text(li) for li in soup.select(SEL["submission_item"])) if t
        ),
    )
    return replace(detail, closing_at=parse_when(detail.overview_value(CLOSING_DATE_LABEL)))


class DetailExtractor:
    """Visits one opportunity page in its own session and parses it."""

    def __init__(self, sessions: PageSessionManager):
        self.sessions = sessions

    async def extract_details(self, href: str) -> OpportunityDetail:
        logger.info(f"Indexing opportunity details: {href}")
        async with self.sessions.open(href) as session:
            html = await session.content()
        detail = parse_detail(html, href)
        logger.debug(
            f"Extracted {len(detail.overview)} overview rows, "
            f"{len(detail.essential_criteria)}/{len(detail.desirable_criteria)} criteria from {href}"
        )
        return detail
