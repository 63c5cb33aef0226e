from __future__ import annotations
# buyictbot/buyictbot.py

import asyncio
import argparse
import enum
from dataclasses import replace
from typing import List, Optional

from buyictbot.utils.config import Config
from buyictbot.utils.logger import logger, set_level as set_log_level
from buyictbot.utils.helpers import utc_now_iso
from buyictbot.services.notifier import Notifier
from buyictbot.services.snapshot_store import SnapshotStore

from buyictbot.scrapers import (
    DetailExtractor,
    ExtractionError,
    ListingPaginator,
    NavigationError,
    OpportunitySummary,
    PageSessionManager,
    RunSnapshot,
)


class RunState(enum.Enum):
    NOT_STARTED = "not_started"
    PAGINATING = "paginating"
    EXTRACTING_DETAILS = "extracting_details"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


# ------------------------ main bot ------------------------

class BuyICTBot:
    """
    One crawl: paginate the listing, visit every opportunity, write the snapshot.
    The bot owns the opportunity list for the duration of run_once().
    """

    def __init__(
        self,
        cfg: Config,
        sessions: Optional[PageSessionManager] = None,
        store: Optional[SnapshotStore] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.cfg = cfg
        self.sessions = sessions or PageSessionManager(cfg)
        self.store = store or SnapshotStore(cfg.data_file)
        self.notifier = notifier or Notifier(cfg)
        self.paginator = ListingPaginator(self.sessions, max_pages=cfg.max_pages)
        self.extractor = DetailExtractor(self.sessions)

        self.state = RunState.NOT_STARTED
        self._current_url: Optional[str] = None

    def _enter(self, state: RunState, url: Optional[str] = None) -> None:
        self.state = state
        self._current_url = url
        logger.debug(f"Run state -> {state.value}" + (f" ({url})" if url else ""))

    async def run_once(self) -> RunSnapshot:
        self._enter(RunState.NOT_STARTED)
        try:
            async with self.sessions:
                # 1) Listing
                self._enter(RunState.PAGINATING, self.cfg.entry_url)
                opportunities = await self.paginator.collect_summaries(self.cfg.entry_url, [])

                # 2) Details
                self._enter(RunState.EXTRACTING_DETAILS)
                if self.cfg.detail_concurrency > 1:
                    opportunities = await self._extract_bounded(opportunities)
                else:
                    opportunities = await self._extract_sequential(opportunities)

            # 3) Persist
            self._enter(RunState.PERSISTING, self.cfg.data_file)
            snapshot = RunSnapshot(generated_at=utc_now_iso(), opportunities=tuple(opportunities))
            self.store.write(snapshot)
        except BaseException as e:
            stage = self.state.value
            self.state = RunState.FAILED
            where = f" at {self._current_url}" if self._current_url else ""
            logger.error(f"Run failed during {stage}{where}: {e!r}")
            raise

        self._enter(RunState.DONE)
        failed = sum(1 for o in snapshot.opportunities if o.details_error)
        logger.info(
            f"Run complete. Found: {len(snapshot.opportunities)} | "
            f"Detailed: {len(snapshot.opportunities) - failed} | Failed: {failed}"
        )
        self.notifier.done()
        return snapshot

    # ------------------------ detail visits ------------------------

    async def _attach_details(self, opp: OpportunitySummary) -> OpportunitySummary:
        """Visit one detail page; a failure is recorded on the entry, not raised."""
        try:
            return opp.with_details(await self.extractor.extract_details(opp.href))
        except (NavigationError, ExtractionError) as e:
            logger.error(f"Details failed for '{opp.title}': {e}")
            return opp.with_error(f"{type(e).__name__}: {e}")

    async def _extract_sequential(self, opps: List[OpportunitySummary]) -> List[OpportunitySummary]:
        out = list(opps)
        for i, opp in enumerate(opps):
            logger.info(f"Indexing opportunity details [{i + 1}/{len(opps)}]")
            self._current_url = opp.href
            out[i] = await self._attach_details(opp)
            if self.cfg.incremental_write:
                self._current_url = self.cfg.data_file
                self._write_partial(out)
        return out

    async def _extract_bounded(self, opps: List[OpportunitySummary]) -> List[OpportunitySummary]:
        # Everything lives on one host, so a single semaphore is the per-host cap
        sem = asyncio.Semaphore(self.cfg.detail_concurrency)
        out = list(opps)
        done = 0

        async def _one(i: int, opp: OpportunitySummary):
            nonlocal done
            async with sem:
                self._current_url = opp.href
                out[i] = await self._attach_details(opp)
            done += 1
            logger.info(f"Indexed opportunity details [{done}/{len(opps)}]")
            if self.cfg.incremental_write:
                self._current_url = self.cfg.data_file
                self._write_partial(out)

        logger.info(f"Extracting details with concurrency={self.cfg.detail_concurrency}")
        tasks = [asyncio.ensure_future(_one(i, o)) for i, o in enumerate(opps)]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            # Siblings must be finished before the browser is closed under them
            for t in tasks:
                t.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return out

    def _write_partial(self, opps: List[OpportunitySummary]) -> None:
        self.store.write(RunSnapshot(generated_at=utc_now_iso(), opportunities=tuple(opps)))


# ------------------------ CLI loop ------------------------

async def _loop(bot: BuyICTBot, seconds: int):
    if seconds <= 0:
        await bot.run_once()
        return
    while True:
        await bot.run_once()
        logger.info(f"Sleeping {seconds}s until next run")
        await asyncio.sleep(seconds)


def _apply_overrides(cfg: Config, args: argparse.Namespace) -> Config:
    overrides = {}
    if args.output:
        overrides["data_file"] = args.output
    if args.entry_url:
        overrides["entry_url"] = args.entry_url
    if args.concurrency is not None:
        overrides["detail_concurrency"] = args.concurrency
    if args.incremental:
        overrides["incremental_write"] = True
    if args.no_sound:
        overrides["notify_sound"] = False
    return replace(cfg, **overrides) if overrides else cfg


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Crawl BuyICT opportunities into a JSON snapshot.")
    parser.add_argument("--loop", type=int, default=0, help="Run continuously every N seconds (0 = once).")
    parser.add_argument("--output", help="Snapshot path (overrides DATA_FILE).")
    parser.add_argument("--entry-url", help="Listing URL (overrides ENTRY_URL).")
    parser.add_argument("--concurrency", type=int, help="Parallel detail visits (overrides DETAIL_CONCURRENCY).")
    parser.add_argument("--incremental", action="store_true", help="Rewrite the snapshot after every detail page.")
    parser.add_argument("--no-sound", action="store_true", help="Skip the completion sound.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    args = parser.parse_args(argv)

    if args.verbose:
        set_log_level("DEBUG")

    try:
        cfg = _apply_overrides(Config.load(), args)
    except RuntimeError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    bot = BuyICTBot(cfg)
    try:
        asyncio.run(_loop(bot, args.loop))
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130
    except Exception:
        # already logged with stage/URL by run_once
        return 1
    logger.info("================== DONE ======================")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
