from __future__ import annotations

import asyncio
import json

import pytest

from buyictbot.buyictbot import BuyICTBot, RunState
from buyictbot.scrapers import NavigationError, PageSessionManager, PersistenceError, RunSnapshot
from buyictbot.services.snapshot_store import SnapshotStore
from buyictbot.utils.config import Config

from fakes import ENTRY_URL, FakeBrowser, FakeSite, detail_page, listing_page

BASE = "https://www.buyict.gov.au"


class RecordingNotifier:
    def __init__(self) -> None:
        self.calls = 0

    def done(self) -> None:
        self.calls += 1


class RecordingStore(SnapshotStore):
    def __init__(self, path: str) -> None:
        super().__init__(path)
        self.writes: list[RunSnapshot] = []

    def write(self, snapshot: RunSnapshot) -> None:
        self.writes.append(snapshot)
        super().write(snapshot)


class BrokenStore(SnapshotStore):
    def write(self, snapshot: RunSnapshot) -> None:
        raise PersistenceError("disk full", self.path)


def _bot(site: FakeSite, tmp_path, store=None, **cfg_kwargs):
    cfg = Config(data_file=str(tmp_path / "data" / "data.json"), **cfg_kwargs)
    notifier = RecordingNotifier()
    bot = BuyICTBot(
        cfg,
        sessions=PageSessionManager(cfg, browser=FakeBrowser(site)),
        store=store or SnapshotStore(cfg.data_file),
        notifier=notifier,
    )
    return bot, notifier


def _site(n: int) -> FakeSite:
    cards = [{"title": f"Role {i}", "href": f"/opp/{i}", "type": "Open to all"} for i in range(n)]
    pages = {ENTRY_URL: listing_page(cards)}
    for i in range(n):
        pages[f"{BASE}/opp/{i}"] = detail_page(overview=(("Opportunity ID", f"PRI-{i}"),))
    return FakeSite(pages)


def test_single_opportunity_run_writes_snapshot(tmp_path) -> None:
    site = FakeSite({
        ENTRY_URL: listing_page([{"title": "Dev role", "href": "/a", "type": "Open to all"}]),
        f"{BASE}/a": detail_page(),
    })
    bot, notifier = _bot(site, tmp_path)

    snapshot = asyncio.run(bot.run_once())

    assert bot.state is RunState.DONE
    assert notifier.calls == 1
    assert snapshot.hrefs == [f"{BASE}/a"]

    written = json.loads((tmp_path / "data" / "data.json").read_text(encoding="utf-8"))
    assert written["generatedAt"] == snapshot.generated_at
    assert len(written["opportunities"]) == 1
    entry = written["opportunities"][0]
    assert entry["href"] == f"{BASE}/a"
    assert entry["title"] == "Dev role"
    assert entry["type"] == "Open to all"
    assert entry["details"]["submissionRequirements"] == ["CV", "Pricing"]
    assert "detailsError" not in entry


def test_detail_failure_is_isolated(tmp_path) -> None:
    site = _site(3)
    site.pages[f"{BASE}/opp/1"] = detail_page(description=None)
    bot, notifier = _bot(site, tmp_path)

    snapshot = asyncio.run(bot.run_once())

    assert bot.state is RunState.DONE
    assert snapshot.hrefs == [f"{BASE}/opp/0", f"{BASE}/opp/1", f"{BASE}/opp/2"]
    ok0, broken, ok2 = snapshot.opportunities
    assert ok0.details is not None and ok2.details is not None
    assert broken.details is None
    assert broken.details_error.startswith("ExtractionError")
    assert notifier.calls == 1


def test_detail_navigation_failure_is_isolated(tmp_path) -> None:
    site = _site(2)
    del site.pages[f"{BASE}/opp/0"]  # 404
    bot, _ = _bot(site, tmp_path)

    snapshot = asyncio.run(bot.run_once())

    assert snapshot.opportunities[0].details_error.startswith("NavigationError")
    assert snapshot.opportunities[1].details is not None


def test_details_are_visited_sequentially_in_listing_order(tmp_path) -> None:
    site = _site(4)
    bot, _ = _bot(site, tmp_path)

    asyncio.run(bot.run_once())

    assert site.visits == [ENTRY_URL] + [f"{BASE}/opp/{i}" for i in range(4)]
    assert site.max_active == 1
    assert site.contexts_opened == site.contexts_closed == 5


def test_bounded_concurrency_preserves_order(tmp_path) -> None:
    site = _site(6)
    site.yield_on_goto = True
    bot, _ = _bot(site, tmp_path, detail_concurrency=2)

    snapshot = asyncio.run(bot.run_once())

    assert snapshot.hrefs == [f"{BASE}/opp/{i}" for i in range(6)]
    assert all(o.details is not None for o in snapshot.opportunities)
    assert 1 < site.max_active <= 2
    assert site.contexts_opened == site.contexts_closed


def test_incremental_mode_writes_after_every_detail(tmp_path) -> None:
    site = _site(3)
    store = RecordingStore(str(tmp_path / "data" / "data.json"))
    bot, _ = _bot(site, tmp_path, store=store, incremental_write=True)

    asyncio.run(bot.run_once())

    assert len(store.writes) == 4
    detailed = [sum(1 for o in s.opportunities if o.details) for s in store.writes]
    assert detailed == [1, 2, 3, 3]


def test_persistence_failure_is_fatal(tmp_path, caplog) -> None:
    site = _site(1)
    bot, notifier = _bot(site, tmp_path, store=BrokenStore(str(tmp_path / "x.json")))

    with pytest.raises(PersistenceError):
        asyncio.run(bot.run_once())

    assert bot.state is RunState.FAILED
    assert notifier.calls == 0
    assert f"Run failed during persisting at {bot.cfg.data_file}" in caplog.text


def test_listing_failure_leaves_previous_snapshot(tmp_path, caplog) -> None:
    site = _site(1)
    site.goto_errors.add(ENTRY_URL)
    bot, _ = _bot(site, tmp_path)
    out = tmp_path / "data" / "data.json"
    out.parent.mkdir(parents=True)
    out.write_text('{"generatedAt": "2026-01-01T00:00:00+00:00", "opportunities": []}', encoding="utf-8")

    with pytest.raises(NavigationError):
        asyncio.run(bot.run_once())

    assert bot.state is RunState.FAILED
    assert f"Run failed during paginating at {ENTRY_URL}" in caplog.text
    assert json.loads(out.read_text(encoding="utf-8"))["generatedAt"] == "2026-01-01T00:00:00+00:00"


def test_page_open_failure_is_isolated(tmp_path) -> None:
    site = _site(2)
    site.new_page_errors.add(2)  # context 1 is the listing, 2 is the first detail visit
    bot, notifier = _bot(site, tmp_path)

    snapshot = asyncio.run(bot.run_once())

    assert bot.state is RunState.DONE
    first, second = snapshot.opportunities
    assert first.details is None
    assert first.details_error.startswith("NavigationError")
    assert second.details is not None
    assert (tmp_path / "data" / "data.json").exists()
    assert notifier.calls == 1


def test_bounded_failure_cancels_remaining_visits(tmp_path, caplog) -> None:
    site = _site(6)
    site.yield_on_goto = True
    store = BrokenStore(str(tmp_path / "data" / "data.json"))
    bot, _ = _bot(site, tmp_path, store=store, detail_concurrency=2, incremental_write=True)

    with pytest.raises(PersistenceError):
        asyncio.run(bot.run_once())

    assert bot.state is RunState.FAILED
    assert len(site.visits) < 1 + 6
    assert site.contexts_opened == site.contexts_closed
    assert f"Run failed during extracting_details at {bot.cfg.data_file}" in caplog.text
