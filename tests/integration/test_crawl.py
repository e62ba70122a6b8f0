"""
Integration tests for the crawl pipeline.

The KAA site is replaced with httpx.MockTransport so the tests run
offline; failures are HTTP status errors, which are not retried.
"""

import asyncio
import json
import random

import httpx
import pytest

from law_scraper.core.exceptions import ParseError
from law_scraper.core.http_client import HttpClient
from law_scraper.core.models import DetailRecord, SummaryRecord
from law_scraper.enricher import DetailEnricher, enrich_all
from law_scraper.navigators.listing import ListingNavigator, build_page_url
from law_scraper.orchestrator import MasterScraper
from law_scraper.parsers.base import ParserStrategy
from law_scraper.parsers.law_detail import LawDetailParser

LISTING_URL = "https://www.kaa.org.tw/law_list.php"


def _page_number(request: httpx.Request) -> int:
    return int(request.url.params.get("b", "1"))


def _listing_rows(page: int, per_page: int = 3):
    rows = []
    for i in range(per_page):
        serial = str(page * 100 + i)
        rows.append(
            ("113", serial, f"第{page}頁公告{i}", "建築管理", f"law_detail.php?id={serial}")
        )
    return rows


class TestBuildPageUrl:
    """Tests for build_page_url function."""

    def test_first_page_bare(self):
        assert build_page_url(LISTING_URL, 1) == LISTING_URL

    def test_later_page(self):
        assert build_page_url(LISTING_URL, 3) == f"{LISTING_URL}?b=3"

    def test_existing_query_kept(self):
        url = build_page_url(f"{LISTING_URL}?kind=2&b=9", 4)
        assert url == f"{LISTING_URL}?kind=2&b=4"


class TestListingNavigator:
    """Tests for paginated discovery."""

    @pytest.mark.asyncio
    async def test_all_pages(self, source, listing_html):
        def handler(request):
            page = _page_number(request)
            return httpx.Response(
                200,
                text=listing_html(_listing_rows(page), page=page, total_pages=3, total_records=9),
            )

        async with HttpClient(transport=httpx.MockTransport(handler)) as client:
            navigator = ListingNavigator(http_client=client)
            records = await navigator.discover(source)

        assert [r.serial for r in records] == [
            "100", "101", "102", "200", "201", "202", "300", "301", "302",
        ]
        assert navigator.total_records == 9
        assert navigator.skipped_pages == []

    @pytest.mark.asyncio
    async def test_failed_middle_page_skipped(self, source, listing_html):
        """Test a 500 on page 3 does not stop pages 4 and 5."""
        requested = []

        def handler(request):
            page = _page_number(request)
            requested.append(page)
            if page == 3:
                return httpx.Response(500, text="error")
            return httpx.Response(
                200,
                text=listing_html(_listing_rows(page, 2), page=page, total_pages=5, total_records=10),
            )

        async with HttpClient(transport=httpx.MockTransport(handler)) as client:
            navigator = ListingNavigator(http_client=client)
            records = await navigator.discover(source)

        assert requested == [1, 2, 3, 4, 5]
        assert [r.serial for r in records] == ["100", "101", "200", "201", "400", "401", "500", "501"]
        assert navigator.skipped_pages == [3]

    @pytest.mark.asyncio
    async def test_unparseable_page_skipped(self, source, listing_html):
        def handler(request):
            page = _page_number(request)
            if page == 2:
                return httpx.Response(200, text="<html><body>系統維護中</body></html>")
            return httpx.Response(
                200,
                text=listing_html(_listing_rows(page, 1), page=page, total_pages=3),
            )

        async with HttpClient(transport=httpx.MockTransport(handler)) as client:
            navigator = ListingNavigator(http_client=client)
            records = await navigator.discover(source)

        assert [r.serial for r in records] == ["100", "300"]
        assert navigator.skipped_pages == [2]

    @pytest.mark.asyncio
    async def test_first_page_failure_ends_crawl(self, source):
        requested = []

        def handler(request):
            requested.append(_page_number(request))
            return httpx.Response(503)

        async with HttpClient(transport=httpx.MockTransport(handler)) as client:
            navigator = ListingNavigator(http_client=client)
            records = await navigator.discover(source)

        assert records == []
        assert requested == [1]
        assert navigator.total_records is None

    @pytest.mark.asyncio
    async def test_page_cap(self, source, listing_html):
        requested = []

        def handler(request):
            page = _page_number(request)
            requested.append(page)
            return httpx.Response(
                200,
                text=listing_html(_listing_rows(page, 1), page=page, total_pages=10),
            )

        async with HttpClient(transport=httpx.MockTransport(handler)) as client:
            navigator = ListingNavigator(http_client=client)
            records = await navigator.discover(source, max_pages=2)

        assert requested == [1, 2]
        assert len(records) == 2

    @pytest.mark.asyncio
    async def test_headers_sent(self, source, listing_html):
        seen = {}

        def handler(request):
            seen["user-agent"] = request.headers.get("user-agent")
            seen["referer"] = request.headers.get("referer")
            return httpx.Response(200, text=listing_html([]))

        async with HttpClient(referer=source.referer, transport=httpx.MockTransport(handler)) as client:
            await ListingNavigator(http_client=client).discover(source)

        assert "Mozilla/5.0" in seen["user-agent"]
        assert seen["referer"] == "https://www.kaa.org.tw/"


class ShuffledParser(ParserStrategy):
    """Parser that finishes records in random order."""

    def __init__(self, fail_serials=()):
        super().__init__(http_client=None)
        self.fail_serials = set(fail_serials)
        self.calls = []
        self.rng = random.Random(7)

    async def extract(self, summary, source):
        self.calls.append(summary.serial)
        await asyncio.sleep(self.rng.uniform(0, 0.01))
        if summary.serial in self.fail_serials:
            raise ParseError("broken page")
        return DetailRecord(issuer=f"issuer-{summary.serial}")

    def parse(self, html, base_url):
        return DetailRecord.empty()


class CountingParser(ParserStrategy):
    """Parser that records how many extractions run at once."""

    def __init__(self, hold=0.0):
        super().__init__(http_client=None)
        self.hold = hold
        self.in_flight = 0
        self.peak = 0

    async def extract(self, summary, source):
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            if self.hold:
                await asyncio.sleep(self.hold)
        finally:
            self.in_flight -= 1
        return DetailRecord(issuer=f"issuer-{summary.serial}")

    def parse(self, html, base_url):
        return DetailRecord.empty()


def _summaries(count):
    return [
        SummaryRecord(year="113", serial=str(i), category="c", subject=f"s{i}", subject_url=f"https://x.test/{i}")
        for i in range(count)
    ]


class TestDetailEnricher:
    """Tests for concurrent enrichment."""

    @pytest.mark.asyncio
    async def test_order_preserved(self, source):
        summaries = _summaries(40)
        parser = ShuffledParser()

        results = await enrich_all(summaries, parser, source, concurrency=5, delay=0)

        assert [r.serial for r in results] == [s.serial for s in summaries]
        assert [r.issuer for r in results] == [f"issuer-{i}" for i in range(40)]
        assert sorted(parser.calls, key=int) == [str(i) for i in range(40)]

    @pytest.mark.asyncio
    async def test_failure_becomes_stub(self, source):
        summaries = _summaries(6)
        parser = ShuffledParser(fail_serials={"2", "4"})
        enricher = DetailEnricher(parser, source, concurrency=2, delay=0)

        results = await enricher.enrich_all(summaries)

        assert len(results) == 6
        assert enricher.failures == 2
        assert results[2].issuer is None
        assert results[2].subject == "s2"
        assert results[2].attachments == ()
        assert results[3].issuer == "issuer-3"

    @pytest.mark.asyncio
    async def test_more_workers_than_records(self, source):
        parser = ShuffledParser()
        results = await enrich_all(_summaries(2), parser, source, concurrency=8, delay=0)

        assert [r.serial for r in results] == ["0", "1"]

    @pytest.mark.asyncio
    async def test_empty_input(self, source):
        assert await enrich_all([], ShuffledParser(), source, concurrency=3, delay=0) == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("concurrency, count", [(3, 10), (5, 2), (1, 4)])
    async def test_concurrency_bound(self, source, concurrency, count):
        parser = CountingParser(hold=0.005)

        results = await enrich_all(_summaries(count), parser, source, concurrency=concurrency, delay=0)

        assert len(results) == count
        assert parser.peak == min(concurrency, count)
        assert parser.in_flight == 0

    @pytest.mark.asyncio
    async def test_delay_after_each_record(self, source, monkeypatch):
        slept = []

        async def fake_sleep(seconds):
            slept.append(seconds)

        monkeypatch.setattr("law_scraper.enricher.asyncio.sleep", fake_sleep)

        await enrich_all(_summaries(4), CountingParser(), source, concurrency=2, delay=0.25)

        assert slept == [0.25] * 4

    @pytest.mark.asyncio
    async def test_delay_defaults_to_source(self, source, monkeypatch):
        slept = []

        async def fake_sleep(seconds):
            slept.append(seconds)

        monkeypatch.setattr("law_scraper.enricher.asyncio.sleep", fake_sleep)
        source.detail_delay = 0.2

        await enrich_all(_summaries(3), CountingParser(), source, concurrency=3)

        assert slept == [0.2] * 3

    @pytest.mark.asyncio
    async def test_zero_delay_never_sleeps(self, source, monkeypatch):
        slept = []

        async def fake_sleep(seconds):
            slept.append(seconds)

        monkeypatch.setattr("law_scraper.enricher.asyncio.sleep", fake_sleep)

        await enrich_all(_summaries(3), CountingParser(), source, concurrency=2, delay=0)

        assert slept == []

    @pytest.mark.asyncio
    async def test_row_without_link_not_fetched(self, source):
        def handler(request):
            raise AssertionError(f"unexpected request {request.url}")

        summary = SummaryRecord(year="113", serial="1", category="c", subject="無連結")

        async with HttpClient(transport=httpx.MockTransport(handler)) as client:
            parser = LawDetailParser(http_client=client)
            results = await enrich_all([summary], parser, source, delay=0)

        assert results[0].subject == "無連結"
        assert results[0].issuer is None


class TestMasterScraper:
    """End-to-end crawl against a mocked site."""

    @pytest.fixture
    def site(self, listing_html, detail_html):
        """Two listing pages, one broken detail page."""
        def handler(request):
            path = request.url.path
            if path == "/law_list.php":
                page = _page_number(request)
                return httpx.Response(
                    200,
                    text=listing_html(_listing_rows(page, 2), page=page, total_pages=2, total_records=4),
                )
            if path == "/law_detail.php":
                serial = request.url.params["id"]
                if serial == "201":
                    return httpx.Response(404)
                return httpx.Response(
                    200,
                    text=detail_html(
                        {
                            "發文單位": "高雄市政府工務局",
                            "發文日期": "113/05/01",
                            "條文主旨": f"完整主旨{serial}",
                        },
                        attachments=[("附件一", f"/files/{serial}.pdf")],
                    ),
                )
            return httpx.Response(404)

        return httpx.MockTransport(handler)

    @pytest.mark.asyncio
    async def test_run_and_save(self, source, site, tmp_path):
        output = tmp_path / "data" / "documents.json"
        scraper = MasterScraper(output_path=str(output), source=source, transport=site)

        dataset = await scraper.run(delay=0)
        scraper.save_json(dataset)

        assert [d.serial for d in dataset.documents] == ["100", "101", "200", "201"]
        assert dataset.total_records == 4
        assert scraper.stats == {
            "pages_skipped": 0,
            "records_discovered": 4,
            "records_enriched": 4,
            "detail_failures": 1,
        }

        first = dataset.documents[0]
        assert first.subject == "完整主旨100"
        assert first.date == "2024-05-01"
        assert first.attachments[0].url == "https://www.kaa.org.tw/files/100.pdf"

        broken = dataset.documents[3]
        assert broken.subject == "第2頁公告1"
        assert broken.issuer is None

        payload = json.loads(output.read_text(encoding="utf-8"))
        assert payload["totalRecords"] == 4
        assert len(payload["documents"]) == 4
        assert payload["documents"][0]["issuer"] == "高雄市政府工務局"
        assert "updatedAt" in payload
        assert "高雄市政府工務局" in output.read_text(encoding="utf-8")

    @pytest.mark.asyncio
    async def test_referer_falls_back_to_site_root(self, source, listing_html):
        seen = []

        def handler(request):
            seen.append(request.headers.get("referer"))
            return httpx.Response(200, text=listing_html([]))

        source.referer = None
        scraper = MasterScraper(source=source, transport=httpx.MockTransport(handler))

        dataset = await scraper.run(delay=0)

        assert dataset.documents == []
        assert seen == ["https://www.kaa.org.tw/"]
