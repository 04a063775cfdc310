"""
Tests for the sheet fetcher and its fallback policy.
HTTP is faked with httpx.MockTransport; no real network access.

Run with: pytest tests/test_fetcher.py -v
"""
import asyncio

import httpx
import pytest
from pydantic import ValidationError

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from settings import SheetConfig
from core.fetcher import SheetFetcher, FetchResult, FALLBACK_ROWS

SHEET_CSV = (
    "id,task,completed,created_date\r\n"
    "1,Learn APIs,FALSE,2024-07-13\r\n"
    ",,,\r\n"
    "2,Write tests,TRUE,2024-07-14"
)


def make_fetcher(handler, **config):
    config.setdefault("sheet_id", "sheet-123")
    return SheetFetcher(SheetConfig(**config), transport=httpx.MockTransport(handler))


def fetch(fetcher) -> FetchResult:
    return asyncio.run(fetcher.fetch_sheet())


class TestRequest:
    """Shape of the outbound request."""

    def test_url_and_user_agent(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["ua"] = request.headers.get("user-agent")
            return httpx.Response(200, text="id\n1")

        fetch(make_fetcher(handler, gid="42"))

        assert seen["url"] == "https://docs.google.com/spreadsheets/d/sheet-123/export?format=csv&gid=42"
        assert seen["ua"].startswith("Mozilla/5.0 (Macintosh")

    def test_follows_redirects(self):
        def handler(request):
            if request.url.host == "docs.google.com":
                return httpx.Response(307, headers={"Location": "https://doc-cache.example.com/export.csv"})
            return httpx.Response(200, text="id,task\n9,redirected")

        result = fetch(make_fetcher(handler))

        assert result.status == "ok"
        assert result.rows == [["id", "task"], ["9", "redirected"]]


class TestSuccess:

    def test_rows_parsed_and_blank_rows_dropped(self):
        result = fetch(make_fetcher(lambda r: httpx.Response(200, text=SHEET_CSV)))

        assert not result.is_degraded
        assert result.error is None
        assert result.rows == [
            ["id", "task", "completed", "created_date\r"],
            ["1", "Learn APIs", "FALSE", "2024-07-13\r"],
            ["2", "Write tests", "TRUE", "2024-07-14"],
        ]

    def test_records(self):
        result = fetch(make_fetcher(lambda r: httpx.Response(200, text=SHEET_CSV)))
        records = result.records()

        assert [r["id"] for r in records] == [1, 2]
        assert [r["completed"] for r in records] == [False, True]

    def test_strict_parser_opt_in(self):
        body = 'id,task\r\n1,"Buy milk, eggs"\r\n'
        result = fetch(make_fetcher(lambda r: httpx.Response(200, text=body), csv_parser="rfc4180"))

        assert result.rows == [["id", "task"], ["1", "Buy milk, eggs"]]

    def test_byte_order_mark_stripped(self):
        body = "\ufeffid,task\n1,a".encode("utf-8")
        result = fetch(make_fetcher(lambda r: httpx.Response(200, content=body)))

        assert result.rows[0] == ["id", "task"]
        assert result.records() == [{"id": 1, "task": "a"}]

    def test_empty_sheet(self):
        result = fetch(make_fetcher(lambda r: httpx.Response(200, text="")))

        assert result.status == "ok"
        assert result.rows == []
        assert result.records() == []


class TestFallback:
    """Any failure degrades to the fixed 3-record dataset."""

    def assert_fallback(self, result):
        assert result.is_degraded
        assert result.rows == FALLBACK_ROWS
        records = result.records()
        assert [r["id"] for r in records] == [1, 2, 3]
        assert all(r["completed"] is False for r in records)

    @pytest.mark.parametrize("status_code", [400, 401, 404, 500, 503])
    def test_non_2xx(self, status_code):
        result = fetch(make_fetcher(lambda r: httpx.Response(status_code, text="nope")))

        self.assert_fallback(result)
        assert str(status_code) in result.error

    def test_connect_error(self):
        def handler(request):
            raise httpx.ConnectError("name resolution failed", request=request)

        result = fetch(make_fetcher(handler))

        self.assert_fallback(result)
        assert "name resolution failed" in result.error

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        self.assert_fallback(fetch(make_fetcher(handler)))

    def test_undecodable_body(self):
        result = fetch(make_fetcher(lambda r: httpx.Response(200, content=b"\xff\xfe\xfa")))
        self.assert_fallback(result)

    def test_fallback_is_a_fresh_copy(self):
        fetcher = make_fetcher(lambda r: httpx.Response(500))
        first = fetch(fetcher)
        first.rows[1][1] = "mutated"

        assert fetch(fetcher).rows == FALLBACK_ROWS
        assert FALLBACK_ROWS[1][1] == "Learn APIs from Google Sheets"

    def test_single_attempt(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(502)

        fetch(make_fetcher(handler))
        assert len(calls) == 1


class TestConfig:

    def test_unknown_parser_rejected(self):
        with pytest.raises(ValidationError):
            SheetFetcher(SheetConfig(sheet_id="s", csv_parser="excel"))
