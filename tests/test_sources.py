"""Tests for the sources module."""

import asyncio
import json
import tempfile
from pathlib import Path
from typing import List

import httpx
import pytest

from pet_values.config import FetchConfig
from pet_values.schemas import SourceRecord
from pet_values.sources import (
    JsonFileSourceAdapter,
    PendingSourceAdapter,
    SourceAdapter,
    ZackValuesAdapter,
    collect_source_records,
    default_adapters,
    extract_embedded_records,
    extract_pattern_records,
)

PATTERN_PAGE = """
<html><body>
<div class="pet"><h3 class="name">Mega Neon Cat</h3><p><b>Value:</b> 12,345</p></div>
<div class="pet"><h3>King&#39;s Dragon</h3><p><b>Value:</b>
    500</p></div>
<div class="pet"><h3>Incomplete Pet</h3><p>No value listed</p></div>
</body></html>
"""

EMBEDDED_PAGE = """
<html><head>
<script id="__NEXT_DATA__" type="application/json">
{"props": {"pets": [
    {"name": "Mega Neon Cat", "value": "1,500", "rarity": "Legendary"},
    {"name": "Tiny Bee", "value": 20},
    {"label": "No name here", "value": 3}
]}}
</script>
</head><body><h3>Ignored</h3><p><b>Value:</b> 1</p></body></html>
"""


class StaticAdapter(SourceAdapter):
    """Adapter returning fixed records after an optional delay."""

    def __init__(self, source_id: str, records: List[SourceRecord], delay: float = 0.0):
        self.source_id = source_id
        self.records = records
        self.delay = delay

    async def fetch_records(self) -> List[SourceRecord]:
        await asyncio.sleep(self.delay)
        return self.records


class BrokenAdapter(SourceAdapter):
    """Adapter whose fetch_source escapes its own error handling."""

    source_id = "broken"

    async def fetch_source(self) -> List[SourceRecord]:
        raise RuntimeError("adapter crashed")

    async def fetch_records(self) -> List[SourceRecord]:
        return []


def fetch_zack(handler) -> List[SourceRecord]:
    """Run the zack adapter against a mocked transport."""

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            adapter = ZackValuesAdapter(url="https://values.test/", client=client)
            return await adapter.fetch_source()

    return asyncio.run(run())


class TestExtraction:
    """Test record extraction from documents."""

    def test_pattern_pairs_by_position(self):
        """Test names and values pair up, extra names are dropped."""
        records = extract_pattern_records(PATTERN_PAGE, "zack")

        assert [(r.display_name, r.value) for r in records] == [
            ("Mega Neon Cat", 12345),
            ("King's Dragon", 500),
        ]
        assert all(r.rarity is None and r.source_id == "zack" for r in records)

    def test_pattern_no_matches(self):
        """Test a page without pet markup gives no records."""
        assert extract_pattern_records("<html></html>", "zack") == []

    def test_embedded_json(self):
        """Test pet entries are read from embedded JSON."""
        records = extract_embedded_records(EMBEDDED_PAGE, "zack")

        assert [(r.display_name, r.value, r.rarity) for r in records] == [
            ("Mega Neon Cat", 1500, "Legendary"),
            ("Tiny Bee", 20, None),
        ]

    def test_embedded_json_malformed(self):
        """Test invalid JSON scripts are skipped."""
        page = '<script type="application/json">{not json</script>'
        assert extract_embedded_records(page, "zack") == []

    def test_embedded_nested_lists_not_read_as_pets(self):
        """Test lists inside pet entries do not become records."""
        page = (
            '<script type="application/json">{"pets": ['
            '{"name": "Cat", "value": 1, "stats": [{"name": "Speed", "value": 5}]},'
            '{"name": "Dog", "value": 2}'
            "]}</script>"
        )
        records = extract_embedded_records(page, "zack")

        assert [(r.display_name, r.value) for r in records] == [("Cat", 1), ("Dog", 2)]

    def test_embedded_lists_found_under_wrappers(self):
        """Test pet lists are still found below lists of non-pet objects."""
        page = (
            '<script type="application/json">[{"section": "pets", '
            '"items": [{"name": "Cat", "value": 3}]}]</script>'
        )
        records = extract_embedded_records(page, "zack")

        assert [(r.display_name, r.value) for r in records] == [("Cat", 3)]

    def test_oversized_numeral_keeps_other_entries(self):
        """Test a numeral too long to parse becomes 0 without losing the page."""
        page = (
            "<h3>Cat</h3><b>Value:</b> " + "9" * 5000 +
            "<h3>Dog</h3><b>Value:</b> 1,200"
        )
        records = ZackValuesAdapter(url="https://values.test/").parse(page)

        assert [(r.display_name, r.value) for r in records] == [("Cat", 0), ("Dog", 1200)]

    def test_plain_scripts_ignored(self):
        """Test only JSON script tags are parsed."""
        page = '<script>var pets = [{"name": "Cat", "value": 1}];</script>'
        assert extract_embedded_records(page, "zack") == []


class TestZackValuesAdapter:
    """Test the remote values page adapter."""

    def test_parses_markup(self):
        """Test a successful fetch yields pattern records."""

        def handler(request):
            return httpx.Response(200, text=PATTERN_PAGE)

        records = fetch_zack(handler)
        assert [r.display_name for r in records] == ["Mega Neon Cat", "King's Dragon"]

    def test_prefers_embedded_data(self):
        """Test embedded JSON wins over markup when present."""

        def handler(request):
            return httpx.Response(200, text=EMBEDDED_PAGE)

        records = fetch_zack(handler)
        assert [r.display_name for r in records] == ["Mega Neon Cat", "Tiny Bee"]

    def test_sends_user_agent(self):
        """Test requests carry the configured User-Agent."""
        seen = {}

        def handler(request):
            seen["user_agent"] = request.headers.get("User-Agent")
            return httpx.Response(200, text="")

        fetch_zack(handler)
        assert seen["user_agent"] == FetchConfig().user_agent

    def test_non_success_status(self, capsys):
        """Test an error status yields no records and is reported."""

        def handler(request):
            return httpx.Response(503, text="unavailable")

        assert fetch_zack(handler) == []
        assert "zack source failed" in capsys.readouterr().out

    def test_transport_error(self, capsys):
        """Test a connection failure yields no records and is reported."""

        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        assert fetch_zack(handler) == []
        assert "zack source failed" in capsys.readouterr().out


class TestPendingSourceAdapter:
    """Test placeholder sources."""

    def test_returns_nothing(self):
        """Test a source without an endpoint contributes no records."""
        adapter = PendingSourceAdapter("moonvalues")
        assert asyncio.run(adapter.fetch_source()) == []
        assert adapter.source_id == "moonvalues"


class TestJsonFileSourceAdapter:
    """Test the local file source."""

    def test_reads_entries(self):
        """Test entries are read from a JSON list."""
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "values.json"
            path.write_text(
                json.dumps(
                    [
                        {"name": "Cat", "value": "2,000", "rarity": "Rare"},
                        {"name": "Dog", "value": "n/a"},
                    ]
                ),
                encoding="utf-8",
            )
            records = asyncio.run(JsonFileSourceAdapter(path, "local").fetch_source())

        assert [(r.display_name, r.value, r.rarity, r.source_id) for r in records] == [
            ("Cat", 2000, "Rare", "local"),
            ("Dog", 0, None, "local"),
        ]

    def test_missing_file(self, capsys):
        """Test a missing file yields no records and is reported."""
        adapter = JsonFileSourceAdapter("/nonexistent/values.json", "local")
        assert asyncio.run(adapter.fetch_source()) == []
        assert "local source failed" in capsys.readouterr().out

    def test_not_a_list(self):
        """Test a JSON object instead of a list is rejected."""
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "values.json"
            path.write_text('{"name": "Cat"}', encoding="utf-8")
            assert asyncio.run(JsonFileSourceAdapter(path, "local").fetch_source()) == []


class TestCollectSourceRecords:
    """Test concurrent collection across adapters."""

    def test_keeps_adapter_order(self):
        """Test records follow registration order, not completion order."""
        slow = StaticAdapter("slow", [SourceRecord(display_name="Cat", value=1, source_id="slow")], delay=0.05)
        fast = StaticAdapter("fast", [SourceRecord(display_name="Cat", value=2, source_id="fast")])

        records = asyncio.run(collect_source_records([slow, fast]))
        assert [r.source_id for r in records] == ["slow", "fast"]

    def test_failing_adapter_does_not_block_others(self, capsys):
        """Test one broken source leaves the others' records intact."""
        good = StaticAdapter("good", [SourceRecord(display_name="Cat", value=1, source_id="good")])

        records = asyncio.run(collect_source_records([BrokenAdapter(), good]))

        assert [r.source_id for r in records] == ["good"]
        assert "broken source failed" in capsys.readouterr().out

    def test_no_adapters(self):
        """Test an empty registry yields no records."""
        assert asyncio.run(collect_source_records([])) == []


class TestDefaultAdapters:
    """Test the source registry."""

    def test_priority_order(self):
        """Test the registered sources and their order."""
        assert [a.source_id for a in default_adapters()] == [
            "zack",
            "moonvalues",
            "cosmovalues",
            "valuesking",
        ]

    @pytest.mark.parametrize("agent", ["Mozilla/5.0", "pet-values-test"])
    def test_fetch_config_passed_through(self, agent):
        """Test remote adapters use the given fetch settings."""
        adapters = default_adapters(FetchConfig(user_agent=agent))
        assert adapters[0].fetch_config.headers == {"User-Agent": agent}
