"""
Source adapters for pet value data.

Each adapter produces a list of SourceRecord objects from one provider.
Adapters never raise: a failing source reports the reason on the console
and contributes no records, so the rest of the import carries on.

Registered sources, in priority order (first rarity found wins):
1. zack        - community values page, HTML
2. moonvalues  - endpoint not yet known
3. cosmovalues - endpoint not yet known
4. valuesking  - endpoint not yet known
"""

import asyncio
import html
import json
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import httpx
from rich.console import Console
from rich.markup import escape

from pet_values.aggregator import to_number
from pet_values.config import PENDING_SOURCE_IDS, ZACK_VALUES_URL, FetchConfig, get_fetch_config
from pet_values.schemas import SourceRecord

console = Console()

# <h3>Pet Name</h3> ... Value: </span> 12,345
NAME_PATTERN = re.compile(r"<h3[^>]*>([^<]+)</h3>")
VALUE_PATTERN = re.compile(r"Value:\s*</[^>]+>\s*([0-9,]+)")

SCRIPT_PATTERN = re.compile(r"<script\b([^>]*)>(.*?)</script>", re.DOTALL | re.IGNORECASE)
JSON_SCRIPT_MARKERS = ("application/json", "application/ld+json", "__next_data__")

NAME_FIELDS = ("name", "Name", "pet", "petName", "title")
VALUE_FIELDS = ("value", "Value", "price", "worth")
RARITY_FIELDS = ("rarity", "Rarity", "tier")


class SourceFetchError(Exception):
    """A remote source answered with a non-success status."""


def _first_field(item: Dict[str, Any], fields: Sequence[str]) -> Any:
    for name in fields:
        if item.get(name) not in (None, ""):
            return item[name]
    return None


def records_from_items(items: Iterable[Any], source_id: str) -> List[SourceRecord]:
    """Build records from dicts carrying a name and a value field."""
    records = []
    for item in items:
        if not isinstance(item, dict):
            continue
        name = _first_field(item, NAME_FIELDS)
        raw_value = _first_field(item, VALUE_FIELDS)
        if not isinstance(name, str) or raw_value is None:
            continue
        rarity = _first_field(item, RARITY_FIELDS)
        records.append(
            SourceRecord(
                display_name=name.strip(),
                value=to_number(raw_value),
                rarity=str(rarity) if rarity else None,
                source_id=source_id,
            )
        )
    return records


def _collect_embedded(data: Any, source_id: str) -> List[SourceRecord]:
    if isinstance(data, list):
        records = records_from_items(data, source_id)
        # Lists nested inside pet entries (stats, variants) are not pets
        if records:
            return records
        children: Iterable[Any] = data
    elif isinstance(data, dict):
        children = data.values()
    else:
        return []

    records = []
    for child in children:
        records.extend(_collect_embedded(child, source_id))
    return records


def extract_embedded_records(document: str, source_id: str) -> List[SourceRecord]:
    """
    Read pet entries from JSON embedded in <script> tags.

    The outermost lists of objects with a name and a value field become
    records; lists nested inside those objects are not searched.
    Scripts that are not valid JSON are skipped.
    """
    records: List[SourceRecord] = []
    for attrs, body in SCRIPT_PATTERN.findall(document):
        if not any(marker in attrs.lower() for marker in JSON_SCRIPT_MARKERS):
            continue
        try:
            data = json.loads(body)
        except ValueError:
            continue
        records.extend(_collect_embedded(data, source_id))
    return records


def extract_pattern_records(document: str, source_id: str) -> List[SourceRecord]:
    """
    Pair <h3> names with "Value:" numerals by position.

    Only as many records as the shorter of the two lists are kept.
    """
    names = [html.unescape(m).strip() for m in NAME_PATTERN.findall(document)]
    values = [to_number(m) for m in VALUE_PATTERN.findall(document)]

    return [
        SourceRecord(display_name=name, value=value, rarity=None, source_id=source_id)
        for name, value in zip(names, values)
    ]


class SourceAdapter(ABC):
    """A provider of pet value records."""

    source_id: str = "unknown"

    async def fetch_source(self) -> List[SourceRecord]:
        """Fetch this source's records, or [] if anything goes wrong."""
        try:
            records = await self.fetch_records()
        except Exception as e:
            console.print(f"[yellow]{self.source_id} source failed: {escape(str(e))}[/yellow]")
            return []

        console.print(f"[green]{self.source_id} parsed:[/green] {len(records)}")
        return records

    @abstractmethod
    async def fetch_records(self) -> List[SourceRecord]:
        """Produce the records. May raise; fetch_source handles it."""


class RemoteSourceAdapter(SourceAdapter):
    """Adapter backed by one remote text document."""

    def __init__(
        self,
        url: str,
        fetch_config: Optional[FetchConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url
        self.fetch_config = fetch_config or get_fetch_config()
        self.client = client

    async def fetch_text(self) -> str:
        if self.client is not None:
            return await self._get(self.client)

        async with httpx.AsyncClient(
            timeout=self.fetch_config.request_timeout,
            follow_redirects=self.fetch_config.follow_redirects,
        ) as client:
            return await self._get(client)

    async def _get(self, client: httpx.AsyncClient) -> str:
        response = await client.get(self.url, headers=self.fetch_config.headers)
        if not response.is_success:
            raise SourceFetchError(f"Fetch failed: {response.status_code} {self.url}")
        return response.text

    async def fetch_records(self) -> List[SourceRecord]:
        document = await self.fetch_text()
        return self.parse(document)

    @abstractmethod
    def parse(self, document: str) -> List[SourceRecord]:
        """Extract records from the fetched document."""


class ZackValuesAdapter(RemoteSourceAdapter):
    """
    Community values page.

    Uses embedded JSON when the page carries it, otherwise pairs <h3>
    names with "Value:" numerals from the markup.
    """

    source_id = "zack"

    def __init__(
        self,
        url: str = ZACK_VALUES_URL,
        fetch_config: Optional[FetchConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(url, fetch_config, client)

    def parse(self, document: str) -> List[SourceRecord]:
        records = extract_embedded_records(document, self.source_id)
        if records:
            return records
        return extract_pattern_records(document, self.source_id)


class PendingSourceAdapter(SourceAdapter):
    """A registered source whose endpoint has not been discovered yet."""

    def __init__(self, source_id: str):
        self.source_id = source_id

    async def fetch_records(self) -> List[SourceRecord]:
        console.print(f"[dim]{self.source_id}: no endpoint configured[/dim]")
        return []


class JsonFileSourceAdapter(SourceAdapter):
    """Records from a local JSON file: a list of {name, value, rarity} objects."""

    def __init__(self, path: Union[str, Path], source_id: str):
        self.path = Path(path)
        self.source_id = source_id

    async def fetch_records(self) -> List[SourceRecord]:
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, list):
            raise ValueError(f"Expected a list of entries in {self.path}")
        return records_from_items(data, self.source_id)


def default_adapters(
    fetch_config: Optional[FetchConfig] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> List[SourceAdapter]:
    """The registered sources, in priority order."""
    adapters: List[SourceAdapter] = [ZackValuesAdapter(fetch_config=fetch_config, client=client)]
    adapters.extend(PendingSourceAdapter(source_id) for source_id in PENDING_SOURCE_IDS)
    return adapters


async def collect_source_records(adapters: Sequence[SourceAdapter]) -> List[SourceRecord]:
    """
    Run all adapters concurrently and concatenate their records.

    Waits for every adapter to settle. Records keep adapter order, so the
    first registered adapter's records come first. An adapter that raises
    anyway contributes nothing.
    """
    results = await asyncio.gather(
        *(adapter.fetch_source() for adapter in adapters),
        return_exceptions=True,
    )

    records: List[SourceRecord] = []
    for adapter, result in zip(adapters, results):
        if isinstance(result, BaseException):
            console.print(f"[yellow]{adapter.source_id} source failed: {escape(str(result))}[/yellow]")
            continue
        records.extend(result)
    return records
