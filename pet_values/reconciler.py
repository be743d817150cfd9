"""
Catalog reconciliation.

Joins the local catalog against the union of source records by normalized
name. The catalog decides which pets exist; sources only contribute values
and rarity. Source records with no catalog match are dropped.

Per catalog entry:
1. Collect the source records sharing its key (adapter order preserved)
2. Value = median of the non-zero source values
3. Sources = raw value per source id (later records win)
4. Rarity = first non-empty rarity in group order, else "Unknown"
"""

from typing import Dict, Iterable, List

from pet_values.aggregator import median, to_number
from pet_values.normalizer import normalize_name
from pet_values.schemas import CatalogEntry, MergedRecord, SourceRecord

UNKNOWN_RARITY = "Unknown"


def group_by_key(records: Iterable[SourceRecord]) -> Dict[str, List[SourceRecord]]:
    """Group source records by normalized name, skipping unmatchable names."""
    groups: Dict[str, List[SourceRecord]] = {}
    for record in records:
        key = normalize_name(record.display_name)
        if not key:
            continue
        groups.setdefault(key, []).append(record)
    return groups


def pick_rarity(records: Iterable[SourceRecord]) -> str:
    """First truthy rarity in order, or "Unknown"."""
    for record in records:
        if record.rarity:
            return record.rarity
    return UNKNOWN_RARITY


def merge_entry(entry: CatalogEntry, matches: List[SourceRecord]) -> MergedRecord:
    """Build the merged record for one catalog entry from its matched records."""
    values = [to_number(record.value) for record in matches]
    observed = [v for v in values if v > 0]

    sources = {}
    for record, value in zip(matches, values):
        sources[record.source_id] = value

    return MergedRecord(
        name=entry.display_name,
        rarity=pick_rarity(matches),
        value=median(observed) if observed else 0,
        sources=sources,
        image=entry.image_ref,
    )


def reconcile(
    catalog: List[CatalogEntry],
    source_records: List[SourceRecord],
) -> List[MergedRecord]:
    """
    Merge source records into the catalog.

    Returns exactly one MergedRecord per catalog entry, in catalog order.
    Entries without matches get value 0, no sources and rarity "Unknown".
    """
    groups = group_by_key(source_records)
    return [merge_entry(entry, groups.get(entry.normalized_key, [])) for entry in catalog]
