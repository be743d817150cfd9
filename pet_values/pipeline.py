#!/usr/bin/env python3
"""
Pet value import pipeline.

Fetches values from every registered source, reconciles them against the
local pet image catalog and writes the merged dataset.

Flow:
1. Scan the pets directory into catalog entries (fatal if missing)
2. Run all source adapters concurrently; failed sources contribute nothing
3. Group source records by normalized name and merge into the catalog
4. Write {updated, method, pets} to the output file

Usage:
    python -m pet_values
    python -m pet_values --pets-dir pets --output data/pets.json
"""

import argparse
import asyncio
import sys
from collections import Counter
from typing import List, Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pet_values.catalog import load_catalog
from pet_values.config import DEFAULT_OUTPUT_FILE, DEFAULT_PETS_DIR, ImportConfig, get_import_config
from pet_values.reconciler import reconcile
from pet_values.schemas import Dataset, MergedRecord, SourceRecord
from pet_values.sources import SourceAdapter, collect_source_records, default_adapters
from pet_values.writer import build_dataset, write_dataset

console = Console()


def build_summary_table(records: List[SourceRecord], merged: List[MergedRecord]) -> Table:
    """Per-source record counts and how many pets each one reached."""
    table = Table(title="Import Summary")
    table.add_column("Source", style="cyan")
    table.add_column("Entries", justify="right")
    table.add_column("Pets matched", justify="right")

    entry_counts = Counter(record.source_id for record in records)
    matched_counts = Counter(source_id for pet in merged for source_id in pet.sources)

    for source_id, count in entry_counts.items():
        table.add_row(source_id, str(count), str(matched_counts.get(source_id, 0)))

    valued = sum(1 for pet in merged if pet.value > 0)
    table.add_row("[bold]pets with value[/bold]", "", f"{valued}/{len(merged)}")
    return table


async def run_import(
    config: Optional[ImportConfig] = None,
    adapters: Optional[Sequence[SourceAdapter]] = None,
) -> Dataset:
    """
    Run one import and write the dataset.

    Args:
        config: Paths and catalog settings. Defaults to get_import_config().
        adapters: Sources in priority order. Defaults to default_adapters().

    Returns:
        The dataset that was written.

    Raises:
        FileNotFoundError: If the pets directory is missing.
        OSError: If the dataset cannot be written.
    """
    if config is None:
        config = get_import_config()
    if adapters is None:
        adapters = default_adapters()

    console.print("[bold cyan]Importing values (median merge)...[/bold cyan]")

    catalog = load_catalog(config.pets_dir, config.image_extensions, config.image_base)

    records = await collect_source_records(adapters)
    console.print(f"Total source entries: {len(records)}")

    merged = reconcile(catalog, records)
    dataset = build_dataset(merged, method=config.method)
    path = write_dataset(dataset, config.output_file)

    console.print(f"[green]Saved:[/green] {path}")
    console.print(f"[green]Pets written:[/green] {len(merged)}")
    console.print(build_summary_table(records, merged))

    return dataset


def import_values(
    config: Optional[ImportConfig] = None,
    adapters: Optional[Sequence[SourceAdapter]] = None,
) -> Dataset:
    """Synchronous wrapper around run_import."""
    return asyncio.run(run_import(config, adapters))


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Import pet values from all sources and merge by median",
    )
    parser.add_argument(
        "--pets-dir",
        default=DEFAULT_PETS_DIR,
        help=f"Directory of pet images (default: {DEFAULT_PETS_DIR})",
    )
    parser.add_argument(
        "--output",
        default=DEFAULT_OUTPUT_FILE,
        help=f"Dataset output file (default: {DEFAULT_OUTPUT_FILE})",
    )

    args = parser.parse_args()
    config = get_import_config(pets_dir=args.pets_dir, output_file=args.output)

    try:
        import_values(config)
    except OSError as e:
        # Missing pets directory or failed dataset write
        console.print(f"[red]Import failed: {escape(str(e))}[/red]")
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
