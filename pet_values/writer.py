"""
Dataset persistence.

The dataset is written as indented JSON, one record per pet with keys in
the order name, rarity, value, sources, image. Writes go through a
temporary file in the target directory so a failed run never leaves a
partial dataset behind.
"""

import json
import os
import tempfile
from datetime import date
from pathlib import Path
from typing import List, Optional, Union

from pet_values.config import AGGREGATION_METHOD
from pet_values.schemas import Dataset, MergedRecord


def build_dataset(
    pets: List[MergedRecord],
    method: str = AGGREGATION_METHOD,
    updated: Optional[date] = None,
) -> Dataset:
    """Wrap merged records with the generation date and method."""
    updated = updated or date.today()
    return Dataset(updated=updated.isoformat(), method=method, pets=pets)


def write_dataset(dataset: Dataset, output_file: Union[str, Path]) -> Path:
    """
    Write the dataset to output_file, replacing it atomically.

    Returns:
        The path written.

    Raises:
        OSError: If the directory cannot be created or the file written.
    """
    path = Path(output_file)
    path.parent.mkdir(parents=True, exist_ok=True)

    payload = json.dumps(dataset.model_dump(), indent=2, ensure_ascii=False)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    return path


def load_dataset(path: Union[str, Path]) -> Dataset:
    """Read a previously written dataset."""
    with open(path, "r", encoding="utf-8") as f:
        return Dataset.model_validate(json.load(f))
