"""
Configuration for the pet value import.

This module holds the defaults for the local catalog scan, the remote
source fetches and the output dataset. Configuration is passed explicitly
into the pipeline; nothing here reads the environment.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple


# Local inventory of pet images (one catalog entry per image)
DEFAULT_PETS_DIR = "pets"

# Where the merged dataset is written
DEFAULT_OUTPUT_FILE = "data/pets.json"

# Aggregation method recorded in the dataset
AGGREGATION_METHOD = "median"

# Remote sources
ZACK_VALUES_URL = "https://notrealzack.github.io/tap-simulator-values/"

# Sources registered before their endpoints are known, in priority order
PENDING_SOURCE_IDS = ["moonvalues", "cosmovalues", "valuesking"]


@dataclass
class ImportConfig:
    """Configuration for one import run."""

    pets_dir: Path = field(default_factory=lambda: Path(DEFAULT_PETS_DIR))
    output_file: Path = field(default_factory=lambda: Path(DEFAULT_OUTPUT_FILE))

    # Prefix for image references in the dataset (defaults to pets_dir)
    image_base: Optional[str] = None

    # File extensions that qualify as catalog entries (matched case-insensitively)
    image_extensions: Tuple[str, ...] = (".png",)

    method: str = AGGREGATION_METHOD

    def __post_init__(self) -> None:
        self.pets_dir = Path(self.pets_dir)
        self.output_file = Path(self.output_file)
        if self.image_base is None:
            self.image_base = self.pets_dir.as_posix()


@dataclass
class FetchConfig:
    """Configuration for remote source fetches."""

    user_agent: str = "Mozilla/5.0"
    request_timeout: float = 30.0  # seconds
    follow_redirects: bool = True

    @property
    def headers(self) -> dict:
        return {"User-Agent": self.user_agent}


def get_import_config(
    pets_dir: Optional[str] = None,
    output_file: Optional[str] = None,
) -> ImportConfig:
    """Get import configuration.

    Args:
        pets_dir: Optional pets image directory. Defaults to ``pets``.
        output_file: Optional dataset path. Defaults to ``data/pets.json``.

    Returns:
        ImportConfig instance.
    """
    return ImportConfig(
        pets_dir=Path(pets_dir or DEFAULT_PETS_DIR),
        output_file=Path(output_file or DEFAULT_OUTPUT_FILE),
    )


def get_fetch_config() -> FetchConfig:
    """Get fetch configuration."""
    return FetchConfig()
