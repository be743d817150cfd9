"""
Local catalog of known pets.

The catalog is the inventory of pet images on disk: one entry per image
file, named after the file. It decides which pets exist in the dataset.
"""

from pathlib import Path, PurePosixPath
from typing import Iterable, List, Optional, Union

from pet_values.normalizer import normalize_name
from pet_values.schemas import CatalogEntry


def strip_extension(filename: str, extensions: Iterable[str]) -> Optional[str]:
    """Return filename without a matching extension, or None if none matches."""
    lowered = filename.lower()
    for ext in extensions:
        if lowered.endswith(ext.lower()):
            return filename[: len(filename) - len(ext)]
    return None


def load_catalog(
    pets_dir: Union[str, Path],
    extensions: Iterable[str] = (".png",),
    image_base: Optional[str] = None,
) -> List[CatalogEntry]:
    """
    Enumerate the image directory into catalog entries.

    Args:
        pets_dir: Directory holding one image per pet.
        extensions: Qualifying image extensions, matched case-insensitively.
        image_base: Prefix for image references. Defaults to pets_dir.

    Returns:
        Catalog entries ordered by file name.

    Raises:
        FileNotFoundError: If pets_dir does not exist.
        NotADirectoryError: If pets_dir is not a directory.
    """
    directory = Path(pets_dir)
    if not directory.exists():
        raise FileNotFoundError(f"Pets directory not found: {directory}")
    if not directory.is_dir():
        raise NotADirectoryError(f"Pets path is not a directory: {directory}")

    extensions = tuple(extensions)
    base = PurePosixPath(image_base if image_base is not None else directory.as_posix())

    entries = []
    for path in sorted(directory.iterdir(), key=lambda p: p.name):
        if not path.is_file():
            continue
        display_name = strip_extension(path.name, extensions)
        if display_name is None:
            continue
        entries.append(
            CatalogEntry(
                display_name=display_name,
                normalized_key=normalize_name(display_name),
                image_ref=str(base / path.name),
            )
        )

    return entries
