"""
Pydantic models for the pet value import.

CatalogEntry and SourceRecord are the two inputs to reconciliation;
MergedRecord and Dataset are what gets written to disk. Field order on
MergedRecord is the key order of each record in the output file.
"""

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

Number = Union[int, float]


class CatalogEntry(BaseModel):
    """A known pet, discovered from one image in the local inventory."""

    model_config = ConfigDict(frozen=True)

    display_name: str = Field(..., description="File name with the image extension stripped")
    normalized_key: str = Field(..., description="Matching key derived from display_name")
    image_ref: str = Field(..., description="Image path as referenced from the dataset")


class SourceRecord(BaseModel):
    """A raw value observation for one pet from one source."""

    model_config = ConfigDict(frozen=True)

    display_name: str = Field(..., description="Pet name as the source spells it")
    value: Number = Field(0, description="Observed value, 0 when unknown or unparsed")
    rarity: Optional[str] = Field(None, description="Free-text rarity, if the source has one")
    source_id: str = Field(..., description="Identifier of the producing source")


class MergedRecord(BaseModel):
    """Final per-pet record combining catalog identity with source data."""

    name: str
    rarity: str = "Unknown"
    value: Number = 0
    sources: Dict[str, Number] = Field(
        default_factory=dict, description="Raw value per contributing source"
    )
    image: str


class Dataset(BaseModel):
    """The persisted dataset."""

    updated: str = Field(..., description="Generation date (YYYY-MM-DD)")
    method: str = Field("median", description="Aggregation method identifier")
    pets: List[MergedRecord] = Field(default_factory=list)
