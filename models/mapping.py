"""
Variant mapping schemas.

A mapping entry declares that one Webflow SKU item and one Marianatek
product variant track the same sellable unit.
"""

from pydantic import ConfigDict, Field, field_validator
from typing import Optional, Any

from models.base import BaseSchema


def reconciliation_key(webflow_id: Optional[str], marianatek_id: Optional[str]) -> str:
    """Key indexing state and throttle records for one pair."""
    return f"{webflow_id or ''}|{marianatek_id or ''}"


class MappingEntry(BaseSchema):
    """
    One synchronized pair.

    Required: webflow_variant_id, marianatek_variant_id
    Optional: location_id (Marianatek location for adjustments)
    """

    model_config = ConfigDict(
        str_strip_whitespace=True,
        frozen=True
    )

    webflow_variant_id: str = Field(
        ...,
        min_length=1,
        description="Webflow SKU item id"
    )
    marianatek_variant_id: str = Field(
        ...,
        min_length=1,
        description="Marianatek product variant id"
    )
    location_id: Optional[str] = Field(
        None,
        description="Marianatek location pinned for this pair"
    )

    @field_validator("webflow_variant_id", "marianatek_variant_id", "location_id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        """Mapping files often store numeric ids."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("location_id")
    @classmethod
    def blank_location_is_unset(cls, v: Optional[str]) -> Optional[str]:
        """An empty location falls back to the default location."""
        return v or None

    @property
    def key(self) -> str:
        """Reconciliation key for this pair."""
        return reconciliation_key(self.webflow_variant_id, self.marianatek_variant_id)


class MappingIndex:
    """
    Mapping entries loaded for one cycle, indexed by either side's id.

    The first entry for an id wins, as with a linear search.
    """

    def __init__(self, entries: list[MappingEntry]):
        self.entries = list(entries)
        self.duplicates: list[MappingEntry] = []
        self._by_marianatek: dict[str, MappingEntry] = {}
        self._by_webflow: dict[str, MappingEntry] = {}
        for entry in self.entries:
            duplicate = False
            if entry.marianatek_variant_id in self._by_marianatek:
                duplicate = True
            else:
                self._by_marianatek[entry.marianatek_variant_id] = entry
            if entry.webflow_variant_id in self._by_webflow:
                duplicate = True
            else:
                self._by_webflow[entry.webflow_variant_id] = entry
            if duplicate:
                self.duplicates.append(entry)

    def __len__(self) -> int:
        return len(self.entries)

    def for_marianatek(self, variant_id: Any) -> Optional[MappingEntry]:
        if variant_id is None:
            return None
        return self._by_marianatek.get(str(variant_id))

    def for_webflow(self, item_id: Any) -> Optional[MappingEntry]:
        if item_id is None:
            return None
        return self._by_webflow.get(str(item_id))
