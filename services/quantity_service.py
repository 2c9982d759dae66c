"""
Quantity extraction from Marianatek variant attributes.

Marianatek keeps per-location quantities inside
region_overrides[].location_overrides[].present_quantity, with a flat
inventory_quantity on the variant as fallback.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Union

from exceptions import MalformedResponseError


@dataclass(frozen=True)
class FoundOverride:
    """Quantity taken from a location override."""
    quantity: int


@dataclass(frozen=True)
class FallbackUsed:
    """No override carried a quantity; the flat field was used."""
    quantity: int


@dataclass(frozen=True)
class Defaulted:
    """Neither overrides nor the flat field had a quantity."""
    quantity: int = 0


QuantityResult = Union[FoundOverride, FallbackUsed, Defaulted]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_count(value: Any, field: str) -> int:
    """Whole-number quantity; 3.0 is accepted, 2.7 is not."""
    if isinstance(value, float) and not value.is_integer():
        raise MalformedResponseError("marianatek", f"{field} {value} is not a whole number")
    return int(value)


def extract_quantity(attributes: Mapping[str, Any]) -> QuantityResult:
    """
    Derive the authoritative Marianatek quantity for a variant.

    Scans regions then locations depth-first; the first location with a
    numeric present_quantity wins. Locations are neither filtered by the
    configured default location nor summed.

    Args:
        attributes: Variant `attributes` object

    Returns:
        FoundOverride, FallbackUsed or Defaulted

    Raises:
        MalformedResponseError: If the chosen quantity is fractional
    """
    regions = attributes.get("region_overrides")
    if isinstance(regions, list):
        for region in regions:
            if not isinstance(region, Mapping):
                continue
            locations = region.get("location_overrides")
            if not isinstance(locations, list):
                continue
            for location in locations:
                if isinstance(location, Mapping) and _is_number(location.get("present_quantity")):
                    return FoundOverride(_as_count(location["present_quantity"], "present_quantity"))

    fallback = attributes.get("inventory_quantity")
    if _is_number(fallback):
        return FallbackUsed(_as_count(fallback, "inventory_quantity"))

    return Defaulted()
