"""
Variant mapping source.

The mapping file is re-read at the start of every cycle so edits take
effect without a restart.
"""

import json
from pathlib import Path
from typing import Union
import structlog
from pydantic import ValidationError

from exceptions import MappingSourceError
from models.mapping import MappingEntry, MappingIndex

logger = structlog.get_logger(__name__)


class MappingService:
    """
    Loads variant_mapping.json.

    Expected format:
        [
            {"webflow_variant_id": "...", "marianatek_variant_id": "...", "location_id": "..."},
            ...
        ]
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> MappingIndex:
        """
        Read and validate the mapping file.

        Returns:
            MappingIndex for this cycle

        Raises:
            MappingSourceError: If the file is missing, not JSON, or has invalid entries
        """
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error("mapping_load_failed", path=str(self.path), error=str(e))
            raise MappingSourceError(str(self.path), str(e)) from e

        if not isinstance(raw, list):
            raise MappingSourceError(str(self.path), "top-level JSON value must be a list")

        entries = []
        for position, item in enumerate(raw):
            try:
                entries.append(MappingEntry.model_validate(item))
            except ValidationError as e:
                logger.error("mapping_entry_invalid", path=str(self.path), position=position)
                raise MappingSourceError(
                    str(self.path),
                    f"entry {position} is invalid: {e.error_count()} error(s)"
                ) from e

        index = MappingIndex(entries)
        for duplicate in index.duplicates:
            logger.warning(
                "mapping_duplicate_entry",
                webflow_variant_id=duplicate.webflow_variant_id,
                marianatek_variant_id=duplicate.marianatek_variant_id
            )

        logger.info("mapping_loaded", path=str(self.path), entries=len(index))
        return index
