"""Validation and cleaning of field mappings against the current CSV headers."""

import logging
from typing import Iterable, Mapping, Optional

from .models import NA_SENTINEL, FieldMapping, NothingMappedError

logger = logging.getLogger(__name__)


def is_usable_value(value: Optional[str]) -> bool:
    """Return True unless the value is missing, blank, or the N/A sentinel."""
    return bool(value) and value != NA_SENTINEL and value.strip() != ""


def clean_mapping(mapping: Mapping[str, Optional[str]], csv_headers: Iterable[str]) -> FieldMapping:
    """
    Filter a mapping down to entries that reference a current CSV header.

    Drops entries whose value is N/A, empty or whitespace-only, and entries
    whose value is not one of ``csv_headers``. The result may be empty.
    """
    header_set = set(csv_headers)
    return {
        api_name: header
        for api_name, header in mapping.items()
        if is_usable_value(header) and header in header_set
    }


def is_clean(mapping: Mapping[str, Optional[str]], csv_headers: Iterable[str]) -> bool:
    """Check that every entry of a mapping survives cleaning."""
    return clean_mapping(mapping, csv_headers) == dict(mapping)


class MappingValidator:
    """Cleans mappings before they are handed to the import executor."""

    def clean(self, mapping: Mapping[str, Optional[str]], csv_headers: Iterable[str]) -> FieldMapping:
        """
        Clean a mapping, logging every entry that gets dropped.

        Args:
            mapping: Field api name -> chosen CSV header
            csv_headers: Headers of the currently uploaded file

        Returns:
            A new mapping containing only valid entries
        """
        headers = list(csv_headers)
        cleaned = clean_mapping(mapping, headers)

        for api_name, header in mapping.items():
            if api_name in cleaned:
                continue
            if is_usable_value(header):
                logger.info(
                    f"Skipping invalid mapping: {api_name} -> {header} (column not found in CSV)"
                )
            else:
                logger.debug(f"Skipping unmapped field: {api_name}")

        logger.info(f"Cleaned mapping: {len(cleaned)} of {len(mapping)} entries kept")
        return cleaned

    def require_entries(
        self, mapping: Mapping[str, Optional[str]], csv_headers: Iterable[str]
    ) -> FieldMapping:
        """
        Clean a mapping and refuse an empty result.

        Raises:
            NothingMappedError: If no valid entries remain after cleaning
        """
        cleaned = self.clean(mapping, csv_headers)
        if not cleaned:
            raise NothingMappedError(
                "No valid field mappings found. Please ensure your CSV contains the expected columns."
            )
        return cleaned
