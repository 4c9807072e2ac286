"""Single source of truth for the column-per-field assignment."""

import logging
from typing import Iterable, Mapping, Optional, Sequence

from .display import build_display_rows
from .models import (
    NA_SENTINEL,
    FieldMapping,
    HeaderNotFoundError,
    MappingDisplayRow,
    MappingEdit,
    TargetField,
)
from .validator import clean_mapping, is_usable_value

logger = logging.getLogger(__name__)


class MappingStore:
    """
    Holds the current field mapping together with the headers it is valid for.

    Every operation builds a new mapping and swaps it in whole, so readers
    never see a half-applied change. The mapping is always clean with
    respect to ``headers``.
    """

    def __init__(self, headers: Optional[Sequence[str]] = None):
        self._headers: tuple[str, ...] = tuple(headers or ())
        self._mapping: FieldMapping = {}

    @property
    def headers(self) -> tuple[str, ...]:
        return self._headers

    @property
    def mapping(self) -> FieldMapping:
        """A copy of the current mapping."""
        return dict(self._mapping)

    def __len__(self) -> int:
        return len(self._mapping)

    def __contains__(self, api_name: str) -> bool:
        return api_name in self._mapping

    def get(self, api_name: str) -> Optional[str]:
        return self._mapping.get(api_name)

    def set(self, api_name: str, header: str) -> FieldMapping:
        """
        Map a field to a header of the current file.

        Raises:
            HeaderNotFoundError: If the header is not in the current headers
        """
        if not is_usable_value(header) or header not in self._headers:
            logger.warning(f"CSV column {header!r} not found in headers, skipping mapping")
            raise HeaderNotFoundError(header)

        updated = dict(self._mapping)
        updated[api_name] = header
        self._mapping = updated
        logger.info(f"Set mapping for {api_name} to {header}")
        return self.mapping

    def clear(self, api_name: str) -> bool:
        """Remove a field's mapping. Returns True if an entry was removed."""
        if api_name not in self._mapping:
            return False

        updated = dict(self._mapping)
        del updated[api_name]
        self._mapping = updated
        logger.info(f"Cleared mapping for {api_name}")
        return True

    def reset_for_new_headers(self, new_headers: Iterable[str]) -> FieldMapping:
        """Switch to a new header set, dropping entries that no longer resolve."""
        self._headers = tuple(new_headers)
        pruned = clean_mapping(self._mapping, self._headers)

        for api_name in self._mapping.keys() - pruned.keys():
            logger.info(
                f"Clearing invalid mapping for {api_name}: "
                f"{self._mapping[api_name]} not found in CSV headers"
            )

        self._mapping = pruned
        return self.mapping

    def replace(self, mapping: Mapping[str, str]) -> FieldMapping:
        """Install a whole new mapping, cleaned against the current headers."""
        self._mapping = clean_mapping(mapping, self._headers)
        return self.mapping

    def apply_edits(self, edits: Iterable[MappingEdit]) -> list[HeaderNotFoundError]:
        """
        Apply draft values from the mapping table.

        N/A, None or an empty value clears the field. Anything else must be a
        current header. Rejected edits are returned; accepted ones are kept.
        """
        rejected = []
        for edit in edits:
            if edit.mapped_to in (None, "", NA_SENTINEL):
                self.clear(edit.api_name)
                continue
            try:
                self.set(edit.api_name, edit.mapped_to)
            except HeaderNotFoundError as e:
                rejected.append(e)
        return rejected

    def display_rows(self, target_fields: Sequence[TargetField]) -> list[MappingDisplayRow]:
        """Project the current state into mapping table rows."""
        return build_display_rows(target_fields, self._mapping, self._headers)
