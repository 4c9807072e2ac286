"""Projection of mapping state into rows for the mapping table."""

from typing import Iterable, Mapping, Sequence

from .models import NA_LABEL, NA_SENTINEL, MappingDisplayRow, MappingOption, TargetField


def build_options(csv_headers: Iterable[str]) -> list[MappingOption]:
    """N/A first, then every non-blank header in header order."""
    options = [MappingOption(label=NA_LABEL, value=NA_SENTINEL)]
    for header in csv_headers:
        if header and header.strip():
            options.append(MappingOption(label=header, value=header))
    return options


def build_display_rows(
    target_fields: Sequence[TargetField],
    mapping: Mapping[str, str],
    csv_headers: Sequence[str],
) -> list[MappingDisplayRow]:
    """
    Rebuild the mapping table from the current state.

    A field shows its mapped header only while that header exists in the
    current file; otherwise it shows as unmapped. Nothing here is cached.
    """
    header_set = set(csv_headers)
    options = build_options(csv_headers)

    rows = []
    for field in target_fields:
        current = mapping.get(field.api_name, "")
        rows.append(
            MappingDisplayRow(
                api_name=field.api_name,
                label=field.label,
                mapped_to=current if current in header_set else "",
                options=list(options),
            )
        )
    return rows
