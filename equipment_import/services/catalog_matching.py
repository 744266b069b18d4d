"""Refining validation results against an existing equipment catalog.

The catalog store itself lives outside this package. Anything with a
find_match(manufacturer, model, sku) method can be plugged in.
"""
from typing import Dict, List, Optional, Protocol, Sequence, runtime_checkable

import structlog

from equipment_import.models.mapping import ColumnMapping, EquipmentField
from equipment_import.models.parsed_file import ParsedRow
from equipment_import.models.validation import CatalogMatch, ValidationResult, ValidationStatus

logger = structlog.get_logger(__name__)


@runtime_checkable
class CatalogLookup(Protocol):
    """Resolves identity fields to an existing catalog record."""

    def find_match(self, manufacturer: str, model: str, sku: str) -> Optional[CatalogMatch]:
        """Return the matching record, or None for new equipment."""
        ...


def extract_identity(
    row: ParsedRow,
    mappings: Sequence[ColumnMapping],
) -> Dict[EquipmentField, str]:
    """Trimmed manufacturer/model/sku values for a row, using first mappings."""
    identity: Dict[EquipmentField, str] = {}
    for field in (EquipmentField.MANUFACTURER, EquipmentField.MODEL, EquipmentField.SKU):
        mapping = next((m for m in mappings if m.target_field == field), None)
        identity[field] = row.cell(mapping.source_column).strip() if mapping else ""
    return identity


def apply_catalog_matches(
    results: Sequence[ValidationResult],
    rows: Sequence[ParsedRow],
    mappings: Sequence[ColumnMapping],
    lookup: CatalogLookup,
) -> List[ValidationResult]:
    """Overwrite match_type and existing_equipment_id for valid rows.

    Results are paired with rows by row_number. Rows that are not valid,
    or that the lookup does not recognize, are returned unchanged.
    Exceptions raised by the lookup propagate.
    """
    rows_by_number = {row.row_number: row for row in rows}
    refined: List[ValidationResult] = []
    updates = 0

    for result in results:
        row = rows_by_number.get(result.row_number)
        if result.status != ValidationStatus.VALID or row is None:
            refined.append(result)
            continue

        identity = extract_identity(row, mappings)
        match = lookup.find_match(
            identity[EquipmentField.MANUFACTURER],
            identity[EquipmentField.MODEL],
            identity[EquipmentField.SKU],
        )
        if match is None:
            refined.append(result)
            continue

        updates += 1
        refined.append(
            result.model_copy(
                update={
                    "match_type": match.match_type,
                    "existing_equipment_id": match.existing_equipment_id,
                }
            )
        )

    logger.info("catalog_matches_applied", results=len(refined), matched=updates)
    return refined
