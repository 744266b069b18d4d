"""Helpers for turning header suggestions into an editable column mapping."""
from typing import List, Optional, Sequence

import structlog

from equipment_import.models.mapping import ColumnMapping, EquipmentField, HeaderSuggestion
from equipment_import.services.row_validator import RowValidator

logger = structlog.get_logger(__name__)


def mappings_from_suggestions(
    suggestions: Sequence[HeaderSuggestion],
    min_confidence: float = 0.0,
) -> List[ColumnMapping]:
    """Build one mapping per suggestion.

    Args:
        suggestions: Output of HeaderMapper.suggest
        min_confidence: Suggestions scoring below this are left unmapped

    Returns:
        Mappings in column order
    """
    mappings = []
    for suggestion in suggestions:
        target = suggestion.suggested_field
        if target is not None and suggestion.confidence < min_confidence:
            target = None
        mappings.append(
            ColumnMapping(
                source_column=suggestion.column_index,
                source_header=suggestion.header,
                target_field=target,
            )
        )
    return mappings


def update_mapping(
    mappings: Sequence[ColumnMapping],
    column_index: int,
    target_field: Optional[EquipmentField],
) -> List[ColumnMapping]:
    """Return a copy of mappings with one column retargeted."""
    return [
        mapping.model_copy(update={"target_field": target_field})
        if mapping.source_column == column_index
        else mapping
        for mapping in mappings
    ]


def apply_template(
    mappings: Sequence[ColumnMapping],
    template: Sequence[ColumnMapping],
) -> List[ColumnMapping]:
    """Merge a saved mapping template into the current mappings.

    A template entry whose header equals (case-insensitively) a current
    mapping's header overrides that mapping's target field. Columns the
    template does not mention are left alone.
    """
    merged = []
    applied = 0
    for existing in mappings:
        header = existing.source_header.lower()
        override = next((m for m in template if m.source_header.lower() == header), None)
        if override is None:
            merged.append(existing)
            continue
        applied += 1
        merged.append(existing.model_copy(update={"target_field": override.target_field}))

    logger.debug("mapping_template_applied", columns=len(merged), overridden=applied)
    return merged


def unmapped_required_fields(mappings: Sequence[ColumnMapping]) -> List[EquipmentField]:
    """Required fields that no column maps to, in required order."""
    mapped = {m.target_field for m in mappings if m.target_field is not None}
    return [field for field in RowValidator.REQUIRED_FIELDS if field not in mapped]
