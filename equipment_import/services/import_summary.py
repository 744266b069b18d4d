"""Preview summary of validated rows."""
from typing import Iterable, Sequence

from equipment_import.models.validation import (
    ImportSummary,
    MatchType,
    ValidationResult,
    ValidationStatus,
)

UPDATE_MATCH_TYPES = {MatchType.UPDATE_SKU, MatchType.UPDATE_FALLBACK}


def calculate_import_summary(
    results: Sequence[ValidationResult],
    excluded_rows: Iterable[int] = (),
) -> ImportSummary:
    """Count what an import would do, ignoring rows the user excluded.

    Args:
        results: Validation results (after catalog matching, if any)
        excluded_rows: Row numbers left out of the import
    """
    excluded = set(excluded_rows)
    included = [r for r in results if r.row_number not in excluded]

    return ImportSummary(
        total=len(results),
        to_create=sum(
            1 for r in included
            if r.status == ValidationStatus.VALID and r.match_type == MatchType.NEW
        ),
        to_update=sum(
            1 for r in included
            if r.status == ValidationStatus.VALID and r.match_type in UPDATE_MATCH_TYPES
        ),
        incomplete=sum(1 for r in included if r.status == ValidationStatus.INCOMPLETE),
        invalid=sum(1 for r in included if r.status == ValidationStatus.INVALID),
        excluded=len(excluded),
    )
