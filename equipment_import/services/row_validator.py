"""Row validator: checks mapped rows against the equipment schema.

Every input row yields exactly one ValidationResult. Bad data is reported
per row and never aborts the batch.
"""
from typing import Any, Dict, Iterable, List, Optional, Sequence

import structlog
from pydantic import ValidationError

from equipment_import.errors.exceptions import MappingValidationError
from equipment_import.models.mapping import ColumnMapping, EquipmentField
from equipment_import.models.parsed_file import ParsedRow
from equipment_import.models.validation import MatchType, ValidationResult, ValidationStatus

logger = structlog.get_logger(__name__)

# Characters stripped from prices before numeric parsing
PRICE_NOISE = ("$", ",", " ")


def _clean_price(raw: str) -> str:
    cleaned = raw
    for char in PRICE_NOISE:
        cleaned = cleaned.replace(char, "")
    return cleaned


def _is_real_number(text: str) -> bool:
    """Strict real-number check.

    float() also accepts digit-group underscores and surrounding
    whitespace; neither counts as a number here.
    """
    if "_" in text or text != text.strip():
        return False
    try:
        float(text)
    except ValueError:
        return False
    return True


class RowValidator:
    """Validates parsed rows against a finalized column mapping."""

    REQUIRED_FIELDS = (
        EquipmentField.MANUFACTURER,
        EquipmentField.MODEL,
        EquipmentField.SKU,
        EquipmentField.COST,
    )

    # Fields a row may leave empty; with REQUIRED_FIELDS this covers the schema
    OPTIONAL_FIELDS = (
        EquipmentField.CATEGORY,
        EquipmentField.SUBCATEGORY,
        EquipmentField.DESCRIPTION,
        EquipmentField.MSRP,
        EquipmentField.HEIGHT,
        EquipmentField.WIDTH,
        EquipmentField.DEPTH,
        EquipmentField.WEIGHT,
        EquipmentField.VOLTAGE,
        EquipmentField.WATTAGE,
        EquipmentField.CERTIFICATIONS,
        EquipmentField.IMAGE_URL,
    )

    # Field -> label used in the "Invalid <label> format" message
    NUMERIC_FIELDS = {
        EquipmentField.COST: "cost",
        EquipmentField.MSRP: "MSRP",
    }

    def validate_rows(
        self,
        rows: Iterable[Any],
        mappings: Iterable[Any],
    ) -> List[ValidationResult]:
        """Validate every row, preserving order.

        Args:
            rows: ParsedRow objects (or their dict wire form)
            mappings: ColumnMapping objects (or their dict wire form)

        Returns:
            One ValidationResult per row

        Raises:
            MappingValidationError: If rows or mappings are malformed
        """
        parsed_rows = _coerce_all(rows, ParsedRow, "rows")
        parsed_mappings = _coerce_all(mappings, ColumnMapping, "mappings")
        field_columns = self._first_mapping_columns(parsed_mappings)

        results = [self.validate_row(row, field_columns) for row in parsed_rows]

        logger.info(
            "rows_validated",
            row_count=len(results),
            valid=sum(1 for r in results if r.status == ValidationStatus.VALID),
            incomplete=sum(1 for r in results if r.status == ValidationStatus.INCOMPLETE),
            invalid=sum(1 for r in results if r.status == ValidationStatus.INVALID),
        )
        return results

    def validate_row(
        self,
        row: ParsedRow,
        field_columns: Dict[EquipmentField, int],
    ) -> ValidationResult:
        """Validate a single row.

        Args:
            row: Parsed row
            field_columns: Field -> source column of its first mapping
        """
        missing_fields: List[EquipmentField] = []
        errors: List[str] = []

        for field in self.REQUIRED_FIELDS:
            if not self._has_value(row, field_columns.get(field)):
                missing_fields.append(field)

        for field, label in self.NUMERIC_FIELDS.items():
            column = field_columns.get(field)
            if column is None or column >= len(row.cells):
                continue
            raw = row.cells[column]
            cleaned = _clean_price(raw)
            if cleaned and not _is_real_number(cleaned):
                errors.append(f"Invalid {label} format: '{raw}'")

        if errors:
            status = ValidationStatus.INVALID
        elif missing_fields:
            status = ValidationStatus.INCOMPLETE
        else:
            status = ValidationStatus.VALID

        return ValidationResult(
            row_number=row.row_number,
            status=status,
            match_type=MatchType.NEW,
            existing_equipment_id=None,
            missing_fields=missing_fields,
            errors=errors,
        )

    @staticmethod
    def _has_value(row: ParsedRow, column: Optional[int]) -> bool:
        if column is None or column >= len(row.cells):
            return False
        return bool(row.cells[column].strip())

    @staticmethod
    def _first_mapping_columns(mappings: Sequence[ColumnMapping]) -> Dict[EquipmentField, int]:
        """Source column of the first mapping for each targeted field."""
        columns: Dict[EquipmentField, int] = {}
        for mapping in mappings:
            if mapping.target_field is None or mapping.target_field in columns:
                continue
            columns[mapping.target_field] = mapping.source_column
        return columns


_unclassified = set(EquipmentField) - set(RowValidator.REQUIRED_FIELDS) - set(RowValidator.OPTIONAL_FIELDS)
if _unclassified:
    raise RuntimeError(
        f"RowValidator does not classify fields: {sorted(f.value for f in _unclassified)}"
    )


def _coerce_all(items: Iterable[Any], model: Any, label: str) -> List[Any]:
    if items is None or isinstance(items, (str, bytes, dict)):
        raise MappingValidationError(f"{label} must be a sequence, got {type(items).__name__}")
    coerced = []
    try:
        for item in items:
            coerced.append(item if isinstance(item, model) else model.model_validate(item))
    except ValidationError as e:
        raise MappingValidationError(f"Malformed {label}: {e.error_count()} error(s)") from e
    except TypeError as e:
        raise MappingValidationError(f"{label} must be a sequence: {e}") from e
    return coerced


def validate_rows(
    rows: Iterable[Any],
    mappings: Iterable[Any],
) -> List[ValidationResult]:
    """Validate rows with the default RowValidator."""
    return RowValidator().validate_rows(rows, mappings)
