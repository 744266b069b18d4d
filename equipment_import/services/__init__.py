"""Mapping, validation and summary services for the import pipeline."""
from equipment_import.services.header_mapper import HeaderMapper, detect_headers
from equipment_import.services.row_validator import RowValidator, validate_rows
from equipment_import.services.column_mapping import (
    apply_template,
    mappings_from_suggestions,
    unmapped_required_fields,
    update_mapping,
)
from equipment_import.services.catalog_matching import (
    CatalogLookup,
    apply_catalog_matches,
    extract_identity,
)
from equipment_import.services.import_summary import calculate_import_summary

__all__ = [
    "HeaderMapper",
    "detect_headers",
    "RowValidator",
    "validate_rows",
    "apply_template",
    "mappings_from_suggestions",
    "unmapped_required_fields",
    "update_mapping",
    "CatalogLookup",
    "apply_catalog_matches",
    "extract_identity",
    "calculate_import_summary",
]
