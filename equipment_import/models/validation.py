"""Pydantic models for row validation verdicts and import summaries."""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from equipment_import.models.mapping import EquipmentField
from equipment_import.models.parsed_file import WIRE_MODEL_CONFIG


class ValidationStatus(str, Enum):
    """Verdict for a single row."""
    VALID = "valid"
    INCOMPLETE = "incomplete"
    INVALID = "invalid"


class MatchType(str, Enum):
    """How a row relates to the existing catalog."""
    NEW = "new"
    UPDATE_SKU = "update_sku"
    UPDATE_FALLBACK = "update_fallback"


class ValidationResult(BaseModel):
    """Validation verdict for one parsed row."""

    model_config = WIRE_MODEL_CONFIG

    row_number: int = Field(..., ge=1, description="Row number from source")
    status: ValidationStatus
    match_type: Optional[MatchType] = Field(
        default=MatchType.NEW,
        description="Set to NEW here; refined by the catalog lookup"
    )
    existing_equipment_id: Optional[str] = None
    missing_fields: List[EquipmentField] = Field(
        default_factory=list,
        description="Required fields with no value, in required-field order"
    )
    errors: List[str] = Field(default_factory=list)

    @property
    def is_importable(self) -> bool:
        return self.status == ValidationStatus.VALID


class CatalogMatch(BaseModel):
    """An existing catalog record returned by a catalog lookup."""

    model_config = WIRE_MODEL_CONFIG

    existing_equipment_id: str = Field(..., min_length=1)
    match_type: MatchType


class ImportSummary(BaseModel):
    """Counts shown before an import is committed."""

    model_config = WIRE_MODEL_CONFIG

    total: int = Field(default=0, ge=0, description="All validated rows")
    to_create: int = Field(default=0, ge=0, description="Valid rows that become new equipment")
    to_update: int = Field(default=0, ge=0, description="Valid rows that update existing equipment")
    incomplete: int = Field(default=0, ge=0)
    invalid: int = Field(default=0, ge=0)
    excluded: int = Field(default=0, ge=0, description="Rows excluded by the user")

    @property
    def importable(self) -> int:
        return self.to_create + self.to_update
