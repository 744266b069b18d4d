"""Pydantic models for header suggestions and column mappings."""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from equipment_import.models.parsed_file import WIRE_MODEL_CONFIG


class EquipmentField(str, Enum):
    """Target schema fields a source column can map onto.

    Declaration order matters: the header mapper scans its alias table in
    this order and the first hit wins.
    """
    MANUFACTURER = "manufacturer"
    MODEL = "model"
    SKU = "sku"
    CATEGORY = "category"
    SUBCATEGORY = "subcategory"
    DESCRIPTION = "description"
    COST = "cost"
    MSRP = "msrp"
    HEIGHT = "height"
    WIDTH = "width"
    DEPTH = "depth"
    WEIGHT = "weight"
    VOLTAGE = "voltage"
    WATTAGE = "wattage"
    CERTIFICATIONS = "certifications"
    IMAGE_URL = "imageUrl"


class ColumnMapping(BaseModel):
    """Mapping of one source column to an equipment field.

    Several mappings may target the same field; validation uses the first.
    """

    model_config = WIRE_MODEL_CONFIG

    source_column: int = Field(..., ge=0, description="Index of the source column")
    source_header: str = Field(default="", description="Original header name from source")
    target_field: Optional[EquipmentField] = Field(
        default=None,
        description="Target equipment field (None if unmapped)"
    )


class HeaderSuggestion(BaseModel):
    """Suggested target field for one header."""

    model_config = WIRE_MODEL_CONFIG

    column_index: int = Field(..., ge=0)
    header: str = Field(..., description="Verbatim header text")
    suggested_field: Optional[EquipmentField] = None
    confidence: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Ranking signal, not a probability"
    )
