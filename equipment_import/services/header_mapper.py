"""Header mapper: suggests equipment fields for source column headers.

Two tiers, scanned in a fixed order so suggestions are deterministic:
- exact alias match on the lowercased, trimmed header (confidence 0.95)
- substring containment for a handful of common field families (0.7 / 0.6)

The first rule that matches wins; nothing is re-evaluated afterwards.
"""
from typing import Dict, List, Optional, Sequence, Tuple

import structlog

from equipment_import.models.mapping import EquipmentField, HeaderSuggestion
from equipment_import.models.parsed_file import ParsedFile

logger = structlog.get_logger(__name__)

EXACT_CONFIDENCE = 0.95
PARTIAL_CONFIDENCE = 0.7
PRICE_CONFIDENCE = 0.6

MatchOutcome = Tuple[Optional[EquipmentField], float]


class HeaderMapper:
    """Matches column headers to equipment fields using alias tables."""

    # Scanned in insertion order; "w" appears under both WIDTH and WATTAGE
    # and resolves to WIDTH.
    EXACT_ALIASES: Dict[EquipmentField, List[str]] = {
        EquipmentField.MANUFACTURER: ["manufacturer", "mfg", "brand", "vendor"],
        EquipmentField.MODEL: ["model", "model number", "model #", "model no"],
        EquipmentField.SKU: [
            "sku", "part number", "part #", "part no", "item number", "item #", "pn",
        ],
        EquipmentField.CATEGORY: ["category", "cat"],
        EquipmentField.SUBCATEGORY: ["subcategory", "sub-category", "subcat"],
        EquipmentField.DESCRIPTION: [
            "description", "desc", "product description", "item description",
        ],
        EquipmentField.COST: ["cost", "unit cost", "dealer cost", "net cost", "buy price"],
        EquipmentField.MSRP: ["msrp", "list price", "retail", "list", "srp"],
        EquipmentField.HEIGHT: ["height", "h", "height (in)", "height (inches)"],
        EquipmentField.WIDTH: ["width", "w", "width (in)", "width (inches)"],
        EquipmentField.DEPTH: ["depth", "d", "depth (in)", "depth (inches)", "length"],
        EquipmentField.WEIGHT: ["weight", "wt", "weight (lbs)", "weight (lb)"],
        EquipmentField.VOLTAGE: ["voltage", "volt", "v"],
        EquipmentField.WATTAGE: ["wattage", "watts", "power", "w"],
        EquipmentField.CERTIFICATIONS: ["certifications", "certs", "platform", "platforms"],
        EquipmentField.IMAGE_URL: ["image", "image url", "imageurl", "picture", "photo"],
    }

    # Containment rules, evaluated in order after the exact tier
    MANUFACTURER_TOKENS = ("manufacturer", "mfg", "brand")
    MODEL_TOKENS = ("model",)
    SKU_TOKENS = ("sku", "part", "item")
    PRICE_TOKENS = ("cost", "price")
    MSRP_TOKENS = ("list", "msrp", "retail")
    DESCRIPTION_TOKENS = ("desc",)

    @classmethod
    def match_field(cls, header: Optional[str]) -> MatchOutcome:
        """Match a header string to an equipment field.

        Returns:
            (field, confidence), or (None, 0.0) when nothing matches
        """
        if header is None:
            return None, 0.0
        normalized = header.lower().strip()

        for field, aliases in cls.EXACT_ALIASES.items():
            if normalized in aliases:
                return field, EXACT_CONFIDENCE

        return cls._match_partial(normalized)

    @classmethod
    def _match_partial(cls, normalized: str) -> MatchOutcome:
        if _contains_any(normalized, cls.MANUFACTURER_TOKENS):
            return EquipmentField.MANUFACTURER, PARTIAL_CONFIDENCE
        if _contains_any(normalized, cls.MODEL_TOKENS):
            return EquipmentField.MODEL, PARTIAL_CONFIDENCE
        if _contains_any(normalized, cls.SKU_TOKENS):
            return EquipmentField.SKU, PARTIAL_CONFIDENCE
        if _contains_any(normalized, cls.PRICE_TOKENS):
            # Could be cost or msrp; list/retail wording tips it to msrp
            if _contains_any(normalized, cls.MSRP_TOKENS):
                return EquipmentField.MSRP, PRICE_CONFIDENCE
            return EquipmentField.COST, PRICE_CONFIDENCE
        if _contains_any(normalized, cls.DESCRIPTION_TOKENS):
            return EquipmentField.DESCRIPTION, PARTIAL_CONFIDENCE
        return None, 0.0

    def suggest(self, headers: Sequence[str]) -> List[HeaderSuggestion]:
        """Suggest a field for every header, in column order."""
        suggestions: List[HeaderSuggestion] = []
        for index, header in enumerate(headers):
            field, confidence = self.match_field(header)
            suggestions.append(
                HeaderSuggestion(
                    column_index=index,
                    header=header,
                    suggested_field=field,
                    confidence=confidence,
                )
            )

        logger.debug(
            "header_suggestions_built",
            header_count=len(suggestions),
            matched=sum(1 for s in suggestions if s.suggested_field is not None),
        )
        return suggestions


def _contains_any(text: str, tokens: Sequence[str]) -> bool:
    return any(token in text for token in tokens)


_unlisted = set(EquipmentField) - set(HeaderMapper.EXACT_ALIASES)
if _unlisted:
    raise RuntimeError(
        f"HeaderMapper.EXACT_ALIASES is missing fields: {sorted(f.value for f in _unlisted)}"
    )


def detect_headers(parsed: ParsedFile) -> List[HeaderSuggestion]:
    """Suggest field mappings for a parsed file's headers."""
    return HeaderMapper().suggest(parsed.headers)
