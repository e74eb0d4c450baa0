"""Extraction strategies for MPWiK outage pages."""

from outagewatch.core.config.models import ExtractorKind

from .base import (
    DocumentParseError,
    ExtractionResult,
    Extractor,
    addresses_in,
    cell_text,
    first_text,
    parse_document,
    split_on_breaks,
)
from .emergency import EmergencyOutageExtractor
from .planned import PlannedOutageExtractor

EXTRACTORS: dict[ExtractorKind, type[Extractor]] = {
    ExtractorKind.PLANNED: PlannedOutageExtractor,
    ExtractorKind.EMERGENCY: EmergencyOutageExtractor,
}


def build_extractor(kind: ExtractorKind, district: str) -> Extractor:
    """Create the extractor for a category kind."""
    try:
        extractor_cls = EXTRACTORS[ExtractorKind(kind)]
    except (KeyError, ValueError) as e:
        raise ValueError(f"Unknown extractor kind: {kind}") from e
    return extractor_cls(district)


__all__ = [
    "DocumentParseError",
    "ExtractionResult",
    "Extractor",
    "EmergencyOutageExtractor",
    "PlannedOutageExtractor",
    "EXTRACTORS",
    "addresses_in",
    "build_extractor",
    "cell_text",
    "first_text",
    "parse_document",
    "split_on_breaks",
]
