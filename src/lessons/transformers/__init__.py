"""
Schema Transformers.

One transformer per source shape plus a fallback, looked up by format tag.
"""

from __future__ import annotations

from config import Settings

from ..blocks import BlockFactory
from ..models import DetectedFormat
from .base import BaseLessonTransformer
from .fallback import FallbackLessonTransformer
from .legacy import LegacyLessonTransformer
from .slides import SlidesLessonTransformer
from .tiered import TieredLessonTransformer

TRANSFORMER_CLASSES: dict[DetectedFormat, type[BaseLessonTransformer]] = {
    DetectedFormat.LEGACY: LegacyLessonTransformer,
    DetectedFormat.TIERED: TieredLessonTransformer,
    DetectedFormat.SLIDES: SlidesLessonTransformer,
    DetectedFormat.UNKNOWN: FallbackLessonTransformer,
}


def build_transformers(
    factory: BlockFactory | None = None,
    settings: Settings | None = None,
) -> dict[DetectedFormat, BaseLessonTransformer]:
    """Instantiate every transformer around one shared block factory."""
    factory = factory or BlockFactory()
    return {
        detected: transformer_cls(factory=factory, settings=settings)
        for detected, transformer_cls in TRANSFORMER_CLASSES.items()
    }


__all__ = [
    "BaseLessonTransformer",
    "LegacyLessonTransformer",
    "TieredLessonTransformer",
    "SlidesLessonTransformer",
    "FallbackLessonTransformer",
    "TRANSFORMER_CLASSES",
    "build_transformers",
]
