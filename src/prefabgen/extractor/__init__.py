from .locator import DeclarationLocator, locate_declarations
from .normalizer import NormalizationResult, PropNormalizer, normalize
from .service import ExtractionResult, StoryExtractor

__all__ = [
    "DeclarationLocator",
    "ExtractionResult",
    "NormalizationResult",
    "PropNormalizer",
    "StoryExtractor",
    "locate_declarations",
    "normalize",
]
