"""OCR intake of catalog products and customer contacts."""

from .config import (
    DatabaseConfig,
    ExtractionConfig,
    IntakeConfig,
    OCRConfig,
    load_config,
)
from .extraction import (
    ExtractedContact,
    ExtractedProduct,
    RecordExtractor,
    create_extractor,
)
from .extraction.contacts import ContactExtractor
from .extraction.receipts import ReceiptExtractor
from .ocr import OCRBackend, create_backend
from .pipeline import (
    ImageInput,
    IntakePipeline,
    IntakeResult,
    NothingExtractedError,
    OCRFailedError,
    load_images,
)

__all__ = [
    "OCRBackend",
    "create_backend",
    "RecordExtractor",
    "ReceiptExtractor",
    "ContactExtractor",
    "ExtractedProduct",
    "ExtractedContact",
    "create_extractor",
    "IntakePipeline",
    "IntakeResult",
    "ImageInput",
    "NothingExtractedError",
    "OCRFailedError",
    "load_images",
    "IntakeConfig",
    "OCRConfig",
    "ExtractionConfig",
    "DatabaseConfig",
    "load_config",
]
