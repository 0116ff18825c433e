"""TOML configuration loader for the intake module."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]

from .extraction.receipts import DEFAULT_SUMMARY_KEYWORDS
from .ocr import DEFAULT_LANGUAGES

DEFAULT_DB_PATH = "~/.config/shopdesk/catalog.db"


@dataclass
class TesseractOCRConfig:
    cmd: str = ""
    preprocess: bool = True


@dataclass
class ClaudeOCRConfig:
    api_key: str = ""
    model: str = "claude-sonnet-4-5-20250929"


@dataclass
class GeminiOCRConfig:
    api_key: str = ""
    model: str = "gemini-2.0-flash"


@dataclass
class OCRConfig:
    backend: str = "tesseract"
    languages: list[str] = field(default_factory=lambda: list(DEFAULT_LANGUAGES))
    max_concurrency: int = 4
    tesseract: TesseractOCRConfig = field(default_factory=TesseractOCRConfig)
    claude: ClaudeOCRConfig = field(default_factory=ClaudeOCRConfig)
    gemini: GeminiOCRConfig = field(default_factory=GeminiOCRConfig)


@dataclass
class ExtractionConfig:
    fallback: bool = True
    summary_keywords: list[str] = field(
        default_factory=lambda: list(DEFAULT_SUMMARY_KEYWORDS)
    )


@dataclass
class DatabaseConfig:
    path: str = DEFAULT_DB_PATH


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class IntakeConfig:
    ocr: OCRConfig = field(default_factory=OCRConfig)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: str | Path | None = None) -> IntakeConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    API keys and the tesseract binary path can be provided via environment
    variables when the file leaves them empty.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    ocr = raw.get("ocr", {})
    ext = raw.get("extraction", {})
    dbs = raw.get("database", {})
    log = raw.get("logging", {})

    tesseract_cfg = ocr.get("tesseract", {})
    claude_cfg = ocr.get("claude", {})
    gemini_cfg = ocr.get("gemini", {})

    # Resolve secrets: config file → environment variable
    tesseract_cmd = tesseract_cfg.get("cmd", "") or os.environ.get(
        "TESSERACT_CMD", ""
    )
    claude_api_key = claude_cfg.get("api_key", "") or os.environ.get(
        "ANTHROPIC_API_KEY", ""
    )
    gemini_api_key = gemini_cfg.get("api_key", "") or os.environ.get(
        "GEMINI_API_KEY", ""
    )

    max_concurrency = int(ocr.get("max_concurrency", 4))
    if max_concurrency < 1:
        raise ValueError(
            f"ocr.max_concurrency must be at least 1, got {max_concurrency}"
        )

    return IntakeConfig(
        ocr=OCRConfig(
            backend=ocr.get("backend", "tesseract"),
            languages=ocr.get("languages", list(DEFAULT_LANGUAGES)),
            max_concurrency=max_concurrency,
            tesseract=TesseractOCRConfig(
                cmd=tesseract_cmd,
                preprocess=tesseract_cfg.get("preprocess", True),
            ),
            claude=ClaudeOCRConfig(
                api_key=claude_api_key,
                model=claude_cfg.get("model", "claude-sonnet-4-5-20250929"),
            ),
            gemini=GeminiOCRConfig(
                api_key=gemini_api_key,
                model=gemini_cfg.get("model", "gemini-2.0-flash"),
            ),
        ),
        extraction=ExtractionConfig(
            fallback=ext.get("fallback", True),
            summary_keywords=ext.get(
                "summary_keywords", list(DEFAULT_SUMMARY_KEYWORDS)
            ),
        ),
        database=DatabaseConfig(
            path=dbs.get("path", DEFAULT_DB_PATH),
        ),
        logging=LoggingConfig(
            level=str(log.get("level", "INFO")).upper(),
        ),
    )
