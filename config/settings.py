from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Default precedence order (first = highest)
    locales: list[str] = ["en-US"]

    # Two-digit years expand into the century ending at this year
    two_digit_year_max: int = 2049

    # Extra <locale>.json rule files, searched before the built-in bundle
    rules_dir: Optional[Path] = None

    # Logging
    log_level: str = "INFO"

    model_config = {
        "env_prefix": "DATE_EXTRACTOR_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }
