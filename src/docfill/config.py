"""
Settings Module

Loads filler settings from a .env file and the process environment and
configures logging for the command line and the Streamlit page.

Key Functions:
- get_settings(): Returns the cached FillerSettings, loading them on first use
- reset_settings(): Drops the cached settings so the next call reloads them
- configure_logging(): Applies the application's logging format and level

Global State:
- SETTINGS: Singleton instance of the loaded settings
"""

import logging
import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from .placeholders.constants import (
    DEFAULT_DATE_FORMAT,
    EMPTY_MODE_EMDASH,
    EMPTY_MODES,
    RESERVED_CONTROL_PREFIXES,
)


LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

_TRUE_VALUES = {"1", "true", "yes", "on"}


class FillerSettings(BaseModel):
    """Options the collaborators pass down to the placeholder engine."""
    empty_mode: str = Field(default=EMPTY_MODE_EMDASH, description="How required fields without a value render")
    date_format: str = Field(default=DEFAULT_DATE_FORMAT, description="strftime format for date fields")
    match_case: bool = False
    use_defaults: bool = False
    control_prefixes: List[str] = Field(default_factory=lambda: list(RESERVED_CONTROL_PREFIXES))
    log_level: str = "INFO"

    @field_validator("empty_mode")
    @classmethod
    def check_empty_mode(cls, v):
        v = v.strip().lower()
        if v not in EMPTY_MODES:
            raise ValueError(f"DOCFILL_EMPTY_MODE must be one of {EMPTY_MODES}, got '{v}'")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v):
        return v.strip().upper() or "INFO"

    def substitution_options(self) -> dict:
        """Keyword arguments for substitute_placeholders / fill_document."""
        return {
            "date_format": self.date_format,
            "empty_mode": self.empty_mode,
            "use_defaults": self.use_defaults,
            "match_case": self.match_case,
            "reserved_prefixes": tuple(self.control_prefixes),
        }


# Global settings, loaded once
SETTINGS: Optional[FillerSettings] = None


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in _TRUE_VALUES


def load_settings() -> FillerSettings:
    """Reads the DOCFILL_* variables from .env and the environment."""
    load_dotenv()

    values = {
        "match_case": _env_flag("DOCFILL_MATCH_CASE"),
        "use_defaults": _env_flag("DOCFILL_USE_DEFAULTS"),
    }
    if os.getenv("DOCFILL_EMPTY_MODE"):
        values["empty_mode"] = os.getenv("DOCFILL_EMPTY_MODE")
    if os.getenv("DOCFILL_DATE_FORMAT"):
        values["date_format"] = os.getenv("DOCFILL_DATE_FORMAT")
    if os.getenv("DOCFILL_LOG_LEVEL"):
        values["log_level"] = os.getenv("DOCFILL_LOG_LEVEL")
    prefixes = os.getenv("DOCFILL_CONTROL_PREFIXES")
    if prefixes is not None:
        values["control_prefixes"] = [p.strip() for p in prefixes.split(",") if p.strip()]

    return FillerSettings(**values)


def get_settings() -> FillerSettings:
    global SETTINGS
    if SETTINGS is None:
        SETTINGS = load_settings()
    return SETTINGS


def reset_settings() -> None:
    global SETTINGS
    SETTINGS = None


def configure_logging(level: Optional[str] = None) -> None:
    """Configures root logging with the application format."""
    level_name = (level or get_settings().log_level).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)
