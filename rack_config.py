"""
Configuration Module
Reads rack documentation settings from the environment / .env file
"""

import os
from dataclasses import dataclass
from pathlib import Path
from dotenv import load_dotenv

from rack_model import DEFAULT_UNIT_HEIGHT

# Load settings from .env in the working directory and next to this file
load_dotenv()
load_dotenv(Path(__file__).parent / ".env")

PAGE_SIZES = ("letter", "a4", "tabloid")


@dataclass(frozen=True)
class RackDocsSettings:
    output_dir: str = "."
    company_name: str = "Your Company"
    page_size: str = "letter"
    power_tolerance_w: float = 0.0
    unit_height: float = DEFAULT_UNIT_HEIGHT


def _float_setting(name: str, default: float, minimum: float = 0.0) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        print(f"⚠️  Ignoring {name}={raw!r}: not a number, using {default}")
        return default
    if value < minimum:
        print(f"⚠️  Ignoring {name}={raw!r}: must be at least {minimum}, using {default}")
        return default
    return value


def get_settings() -> RackDocsSettings:
    """Build settings from the current environment"""
    page_size = os.getenv("RACK_DOCS_PAGE_SIZE", "letter").strip().lower()
    if page_size not in PAGE_SIZES:
        print(f"⚠️  Unknown RACK_DOCS_PAGE_SIZE '{page_size}', using letter")
        page_size = "letter"

    unit_height = _float_setting("RACK_UNIT_HEIGHT_PX", DEFAULT_UNIT_HEIGHT)
    if unit_height == 0:
        unit_height = DEFAULT_UNIT_HEIGHT

    return RackDocsSettings(
        output_dir=os.getenv("RACK_DOCS_OUTPUT_DIR", "."),
        company_name=os.getenv("RACK_DOCS_COMPANY", "Your Company"),
        page_size=page_size,
        power_tolerance_w=_float_setting("RACK_POWER_TOLERANCE_W", 0.0),
        unit_height=unit_height,
    )
