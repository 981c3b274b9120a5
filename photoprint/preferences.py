"""Persistence of the last-used print settings.

Settings are stored as flat key/value pairs in a JSON file. Any key that is
missing or holds an invalid value falls back to its default, so a damaged or
outdated file never prevents startup.
"""

import json
import logging
import tempfile
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from photoprint.config import PRINT_DPI
from photoprint.validation import IncompletePageMode, LayoutType, MarginConfig, PaperSize

logger = logging.getLogger(__name__)


class Settings(BaseModel):
    """Print settings with every field defaulted."""

    model_config = ConfigDict(frozen=True)

    layout: LayoutType = LayoutType.FOUR_PER_PAGE
    paper_size: PaperSize = PaperSize.A4
    margins: MarginConfig = Field(default_factory=MarginConfig)
    incomplete_page_mode: IncompletePageMode = IncompletePageMode.LEAVE_BLANK
    copies: int = Field(default=1, ge=1)
    dpi: int = Field(default=PRINT_DPI, gt=0)


def settings_to_dict(settings: Settings) -> dict[str, Any]:
    return {
        "layout_type": settings.layout.value,
        "paper_size": settings.paper_size.value,
        "margin_top": settings.margins.top_mm,
        "margin_bottom": settings.margins.bottom_mm,
        "margin_left": settings.margins.left_mm,
        "margin_right": settings.margins.right_mm,
        "incomplete_page_mode": settings.incomplete_page_mode.value,
        "copies": settings.copies,
        "dpi": settings.dpi,
    }


def settings_from_dict(data: dict[str, Any]) -> Settings:
    defaults = Settings()
    updates: dict[str, Any] = {}

    def read(key: str, field: str, caster: Any) -> None:
        if key not in data:
            return
        try:
            updates[field] = caster(data[key])
        except (ValueError, TypeError, KeyError, ValidationError) as e:
            logger.warning(f"Ignoring invalid preference {key}={data[key]!r}: {e}")

    read("layout_type", "layout", LayoutType)
    read("paper_size", "paper_size", PaperSize)
    read("incomplete_page_mode", "incomplete_page_mode", IncompletePageMode)
    read("copies", "copies", int)
    read("dpi", "dpi", int)

    margin_values = defaults.margins.model_dump()
    for key, field in (
        ("margin_top", "top_mm"),
        ("margin_bottom", "bottom_mm"),
        ("margin_left", "left_mm"),
        ("margin_right", "right_mm"),
    ):
        if key not in data:
            continue
        try:
            margin_values[field] = MarginConfig(**{field: data[key]}).model_dump()[field]
        except ValidationError as e:
            logger.warning(f"Ignoring invalid preference {key}={data[key]!r}: {e}")
    updates["margins"] = MarginConfig(**margin_values)

    for field in ("copies", "dpi"):
        if field in updates:
            try:
                Settings(**{field: updates[field]})
            except ValidationError as e:
                logger.warning(f"Ignoring invalid preference {field}={updates[field]!r}: {e}")
                del updates[field]

    return defaults.model_copy(update=updates)


def load_settings(path: Path) -> Settings:
    """Load settings, falling back to defaults for anything missing or invalid.

    Args:
        path: Preference file location

    Returns:
        Settings; all defaults if the file does not exist or is not valid JSON
    """
    if not path.exists():
        logger.debug(f"No preference file at {path}, using defaults")
        return Settings()

    try:
        data = json.loads(path.read_text())
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Invalid preference file {path}: {e}")
        return Settings()

    if not isinstance(data, dict):
        logger.warning(f"Invalid preference file {path}: expected a JSON object")
        return Settings()

    settings = settings_from_dict(data)
    logger.debug(f"Loaded preferences from {path}")
    return settings


def save_settings(settings: Settings, path: Path) -> None:
    """Write settings atomically using a temp file."""
    path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode="w",
        suffix=".json",
        dir=path.parent,
        delete=False,
        encoding="utf-8",
    ) as f:
        temp_path = Path(f.name)
        try:
            json.dump(settings_to_dict(settings), f, indent=2)
        except Exception:
            f.close()
            temp_path.unlink(missing_ok=True)
            raise

    temp_path.replace(path)
    logger.info(f"Saved preferences to {path}")
