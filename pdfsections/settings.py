# pdfsections/settings.py

import json
import logging
import os
from dataclasses import fields
from pathlib import Path

from pdfsections.layout import Anchor, LayoutConfig

logger = logging.getLogger(__name__)


def default_config_path() -> Path:
    if os.name == "nt" and "APPDATA" in os.environ:
        config_dir = Path(os.environ["APPDATA"]) / "PDFSectionMerger"
    else:
        config_dir = Path.home() / ".pdfsectionmerger"
    return config_dir / "config.json"


def load_settings(config_path: Path) -> dict:
    """Load saved settings from a JSON config file."""
    try:
        if config_path.exists():
            with open(config_path, "r", encoding="utf-8") as f:
                settings = json.load(f)
            if isinstance(settings, dict):
                return settings
            logger.warning("Ignoring malformed settings file %s", config_path)
    except (OSError, ValueError) as e:
        logger.warning("Could not load settings from %s: %s", config_path, e)
    return {}


def save_settings(config_path: Path, settings: dict) -> None:
    """Save settings dictionary to a JSON config file."""
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(settings, f, indent=4)
    except OSError as e:
        logger.warning("Could not save settings to %s: %s", config_path, e)


def config_to_settings(config: LayoutConfig) -> dict:
    return {
        "insert_blank_page": config.insert_blank_page,
        "flatten_annotations": config.flatten_annotations,
        "orientation": config.orientation.value,
        "number_format": config.number_format,
        "horizontal": config.anchor.horizontal.value,
        "vertical": config.anchor.vertical.value,
        "margin": config.margin,
        "font_size": config.font_size,
        "font_name": config.font_name,
        "auto_update": config.auto_update,
    }


def config_from_settings(settings: dict) -> LayoutConfig:
    """
    Build a LayoutConfig from saved settings. Each bad value falls back to
    its default on its own, so one broken entry does not reset the rest.
    """
    config = LayoutConfig()
    known = {f.name for f in fields(LayoutConfig)} - {"merge_pages", "anchor"}

    for key, value in settings.items():
        if key not in known:
            continue
        try:
            config = config.updated(**{key: value})
        except (TypeError, ValueError) as e:
            logger.warning("Ignoring saved setting %s=%r: %s", key, value, e)

    if "horizontal" in settings or "vertical" in settings:
        try:
            anchor = Anchor.from_parts(
                settings.get("horizontal", config.anchor.horizontal),
                settings.get("vertical", config.anchor.vertical),
            )
            config = config.updated(anchor=anchor)
        except ValueError as e:
            logger.warning("Ignoring saved anchor: %s", e)

    return config
