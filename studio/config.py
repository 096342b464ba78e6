"""Studio configuration — config.yaml defaults, read once at import time.

Point STUDIO_CONFIG at another YAML file to override the packaged one.
API keys come from the environment (or .env at the project root), never YAML.
"""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "config.yaml"
CONFIG_PATH = Path(os.environ.get("STUDIO_CONFIG") or DEFAULT_CONFIG_PATH)


def load_config(path: Path) -> dict:
    """Read a YAML config file. Raises ValueError unless it holds a mapping."""
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a YAML mapping, got {type(data).__name__}")
    return data


_config = load_config(CONFIG_PATH)


def get_config() -> dict:
    """Return the loaded config dictionary."""
    return _config
