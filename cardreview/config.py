"""Configuration helpers: data directory discovery, settings, frontmatter parsing."""

import os
import pathlib
from dataclasses import dataclass

from cardreview.cache import DEFAULT_TTL_MS

MIN_BATCH_SIZE = 1
MAX_BATCH_SIZE = 50


@dataclass
class Settings:
    auto_save: bool = True
    review_batch_size: int = 10
    mobile_full_width: bool = False
    random_mode: bool = False

    _KEYS = {
        "autoSave": "auto_save",
        "reviewBatchSize": "review_batch_size",
        "mobileFullWidth": "mobile_full_width",
        "randomMode": "random_mode",
    }

    def to_dict(self) -> dict:
        return {k: getattr(self, attr) for k, attr in self._KEYS.items()}

    @classmethod
    def from_dict(cls, data: dict | None) -> "Settings":
        settings = cls()
        for k, attr in cls._KEYS.items():
            if data and data.get(k) is not None:
                settings.update(**{attr: data[k]})
        return settings

    def update(self, **changes):
        for attr, value in changes.items():
            if attr not in self._KEYS.values():
                raise ValueError(f"Unknown setting: {attr}")
            if attr == "review_batch_size":
                value = clamp_batch_size(value)
            else:
                value = bool(value)
            setattr(self, attr, value)


def clamp_batch_size(value) -> int:
    try:
        value = int(value)
    except (TypeError, ValueError):
        return Settings.review_batch_size
    return max(MIN_BATCH_SIZE, min(MAX_BATCH_SIZE, value))


def get_data_dir() -> pathlib.Path:
    env = os.environ.get("CARDREVIEW_DIR")
    if env:
        return pathlib.Path(env)
    config_path = pathlib.Path.home() / ".config" / "cardreview" / "config"
    if config_path.exists():
        for line in config_path.read_text().splitlines():
            line = line.strip()
            if line.startswith("DIR="):
                return pathlib.Path(line[4:].strip())
    return pathlib.Path.home() / ".local" / "share" / "cardreview"


def load_host_options(data_dir: pathlib.Path) -> dict:
    options_path = data_dir / "settings.toml"
    options = {"cache_ttl_ms": DEFAULT_TTL_MS, "db_name": "cardreview.db"}
    if options_path.exists():
        options.update(_parse_toml_simple(options_path.read_text()))
    return options


def _parse_toml_simple(text: str) -> dict:
    """Minimal TOML parser for flat key=value files."""
    result = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" in line:
            k, v = line.split("=", 1)
            k = k.strip()
            v = v.strip()
            if v.startswith('"') and v.endswith('"'):
                v = v[1:-1]
            elif v.isdigit():
                v = int(v)
            elif v == "true":
                v = True
            elif v == "false":
                v = False
            result[k] = v
    return result


def parse_frontmatter(text: str) -> tuple[dict, str]:
    """Parse YAML frontmatter from markdown. Returns (metadata, body)."""
    if not text.startswith("---"):
        return {}, text
    end = text.find("\n---", 3)
    if end == -1:
        return {}, text
    yaml_block = text[3:end].strip()
    body = text[end + 4:].lstrip("\n")
    meta = {}
    for line in yaml_block.splitlines():
        line = line.strip()
        if ":" in line:
            k, v = line.split(":", 1)
            k = k.strip()
            v = v.strip()
            if v.startswith("[") and v.endswith("]"):
                v = [x.strip().strip('"').strip("'") for x in v[1:-1].split(",") if x.strip()]
            elif v.startswith('"') and v.endswith('"'):
                v = v[1:-1]
            elif v.startswith("'") and v.endswith("'"):
                v = v[1:-1]
            elif v.lower() == "true":
                v = True
            elif v.lower() == "false":
                v = False
            elif v.isdigit():
                v = int(v)
            meta[k] = v
    return meta, body
