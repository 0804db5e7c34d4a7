from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".pintype"
CONFIG_FILE = CONFIG_DIR / "config.yaml"
DEFAULT_SOUND = Path(__file__).resolve().parent.parent / "data" / "sounds" / "key.wav"


@dataclass(frozen=True)
class Settings:
    """User settings. File: ~/.pintype/config.yaml; every key is optional."""

    text: str = "en"
    sound: bool = True
    sound_file: Optional[str] = None
    tick_ms: int = 500
    min_cols: int = 45
    min_rows: int = 6

    @property
    def sound_path(self) -> Path:
        return Path(self.sound_file).expanduser() if self.sound_file else DEFAULT_SOUND

    @property
    def min_size(self) -> tuple[int, int]:
        return self.min_cols, self.min_rows

    def override(self, **changes: Any) -> "Settings":
        """Return a copy with the non-None ``changes`` applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Settings":
        path = Path(path) if path is not None else CONFIG_FILE
        if not path.exists():
            return cls()
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        if raw is None:
            return cls()
        if not isinstance(raw, dict):
            raise ValueError(f"{path.name}: expected a YAML mapping of settings")
        return cls.from_dict(raw, source=path.name)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any], source: str = "settings") -> "Settings":
        known = {f.name for f in fields(cls)}
        for key in sorted(set(raw) - known):
            logger.warning("%s: ignoring unknown setting %r", source, key)
        values = {k: v for k, v in raw.items() if k in known}

        if "text" in values and (not isinstance(values["text"], str) or not values["text"].strip()):
            raise ValueError(f"{source}: 'text' must be a bundled text name or a file path")
        if "sound" in values and not isinstance(values["sound"], bool):
            raise ValueError(f"{source}: 'sound' must be true or false")
        if values.get("sound_file") is not None and not isinstance(values["sound_file"], str):
            raise ValueError(f"{source}: 'sound_file' must be a path")
        for key in ("tick_ms", "min_cols", "min_rows"):
            if key in values:
                value = values[key]
                # bool is an int subclass
                if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                    raise ValueError(f"{source}: {key!r} must be a positive integer")
        return cls(**values)
