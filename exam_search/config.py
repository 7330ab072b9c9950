from __future__ import annotations

import json
import math
from dataclasses import dataclass
from pathlib import Path

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.json"

DEFAULTS = {
    "data_file": "RawFile.txt",
    "strict_parse": False,
    "max_results": 20,
    "relevance_threshold": 0.5,
    "default_question_type": "single_choice",
    "host": "127.0.0.1",
    "port": 8080,
    "auto_reload": True,
}


@dataclass
class Settings:
    data_file: str = DEFAULTS["data_file"]
    strict_parse: bool = DEFAULTS["strict_parse"]
    max_results: int = DEFAULTS["max_results"]
    relevance_threshold: float = DEFAULTS["relevance_threshold"]
    default_question_type: str = DEFAULTS["default_question_type"]
    host: str = DEFAULTS["host"]
    port: int = DEFAULTS["port"]
    auto_reload: bool = DEFAULTS["auto_reload"]

    @property
    def project_root(self) -> Path:
        return Path(__file__).resolve().parent.parent

    @property
    def data_full_path(self) -> Path:
        # Absolute data_file values are kept as-is by the / operator
        return self.project_root / self.data_file

    def to_dict(self) -> dict:
        return {
            "data_file": self.data_file,
            "strict_parse": self.strict_parse,
            "max_results": self.max_results,
            "relevance_threshold": self.relevance_threshold,
            "default_question_type": self.default_question_type,
            "host": self.host,
            "port": self.port,
            "auto_reload": self.auto_reload,
        }


def coerce_setting(name: str, value: object):
    """Convert value to the type of DEFAULTS[name]; ValueError if it can't be."""
    expected = type(DEFAULTS[name])
    if expected is bool:
        if isinstance(value, bool):
            return value
    elif expected is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str) and value.strip().isdigit():
            return int(value)
    elif expected is float:
        if isinstance(value, (int, float, str)) and not isinstance(value, bool):
            try:
                number = float(value)
            except (OverflowError, ValueError):
                pass
            else:
                if math.isfinite(number):
                    return number
    elif isinstance(value, expected):
        return value
    raise ValueError(f"Invalid value for {name}: {value!r}")


def load_settings() -> Settings:
    if CONFIG_PATH.exists():
        raw = json.loads(CONFIG_PATH.read_text())
        known = {f.name for f in Settings.__dataclass_fields__.values()}
        filtered = {k: v for k, v in raw.items() if k in known}
        return Settings(**filtered)
    return Settings()


def save_settings(settings: Settings) -> None:
    CONFIG_PATH.write_text(json.dumps(settings.to_dict(), indent=4) + "\n")
