"""Typed, layered configuration loader with precedence handling."""
from __future__ import annotations

import os
import configparser
from dataclasses import dataclass, fields
from pathlib import Path
from threading import RLock
from typing import Any, Callable, Dict, Tuple

# --------------------------------------------------------------------------- #
#  Paths & default definitions
# --------------------------------------------------------------------------- #

CONFIG_DIR = Path(__file__).resolve().parent
DEFAULTS_INI = CONFIG_DIR / "defaults.ini"
MACHINE_INI = CONFIG_DIR / "config.ini"
ENV_PREFIX = "SIGNEASE_"


def _user_config_path() -> Path:
    if os.name == "nt":
        appdata = os.environ.get("APPDATA") or (Path.home() / "AppData" / "Roaming")
        return Path(appdata) / "SignEase" / "config.ini"
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / "signease" / "config.ini"


def _user_data_dir() -> Path:
    if os.name == "nt":
        appdata = os.environ.get("LOCALAPPDATA") or (Path.home() / "AppData" / "Local")
        return Path(appdata) / "SignEase"
    return Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share")) / "signease"


_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "General": {
        "app_name": "SignEase",
        "version": "1.0.0",
    },
    "Database": {
        "logging": (_user_data_dir() / "logs.db").as_posix(),
    },
    "Pad": {
        "width": "600",
        "height": "350",
        "narrow_breakpoint": "640",
        "narrow_margin": "48",
        "pen_width": "3",
        "ink_color": "#000000",
    },
    "Typed": {
        "font_dir": (_user_data_dir() / "fonts").as_posix(),
        "default_typeface": "Dancing Script",
    },
    "Export": {
        "output_dir": (Path.home() / "Downloads").as_posix(),
        "size_measurement": "estimate",
    },
    "Advisory": {
        "api_key": "",
        "model": "gemini-3-flash-preview",
        "endpoint": "https://generativelanguage.googleapis.com/v1beta/models",
        "timeout": "20",
    },
}


# --------------------------------------------------------------------------- #
#  Datamodels
# --------------------------------------------------------------------------- #

@dataclass
class GeneralConfig:
    app_name: str = "SignEase"
    version: str = ""


@dataclass
class DatabaseConfig:
    logging: Path


@dataclass
class PadConfig:
    width: int = 600
    height: int = 350
    narrow_breakpoint: int = 640
    narrow_margin: int = 48
    pen_width: int = 3
    ink_color: str = "#000000"


@dataclass
class TypedConfig:
    font_dir: Path
    default_typeface: str = "Dancing Script"


@dataclass
class ExportConfig:
    output_dir: Path
    size_measurement: str = "estimate"


@dataclass
class AdvisoryConfig:
    api_key: str = ""
    model: str = "gemini-3-flash-preview"
    endpoint: str = ""
    timeout: float = 20.0


# --------------------------------------------------------------------------- #
#  Helpers
# --------------------------------------------------------------------------- #

def _cp_to_dict(cp: configparser.ConfigParser) -> Dict[str, Dict[str, Any]]:
    data: Dict[str, Dict[str, Any]] = {}
    for section in cp.sections():
        data[section] = {k: v for k, v in cp.items(section)}
    return data


def _read_ini(path: Path) -> Dict[str, Dict[str, Any]]:
    cp = configparser.ConfigParser(interpolation=None)
    cp.read(path, encoding="utf-8")
    return _cp_to_dict(cp)


def _apply(target: Dict[str, Dict[str, Any]], source: Dict[str, Dict[str, Any]],
           layer: str, origin: str,
           sources: Dict[Tuple[str, str], Dict[str, str]]) -> None:
    for section, items in source.items():
        sec = target.setdefault(section, {})
        for key, value in items.items():
            sec[key] = value
            sources[(section, key)] = {"layer": layer, "source": origin}


def _cast(value: Any, typ: Any) -> Any:
    # dataclass field types are strings under postponed annotations
    typ = {"Path": Path, "bool": bool, "int": int, "float": float, "str": str}.get(typ, typ)
    if typ is Path:
        return Path(str(value)).expanduser()
    if typ is bool:
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in {"1", "true", "yes", "on"}
    if typ is int:
        return int(value)
    if typ is float:
        return float(value)
    return typ(value)


def _build_dataclass(cls: type, data: Dict[str, Any]) -> Any:
    kwargs = {}
    for field in fields(cls):
        val = data.get(field.name, field.default)
        kwargs[field.name] = _cast(val, field.type)
    return cls(**kwargs)


def _env_overlays() -> Dict[str, Dict[str, Any]]:
    result: Dict[str, Dict[str, Any]] = {}
    for env_key, value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue
        remainder = env_key[len(ENV_PREFIX):]
        parts = remainder.split("__", 1)
        if len(parts) != 2:
            continue
        section, key = parts
        section = section.title()
        key = key.lower()
        result.setdefault(section, {})[key] = value
    return result


# --------------------------------------------------------------------------- #
#  ConfigService
# --------------------------------------------------------------------------- #


class ConfigService:
    """Facade merging layered configuration with type safety."""

    def __init__(self) -> None:
        self._lock = RLock()
        self.reload()

    # ------------------------------------------------------------------ #
    def reload(self) -> None:
        with self._lock:
            merged: Dict[str, Dict[str, Any]] = {}
            sources: Dict[Tuple[str, str], Dict[str, str]] = {}

            # Layer 0: embedded defaults
            _apply(merged, _DEFAULTS, "code", "embedded", sources)

            # Layer 1: defaults.ini
            if DEFAULTS_INI.exists():
                _apply(merged, _read_ini(DEFAULTS_INI), "defaults.ini", str(DEFAULTS_INI), sources)

            # Layer 2: environment variables
            _apply(merged, _env_overlays(), "env", "os.environ", sources)

            # Layer 3: machine config
            if MACHINE_INI.exists():
                _apply(merged, _read_ini(MACHINE_INI), "machine", str(MACHINE_INI), sources)

            # Layer 4: user overrides
            user_ini = _user_config_path()
            if user_ini.exists():
                _apply(merged, _read_ini(user_ini), "user", str(user_ini), sources)

            self._merged = merged
            self._sources = sources

            self.general = _build_dataclass(GeneralConfig, merged.get("General", {}))
            self.database = _build_dataclass(DatabaseConfig, merged.get("Database", {}))
            self.pad = _build_dataclass(PadConfig, merged.get("Pad", {}))
            self.typed = _build_dataclass(TypedConfig, merged.get("Typed", {}))
            self.export = _build_dataclass(ExportConfig, merged.get("Export", {}))
            self.advisory = _build_dataclass(AdvisoryConfig, merged.get("Advisory", {}))

    # ------------------------------------------------------------------ #
    def get(self, section: str, key: str, *, cast: Callable[[Any], Any] | type = str) -> Any:
        val = self._merged.get(section, {}).get(key)
        if val is None:
            return None
        if isinstance(cast, type):
            return _cast(val, cast)
        return cast(val)

    def meta_source(self, section: str, key: str) -> Dict[str, str] | None:
        return self._sources.get((section, key))


# Global singleton
config_service = ConfigService()
