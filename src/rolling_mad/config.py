"""Stream configuration: window size and consistency constant."""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .errors import ConfigurationError
from .statistics import DEFAULT_CCONST

DEFAULT_SETSIZE = 10

# Accepted spellings for each parameter, first match wins.
_ALIASES: Dict[str, tuple[str, ...]] = {
    "setsize": ("setsize", "window_size", "window"),
    "cconst": ("cconst", "consistency_constant"),
}


class MadConfig(BaseModel):
    """Parameters fixed for the lifetime of a stream."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    setsize: int = DEFAULT_SETSIZE
    cconst: float = DEFAULT_CCONST

    @field_validator("setsize", mode="before")
    @classmethod
    def _numeric_setsize(cls, value: Any) -> Any:
        if isinstance(value, (bool, str)):
            raise ValueError(f"Invalid setsize: must be an integer (got {value!r})")
        return value

    @field_validator("setsize")
    @classmethod
    def _positive_setsize(cls, value: int) -> int:
        if value < 1:
            raise ValueError(f"Invalid setsize: must be >= 1 (got {value})")
        return value

    @field_validator("cconst")
    @classmethod
    def _positive_cconst(cls, value: float) -> float:
        if not math.isfinite(value) or value <= 0:
            raise ValueError(f"Invalid cconst: must be a positive finite number (got {value})")
        return float(value)

    @classmethod
    def from_mapping(cls, cfg: Mapping[str, Any] | None) -> "MadConfig":
        cfg = cfg or {}
        if not isinstance(cfg, Mapping):
            raise ConfigurationError("MAD config must be a mapping/object")
        # a nested "mad" section takes precedence over top-level keys
        section = cfg.get("mad") if isinstance(cfg.get("mad"), Mapping) else cfg
        kwargs: Dict[str, Any] = {}
        for name, aliases in _ALIASES.items():
            for alias in aliases:
                if section.get(alias) is not None:
                    kwargs[name] = section[alias]
                    break
        try:
            return cls(**kwargs)
        except ValidationError as exc:
            messages = "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in exc.errors())
            raise ConfigurationError(messages) from exc

    @classmethod
    def from_file(cls, path: str | Path) -> "MadConfig":
        return cls.from_mapping(load_config_file(path))

    def with_overrides(self, **overrides: Any) -> "MadConfig":
        """Return a new config with any non-None overrides applied."""

        merged = self.model_dump()
        merged.update({k: v for k, v in overrides.items() if v is not None})
        return MadConfig.from_mapping(merged)


def load_config_file(path: str | Path) -> Dict[str, Any]:
    """Load a YAML or JSON configuration file into a mapping."""

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        loaded = json.loads(text)
    else:
        loaded = yaml.safe_load(text)
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigurationError("Config file must contain a mapping/object at the top level")
    return loaded


def resolve_config(config: MadConfig | Mapping[str, Any] | None = None, **overrides: Any) -> MadConfig:
    base = config if isinstance(config, MadConfig) else MadConfig.from_mapping(config)
    if any(v is not None for v in overrides.values()):
        return base.with_overrides(**overrides)
    return base
