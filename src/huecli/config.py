from __future__ import annotations

import dataclasses
import json
import os
from typing import Any, Dict, Mapping, Optional

from .errors import ConfigError

DEFAULT_CONFIG_PATH = os.path.join(os.path.expanduser("~"), ".hue.json")


def _env_default(name: str, default: str) -> str:
    return os.environ.get(name, default)


def load_config(path: str, explicit: bool = False) -> Dict[str, Any]:
    """Read the JSON config document at ``path``.

    A missing file is an empty config unless the path was asked for
    explicitly with ``-c``.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        if explicit:
            raise ConfigError(f"failed to read config {path}: no such file") from None
        return {}
    except (OSError, ValueError) as e:
        raise ConfigError(f"failed to read config {path}: {e}") from None
    if not isinstance(data, dict):
        raise ConfigError(f"failed to read config {path}: expected a JSON object")
    return data


def merge_config(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = dict(base)
    for k, v in overrides.items():
        if isinstance(v, Mapping) and isinstance(out.get(k), Mapping):
            out[k] = merge_config(out[k], v)
        else:
            out[k] = v
    return out


def save_config(path: str, document: Mapping[str, Any]) -> None:
    try:
        with open(path, "w", encoding="utf-8") as f:
            f.write(json.dumps(document, indent=2) + "\n")
    except OSError as e:
        raise ConfigError(f"failed to write config {path}: {e}") from None


@dataclasses.dataclass(frozen=True)
class Config:
    path: str
    document: Mapping[str, Any] = dataclasses.field(default_factory=dict)
    # the on-disk document, without -H and friends
    stored: Mapping[str, Any] = dataclasses.field(default_factory=dict)

    @property
    def host(self) -> Optional[str]:
        return self.document.get("host") or None

    @property
    def username(self) -> Optional[str]:
        return self.document.get("username") or None

    @property
    def colors(self) -> Mapping[str, str]:
        return self.document.get("colors") or {}

    @property
    def alias(self) -> Mapping[str, str]:
        return self.document.get("alias") or {}

    def exists(self) -> bool:
        return os.path.isfile(self.path)

    def with_alias(self, name: str, ids: str) -> "Config":
        stored = merge_config(self.stored, {"alias": {name: ids}})
        return dataclasses.replace(
            self, document=merge_config(self.document, {"alias": {name: ids}}), stored=stored
        )

    def with_username(self, username: str) -> "Config":
        document = merge_config(self.document, {"username": username})
        return dataclasses.replace(self, document=document, stored=document)


def resolve_config(path: Optional[str], overrides: Optional[Mapping[str, Any]] = None,
                   allow_missing: bool = False) -> Config:
    # register creates the file, so it may name one that does not exist yet
    explicit = path is not None and not allow_missing
    path = path or DEFAULT_CONFIG_PATH
    stored = load_config(path, explicit=explicit)
    return Config(path=path, document=merge_config(stored, overrides or {}), stored=stored)


def default_timeout() -> float:
    try:
        return float(_env_default("HUE_TIMEOUT", "5"))
    except ValueError:
        raise ConfigError("HUE_TIMEOUT must be a number of seconds") from None


def default_log_level() -> str:
    return _env_default("HUE_LOG_LEVEL", "WARNING").upper()
