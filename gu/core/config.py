from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Mapping

from .util import read_json, write_json


TOKEN_KEY = "github_token"
TOKEN_ENV = "GITHUB_TOKEN"


class ConfigError(Exception):
    """Raised when the config file exists but cannot be read."""


@dataclass(frozen=True)
class GuConfig:
    github_token: str | None = None


def _clean(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


class ConfigStore:
    """Token storage in a small JSON file.

    Unknown keys in the file are preserved on write.
    """

    def __init__(self, path: str, env: Mapping[str, str] | None = None):
        self.path = path
        self.env = env or {}

    def _read_raw(self) -> dict:
        try:
            data = read_json(self.path)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Corrupted config file {self.path}: {exc}") from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {self.path} must contain a JSON object")
        return data

    def load(self) -> GuConfig:
        data = self._read_raw()
        return GuConfig(github_token=_clean(data.get(TOKEN_KEY)))

    def get_token(self) -> str | None:
        token = self.load().github_token
        if token:
            return token
        return _clean(self.env.get(TOKEN_ENV))

    def stored_token(self) -> str | None:
        return self.load().github_token

    def set_token(self, token: str) -> None:
        data = self._read_raw()
        data[TOKEN_KEY] = token.strip()
        write_json(self.path, data)

    def clear_token(self) -> None:
        data = self._read_raw()
        data.pop(TOKEN_KEY, None)
        write_json(self.path, data)
