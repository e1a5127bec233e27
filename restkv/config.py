import logging
import os
import re
import tomllib
from dataclasses import dataclass, field
from typing import Self, Any

from restkv import __version__
from restkv.errors import ConfigError, UsageError

CONFIG_ENV = "RESTKV_CONFIG"
DEFAULT_CONFIG_PATH = "~/.config/restkv/config.toml"

DEFAULT_HEADERS = {
    "User-Agent": f"restkv/{__version__}",
    "Accept": "*/*",
}

_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}
_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d*)?|\.\d+)\s*(ms|s|m|h)?\s*$")


def parse_duration(value: str | int | float) -> float | None:
    """Seconds from `5`, `2.5s`, `300ms`, `1m` or `1h`. Zero means no timeout."""
    match value:
        case bool():
            raise UsageError(f"invalid duration: {value}")
        case int() | float():
            seconds = float(value)
        case str():
            found = _DURATION_RE.match(value)
            if not found:
                raise UsageError(f"invalid duration: {value}")
            seconds = float(found.group(1)) * _DURATION_UNITS[found.group(2) or "s"]
        case _:
            raise UsageError(f"invalid duration: {value}")
    if seconds < 0:
        raise UsageError(f"invalid duration: {value}")
    return seconds or None


@dataclass(frozen=True)
class ConfigData():
    color: bool = True
    multipart: bool = True
    env_proxy: bool = True
    verify: bool = True
    timeout: float | None = None
    log_level: str = "WARNING"
    headers: dict[str, str] = field(default_factory=dict[str, str])

    @classmethod
    def create(cls, data: dict) -> Self:
        for key in ("color", "multipart", "env_proxy", "verify"):
            match data.get(key, True):
                case bool():
                    pass
                case _:
                    raise ConfigError(f"'{key}' must be a bool")
        match data.get("headers", {}):
            case dict() as headers if all(isinstance(v, str) for v in headers.values()):
                pass
            case _:
                raise ConfigError("'headers' must be a table of strings")
        match data.get("log_level", "WARNING"):
            case str() as level if level.upper() in logging.getLevelNamesMapping():
                pass
            case _:
                raise ConfigError("'log_level' must be a logging level name")
        try:
            timeout = parse_duration(data.get("timeout", 0))
        except UsageError as e:
            raise ConfigError(f"'timeout': {e}") from e
        return cls(
            color=data.get("color", True),
            multipart=data.get("multipart", True),
            env_proxy=data.get("env_proxy", True),
            verify=data.get("verify", True),
            timeout=timeout,
            log_level=data.get("log_level", "WARNING").upper(),
            headers=data.get("headers", {}),
        )

    def default_headers(self) -> dict[str, str]:
        return DEFAULT_HEADERS | self.headers


def load_config(path: str | None = None) -> ConfigData:
    explicit = path or os.environ.get(CONFIG_ENV)
    config_path = os.path.expanduser(explicit or DEFAULT_CONFIG_PATH)
    if not explicit and not os.path.exists(config_path):
        return ConfigData()
    data: dict[str, Any]
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"{config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(e.__str__()) from e
    return ConfigData.create(data)
