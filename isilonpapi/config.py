"""Connection settings for an appliance.

Settings come from explicit arguments, the ``ISILON_*`` environment variables
or a YAML file of named profiles::

    default:
      endpoint: https://cluster.example.com:8080
      username: admin
      password: secret
      insecure: true
    lab:
      endpoint: https://10.0.0.5:8080
      username: root
      password: a
      volumes_path: /ifs/data/volumes
"""
import os
import re
from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional

import yaml

from isilonpapi.const import (
    ENV_DEBUG,
    ENV_ENDPOINT,
    ENV_GROUP,
    ENV_INSECURE,
    ENV_PASSWORD,
    ENV_TIMEOUT,
    ENV_USERNAME,
    ENV_VOLUMES_PATH,
)
from isilonpapi.exceptions import ClientConfigError

USER_ISILON_DIR = os.path.join(os.path.expanduser("~"), ".isilonpapi")
DEFAULT_CONFIG_PATH = os.path.join(USER_ISILON_DIR, "config.yaml")

_TRUE = {"1", "t", "true", "y", "yes", "on"}
_SECONDS_RE = re.compile(r"\d+(?:\.\d+)?")
_DURATION_RE = re.compile(r"(?:\d+(?:\.\d+)?(?:ms|h|m|s))+")
_DURATION_PART_RE = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUE


def parse_timeout(value: Any) -> Optional[float]:
    """Parse ``30``, ``2.5``, ``500ms``, ``30s``, ``5m``, ``1h`` or ``1m30s`` into seconds.

    Anything else, including zero, means "no timeout override".
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if value > 0 else None
    text = str(value).strip()
    if _SECONDS_RE.fullmatch(text):
        seconds = float(text)
    elif _DURATION_RE.fullmatch(text):
        seconds = sum(float(n) * _DURATION_UNITS[unit] for n, unit in _DURATION_PART_RE.findall(text))
    else:
        return None
    return seconds if seconds > 0 else None


@dataclass
class Settings:
    """Everything needed to build an :class:`~isilonpapi.client.IsilonClient`."""

    endpoint: str = ""
    username: str = ""
    password: str = ""
    group: str = ""
    volumes_path: str = ""
    insecure: bool = False
    timeout: Optional[float] = None
    debug: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            endpoint=env.get(ENV_ENDPOINT, ""),
            username=env.get(ENV_USERNAME, ""),
            password=env.get(ENV_PASSWORD, ""),
            group=env.get(ENV_GROUP, ""),
            volumes_path=env.get(ENV_VOLUMES_PATH, ""),
            insecure=parse_bool(env.get(ENV_INSECURE)),
            timeout=parse_timeout(env.get(ENV_TIMEOUT)),
            debug=parse_bool(env.get(ENV_DEBUG)),
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Settings":
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        if "insecure" in values:
            values["insecure"] = parse_bool(values["insecure"])
        if "debug" in values:
            values["debug"] = parse_bool(values["debug"])
        if "timeout" in values:
            values["timeout"] = parse_timeout(values["timeout"])
        for key in ("endpoint", "username", "password", "group", "volumes_path"):
            if key in values:
                values[key] = "" if values[key] is None else str(values[key])
        return cls(**values)

    @classmethod
    def from_file(cls, path: str, profile: str = "default") -> "Settings":
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise ClientConfigError(f"cannot read config file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ClientConfigError(f"invalid config file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ClientConfigError(f"config file {path} must hold a mapping of profiles")
        section = data.get(profile)
        if not isinstance(section, dict):
            raise ClientConfigError(f"profile {profile!r} not found in {path}")
        return cls.from_mapping(section)

    def merge(self, other: "Settings") -> "Settings":
        """Return a copy where every non-empty field of ``other`` wins."""
        overrides = {}
        for f in fields(self):
            value = getattr(other, f.name)
            if value not in (None, "", False):
                overrides[f.name] = value
        return replace(self, **overrides)
