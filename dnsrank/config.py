"""YAML configuration file loading."""

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional, Union

import yaml

from .models import Endpoint, Transport

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".dnsrank"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.yaml"


class ConfigError(Exception):
    """Raised when a configuration file is malformed or out of range."""


def _is_int(value: object) -> bool:
    # YAML booleans load as bool, which is an int subclass
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass
class RankerConfig:
    """
    Top-level configuration for a dnsrank run.

    Every field has a default so the tool works without a config file.

    Attributes:
        concurrency: Maximum endpoints probed at the same time (>= 1).
        attempts_per_endpoint: Probe attempts per endpoint (>= 1).
        top_k: Size of the recommended subset (>= 0).
        timeout: Per-attempt timeout in seconds.
        domains: Domains queried by the DNS probe, rotated per attempt.
        transport: ``"udp"`` or ``"tcp"``.
        resolvers: Built-in resolver names to test (empty for all).
        custom_resolvers: Extra endpoints, each a mapping with
            ``address`` and optional ``name`` / ``region``.
    """

    concurrency: int = 10
    attempts_per_endpoint: int = 3
    top_k: int = 3
    timeout: float = 2.0
    domains: list[str] = field(default_factory=list)
    transport: str = "udp"
    resolvers: list[str] = field(default_factory=list)
    custom_resolvers: list[dict] = field(default_factory=list)

    def validate(self) -> "RankerConfig":
        """
        Check value types and ranges.

        Raises:
            ConfigError: If any value is out of range.
        """
        if not _is_int(self.concurrency) or self.concurrency < 1:
            raise ConfigError(f"concurrency must be an integer >= 1, got {self.concurrency!r}")
        if not _is_int(self.attempts_per_endpoint) or self.attempts_per_endpoint < 1:
            raise ConfigError(
                f"attempts_per_endpoint must be an integer >= 1, "
                f"got {self.attempts_per_endpoint!r}"
            )
        if not _is_int(self.top_k) or self.top_k < 0:
            raise ConfigError(f"top_k must be an integer >= 0, got {self.top_k!r}")
        if (
            isinstance(self.timeout, bool)
            or not isinstance(self.timeout, (int, float))
            or self.timeout <= 0
        ):
            raise ConfigError(f"timeout must be a positive number, got {self.timeout!r}")
        if self.transport not in {t.value for t in Transport}:
            raise ConfigError(f"transport must be 'udp' or 'tcp', got {self.transport!r}")
        for key in ("domains", "resolvers"):
            for entry in getattr(self, key):
                if not isinstance(entry, str):
                    raise ConfigError(f"{key} entries must be strings, got {entry!r}")
        for entry in self.custom_resolvers:
            if not isinstance(entry, dict) or "address" not in entry:
                raise ConfigError(f"custom_resolvers entries need an 'address': {entry!r}")
        return self

    def custom_endpoints(self) -> list[Endpoint]:
        """Build Endpoints from ``custom_resolvers``."""
        return [
            Endpoint(
                name=str(entry.get("name", "Custom")),
                address=str(entry["address"]),
                region=entry.get("region"),
            )
            for entry in self.custom_resolvers
        ]


# Keys in the YAML file that map to RankerConfig fields.
_YAML_KEYS = {f.name for f in fields(RankerConfig)}


def load_config(path: Union[Path, str, None] = None) -> RankerConfig:
    """
    Load configuration from a YAML file.

    Args:
        path: Explicit path to a YAML config file. If ``None``, the
            default location (``~/.dnsrank/config.yaml``) is tried and
            a default ``RankerConfig`` is returned if it doesn't exist.

    Returns:
        A populated, validated ``RankerConfig`` instance.

    Raises:
        FileNotFoundError: If an explicit *path* was given but doesn't exist.
        ConfigError: If the file contains invalid YAML, has an unexpected
            top-level structure or out-of-range values.
    """
    resolved = _resolve_path(path)

    if resolved is None:
        logger.debug("No config file found; using defaults")
        return RankerConfig()

    logger.debug("Loading config from %s", resolved)
    text = resolved.read_text(encoding="utf-8")

    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {resolved}: {exc}") from exc

    if raw is None:
        # Empty file, all defaults
        return RankerConfig()

    if not isinstance(raw, dict):
        raise ConfigError(
            f"Expected a YAML mapping at the top level in {resolved}, "
            f"got {type(raw).__name__}"
        )

    return _build_config(raw, source=resolved)


def _resolve_path(path: Union[Path, str, None]) -> Optional[Path]:
    """
    Return a concrete ``Path`` to read, or ``None`` if nothing to read.

    Raises:
        FileNotFoundError: If the caller supplied an explicit path that
            doesn't exist on disk.
    """
    if path is not None:
        p = Path(path).expanduser()
        if not p.is_file():
            raise FileNotFoundError(f"Config file not found: {p}")
        return p

    default = DEFAULT_CONFIG_PATH.expanduser()
    if default.is_file():
        return default
    return None


def _build_config(raw: dict, source: Path) -> RankerConfig:
    """Map raw YAML dict to a ``RankerConfig``, ignoring unknown keys."""
    kwargs = {key: raw[key] for key in _YAML_KEYS if key in raw}

    unknown = set(raw) - _YAML_KEYS
    if unknown:
        logger.warning(
            "Ignoring unknown config keys in %s: %s",
            source,
            ", ".join(sorted(map(str, unknown))),
        )

    for key in ("domains", "resolvers", "custom_resolvers"):
        if key in kwargs and not isinstance(kwargs[key], list):
            raise ConfigError(f"{key} must be a list in {source}")

    return RankerConfig(**kwargs).validate()
