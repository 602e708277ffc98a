"""Configuration for path resolution."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

#: Environment variable enabling reduced segment lookups.
ENV_MINIMIZE_REQUESTS = "EXPERIMENTAL_SCION_RESOLVER_MINIMIZE_REQUESTS"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _parse_bool(name: str, value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value for {name}: '{value}'")


@dataclass(frozen=True)
class ResolverConfig:
    """Settings consumed by :func:`scionpath.paths.resolver.build_paths`."""

    # Skip core/down lookups when an up segment already contains the
    # destination. Fewer requests, less path variety.
    minimize_requests: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ResolverConfig":
        """Build a config from environment variables.

        Args:
            environ: Mapping to read from; defaults to ``os.environ``.

        Returns:
            Config with defaults for unset variables.

        Raises:
            ValueError: If a variable holds an unrecognized boolean.
        """
        env = os.environ if environ is None else environ
        raw = env.get(ENV_MINIMIZE_REQUESTS)
        if raw is None:
            return cls()
        return cls(minimize_requests=_parse_bool(ENV_MINIMIZE_REQUESTS, raw))


# Global configuration instance
RESOLVER_CONFIG = ResolverConfig()
