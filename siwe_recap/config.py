from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import FrozenSet, Optional

log = logging.getLogger("siwe_recap.config")

DEFAULT_RESOURCE_PREFIX = "urn:recap:"

# Prefixes of the deployed protocol versions.
KNOWN_RESOURCE_PREFIXES: FrozenSet[str] = frozenset({"urn:recap:", "urn:capability:"})

ENV_RESOURCE_PREFIX = "SIWE_RECAP_RESOURCE_PREFIX"


@dataclass(frozen=True, slots=True)
class RecapConfig:
    """Deployment settings shared by embedding and extraction.

    Security notes:
    - Embedding and extraction must use the same prefix, or capabilities
      silently disappear on the verifying side.

    """

    resource_prefix: str = DEFAULT_RESOURCE_PREFIX

    def __post_init__(self) -> None:
        if self.resource_prefix not in KNOWN_RESOURCE_PREFIXES:
            raise ValueError(f"unknown resource prefix: {self.resource_prefix!r}")


def load_config(environ: Optional[dict] = None) -> RecapConfig:
    """Load configuration from environment variables.

    - SIWE_RECAP_RESOURCE_PREFIX (default urn:recap:)

    Unknown prefixes are ignored in favour of the default (fail closed).
    """

    env = os.environ if environ is None else environ
    raw = (env.get(ENV_RESOURCE_PREFIX) or "").strip()
    if not raw:
        return RecapConfig()
    if raw not in KNOWN_RESOURCE_PREFIXES:
        log.warning("ignoring unknown %s=%r", ENV_RESOURCE_PREFIX, raw)
        return RecapConfig()
    return RecapConfig(resource_prefix=raw)


DEFAULT_CONFIG = RecapConfig()
