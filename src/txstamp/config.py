"""YAML configuration loading for txstamp."""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from txstamp.constants import (
    DEFAULT_CHAIN_ID,
    ETHEREUM_OFFSET,
    ETHEREUM_SCHEME_NAME,
    MAX_OFFSET,
    SCHEME_NAME,
    SCHEME_OFFSET,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SchemeConfig:
    """Domain-separation literal and recovery-id offset for one scheme.

    Passed explicitly to Signer and Verifier so that several schemes can
    coexist in one process.
    """

    name: str = SCHEME_NAME
    offset: int = SCHEME_OFFSET

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise ValueError("Scheme name must be a non-empty string")
        if isinstance(self.offset, bool) or not isinstance(self.offset, int):
            raise ValueError(f"Scheme offset must be an integer, got {self.offset!r}")
        if not 0 <= self.offset <= MAX_OFFSET:
            raise ValueError(f"Scheme offset out of range: {self.offset} (0..{MAX_OFFSET})")


DEFAULT_SCHEME = SchemeConfig()
ETHEREUM_SCHEME = SchemeConfig(name=ETHEREUM_SCHEME_NAME, offset=ETHEREUM_OFFSET)


@dataclass
class TxStampConfig:
    scheme: SchemeConfig = field(default_factory=SchemeConfig)
    chain_id: int = DEFAULT_CHAIN_ID
    log_level: str = "INFO"


def load_config(path: Path) -> TxStampConfig:
    """Load configuration from a YAML file."""
    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    config = TxStampConfig()

    if "scheme" in raw:
        s = raw["scheme"] or {}
        config.scheme = SchemeConfig(
            name=s.get("name", SCHEME_NAME),
            offset=s.get("offset", SCHEME_OFFSET),
        )

    config.chain_id = raw.get("chain_id", DEFAULT_CHAIN_ID)
    config.log_level = raw.get("log_level", "INFO")
    logger.debug("Loaded config from %s: scheme=%s offset=%d",
                 path, config.scheme.name, config.scheme.offset)
    return config


def get_scheme(config: TxStampConfig) -> SchemeConfig:
    """Resolve the signing scheme from config."""
    return config.scheme or DEFAULT_SCHEME
