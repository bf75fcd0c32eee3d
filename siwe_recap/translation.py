"""Embed capabilities into, and verify them from, a SIWE message.

Embedding appends ``<prefix><encoded>`` to ``resources`` and the generated
clause to ``statement``. Extraction looks at the last resource only, the
position embedding writes to.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Optional

from siwe_recap.config import DEFAULT_CONFIG, RecapConfig
from siwe_recap.core.capability import Capability
from siwe_recap.core.codec import decode, encode
from siwe_recap.core.exceptions import IncorrectStatement, InvalidResourcePrefix, MissingBody
from siwe_recap.core.statement import capability_statement

log = logging.getLogger("siwe_recap.translation")


def _config(config: Optional[RecapConfig]) -> RecapConfig:
    return DEFAULT_CONFIG if config is None else config


def to_resource(capability: Capability, *, config: Optional[RecapConfig] = None) -> str:
    """Encode a capability as a resource URI."""

    return f"{_config(config).resource_prefix}{encode(capability)}"


def from_resource(resource: str, *, config: Optional[RecapConfig] = None) -> Capability:
    """Decode a resource URI produced by ``to_resource``."""

    prefix = _config(config).resource_prefix
    if not isinstance(resource, str) or not resource.startswith(prefix):
        raise InvalidResourcePrefix(str(resource))
    body = resource[len(prefix) :]
    if not body:
        raise MissingBody(resource)
    return decode(body)


def _replace(message: Any, **changes: Any) -> Any:
    if not dataclasses.is_dataclass(message) or isinstance(message, type):
        raise TypeError("message must be a dataclass instance with statement/resources/uri")
    return dataclasses.replace(message, **changes)


def build_message(
    capability: Capability, message: Any, *, config: Optional[RecapConfig] = None
) -> Any:
    """Return a copy of ``message`` carrying ``capability``.

    Rules
    - An empty capability returns the message unchanged.
    - The generated clause becomes the statement, or follows an existing
      non-empty statement after one space.
    - The encoded resource is appended as the last resource.

    """

    if capability.is_empty():
        return message

    resource = to_resource(capability, config=config)
    generated = capability_statement(capability, message.uri)

    existing = message.statement or ""
    statement = generated if not existing else f"{existing} {generated}"

    resources = list(message.resources) + [resource]
    if isinstance(message.resources, tuple):
        resources = tuple(resources)

    log.debug(
        "embedding capabilities targets=%d proofs=%d", len(capability.attenuations), len(capability.proofs)
    )
    return _replace(message, statement=statement, resources=resources)


def extract_capability(message: Any, *, config: Optional[RecapConfig] = None) -> Optional[Capability]:
    """Decode the capabilities carried by ``message``, without checking the statement.

    Returns None when the last resource does not carry the prefix.
    """

    prefix = _config(config).resource_prefix
    resources = list(message.resources)
    if not resources or not resources[-1].startswith(prefix):
        return None
    return from_resource(resources[-1], config=config)


def extract_and_verify(message: Any, *, config: Optional[RecapConfig] = None) -> Optional[Capability]:
    """Extract the capabilities and check the statement describes them.

    Security notes:
    - No capability resource is not an error (returns None).
    - A present but undecodable resource raises its decode error.
    - The statement must end with the regenerated clause; any signer
      text may precede it.

    """

    capability = extract_capability(message, config=config)
    if capability is None:
        log.debug("no capability resource present")
        return None

    expected = capability_statement(capability, message.uri)
    statement = message.statement
    if statement is None or not statement.endswith(expected):
        log.warning("statement does not match encoded capabilities uri=%s", message.uri)
        raise IncorrectStatement(expected)

    log.debug("statement verified targets=%d", len(capability.attenuations))
    return capability


def verify_statement(message: Any, *, config: Optional[RecapConfig] = None) -> bool:
    """Boolean form of ``extract_and_verify``; decode errors still raise.

    Rules
    - No capabilities and no statement: verified.
    - No capabilities but a statement: not verified.
    - Capabilities: the statement must end with the generated clause.

    """

    if extract_capability(message, config=config) is None:
        return message.statement is None
    try:
        extract_and_verify(message, config=config)
    except IncorrectStatement:
        return False
    return True
