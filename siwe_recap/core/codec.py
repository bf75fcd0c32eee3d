"""Canonical encode/decode of a Capability.

Wire form: base64url (no padding) of compact UTF-8 JSON

    {"att": {<target>: {<namespace/name>: [<notabene>, ...]}}, "prf": [<cid>, ...]}

with targets in URI order, abilities in Ability order, NotaBene keys sorted
and proofs in canonical CID text order. The same Capability therefore always
encodes to the same string.
"""

from __future__ import annotations

import base64
import binascii
import json
import re
from typing import Any, Dict, List

from pydantic import BaseModel, ValidationError

from siwe_recap.utils.json_safe import NotJsonable, canonical_json_bytes, to_canonical

from .capability import Capability
from .exceptions import (
    Base64DecodeError,
    DeserializationError,
    RecapError,
    SerializationError,
)
from .proofs import proof_text

ATTENUATIONS_FIELD = "att"
PROOFS_FIELD = "prf"

_B64URL_RE = re.compile(r"^[A-Za-z0-9_-]*$")


class CapabilityPayload(BaseModel):
    """Shape of the decoded JSON payload (keys still unvalidated text)."""

    att: Dict[str, Dict[str, List[Dict[str, Any]]]]
    prf: List[str]


def to_canonical_dict(capability: Capability) -> Dict[str, Any]:
    """Plain-JSON view of a Capability in canonical order."""

    try:
        att = {
            str(target): {
                str(ability): [to_canonical(nb) for nb in nbs] for ability, nbs in abilities.items()
            }
            for target, abilities in capability.attenuations.items()
        }
    except NotJsonable as e:
        raise SerializationError(f"failed to serialize capability: {e}") from e
    return {ATTENUATIONS_FIELD: att, PROOFS_FIELD: [proof_text(p) for p in capability.proofs]}


def from_canonical_dict(data: Any) -> Capability:
    """Validate a plain-JSON payload and build the Capability it describes."""

    try:
        payload = CapabilityPayload.model_validate(data)
    except ValidationError as e:
        raise DeserializationError(f"failed to deserialize capability: {e}") from e

    try:
        return Capability(attenuations=payload.att, proofs=tuple(payload.prf))
    except RecapError as e:
        raise DeserializationError(f"failed to deserialize capability: {e}") from e


def encode(capability: Capability) -> str:
    """Serialize to canonical JSON, then base64url without padding."""

    try:
        raw = canonical_json_bytes(to_canonical_dict(capability))
    except (TypeError, ValueError) as e:
        raise SerializationError(f"failed to serialize capability: {e}") from e
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _b64url_decode(encoded: str) -> bytes:
    if not isinstance(encoded, str) or not _B64URL_RE.match(encoded):
        raise Base64DecodeError("invalid character in base64url payload")
    if len(encoded) % 4 == 1:
        raise Base64DecodeError("invalid base64url payload length")
    try:
        return base64.b64decode(encoded + "=" * (-len(encoded) % 4), altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as e:
        raise Base64DecodeError(f"failed to decode base64 capability resource: {e}") from e


def decode(encoded: str) -> Capability:
    """Inverse of ``encode``.

    Security notes:
    - Each failure class is distinct: base64, JSON/shape, key grammar.
    - Invalid targets, abilities and proofs are rejected, never skipped.

    """

    raw = _b64url_decode(encoded)
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DeserializationError(f"failed to deserialize capability from json: {e}") from e
    return from_canonical_dict(data)
