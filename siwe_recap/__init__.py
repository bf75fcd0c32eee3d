"""Capability delegation (ReCap) for Sign-In with Ethereum messages.

Capabilities are carried twice in a SIWE message: machine-readable, as an
encoded entry in ``resources``, and human-readable, as a generated clause at
the end of ``statement``. Verification regenerates the clause from the
encoded entry and requires the signed statement to end with it.

Security notes:
- The clause text is a protocol constant; any change breaks verification
  against other implementations.
- Absence of a capability resource is not an error; a malformed one is.
"""

from siwe_recap.config import DEFAULT_RESOURCE_PREFIX, RecapConfig, load_config
from siwe_recap.core import (
    Ability,
    AbilityName,
    AbilityNamespace,
    Capability,
    Target,
    capability_statement,
    decode,
    encode,
    proof_for,
)
from siwe_recap.core.exceptions import (
    Base64DecodeError,
    DecodingError,
    DeserializationError,
    IncorrectStatement,
    InvalidAction,
    InvalidCharacter,
    InvalidNamespaceUri,
    InvalidResourcePrefix,
    InvalidTarget,
    MissingBody,
    MissingSeparator,
    RecapError,
    SerializationError,
)
from siwe_recap.message import SiweMessage
from siwe_recap.translation import (
    build_message,
    extract_and_verify,
    extract_capability,
    from_resource,
    to_resource,
    verify_statement,
)

__all__ = [
    "Ability",
    "AbilityName",
    "AbilityNamespace",
    "Capability",
    "Target",
    "SiweMessage",
    "RecapConfig",
    "DEFAULT_RESOURCE_PREFIX",
    "load_config",
    "encode",
    "decode",
    "proof_for",
    "capability_statement",
    "to_resource",
    "from_resource",
    "build_message",
    "extract_capability",
    "extract_and_verify",
    "verify_statement",
    "RecapError",
    "InvalidCharacter",
    "MissingSeparator",
    "InvalidNamespaceUri",
    "InvalidTarget",
    "InvalidAction",
    "Base64DecodeError",
    "SerializationError",
    "DeserializationError",
    "DecodingError",
    "InvalidResourcePrefix",
    "MissingBody",
    "IncorrectStatement",
]
