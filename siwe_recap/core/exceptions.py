from __future__ import annotations

from typing import Any


class RecapError(Exception):
    """
    Base exception for all capability encoding and verification failures.
    """

    pass


class AbilityError(RecapError, ValueError):
    """
    Raised when an ability string does not follow the namespace/name grammar.
    """

    pass


class InvalidCharacter(AbilityError):
    """
    Raised when an ability namespace or name is empty or contains a
    character outside the allowed set.
    """

    def __init__(self, token: str):
        self.token = token
        super().__init__(f"Invalid Characters: {token}")


class MissingSeparator(AbilityError):
    """
    Raised when an ability string has no '/' separator.
    """

    def __init__(self, value: str = ""):
        self.value = value
        super().__init__("Missing '/' separator")


class InvalidNamespaceUri(RecapError, ValueError):
    """
    Raised when a target is not an absolute URI.
    """

    def __init__(self, uri: Any):
        self.uri = uri
        super().__init__(f"invalid absolute URI: {uri!r}")


class InvalidProof(RecapError, ValueError):
    """
    Raised when a proof cannot be read as a content identifier.
    """

    def __init__(self, proof: Any):
        self.proof = proof
        super().__init__(f"invalid proof CID: {proof!r}")


class ConvertError(RecapError, ValueError):
    """
    Raised by entry points accepting loosely typed input, before any
    value is built.
    """

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"{self.label}: {value!r}")

    label = "Invalid Value"


class InvalidTarget(ConvertError):
    label = "Invalid Target"


class InvalidAction(ConvertError):
    label = "Invalid Action"


class InvalidNotaBene(ConvertError):
    label = "Invalid Nota Bene"


class CodecError(RecapError):
    """
    Base class for canonical encode/decode failures.
    """

    pass


class SerializationError(CodecError):
    """
    Raised when a capability cannot be rendered as canonical JSON.
    """

    pass


class DecodingError(CodecError):
    """
    Base class for failures reading an encoded capability.
    """

    pass


class Base64DecodeError(DecodingError):
    """
    Raised when the payload is not padding-free URL-safe base64.
    """

    pass


class DeserializationError(DecodingError):
    """
    Raised when the decoded payload is not a valid canonical capability.
    """

    pass


class ResourceError(DecodingError):
    """
    Base class for resource framing failures.
    """

    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(self._describe(resource))

    def _describe(self, resource: str) -> str:
        return resource


class InvalidResourcePrefix(ResourceError):
    def _describe(self, resource: str) -> str:
        return f"invalid resource prefix (found: {resource})"


class MissingBody(ResourceError):
    def _describe(self, resource: str) -> str:
        return f"capability resource is missing a body: {resource}"


class VerificationError(RecapError):
    """
    Base class for statement verification failures.
    """

    pass


class IncorrectStatement(VerificationError):
    """
    Raised when the signed statement does not end with the text generated
    from the encoded capabilities.
    """

    def __init__(self, expected: str):
        self.expected = expected
        super().__init__(f"incorrect statement in siwe message, expected to end with: {expected}")
