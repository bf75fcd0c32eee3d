from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional, Tuple

# snake_case attribute -> camelCase JSON key used by SIWE tooling.
_JSON_KEYS = {
    "chain_id": "chainId",
    "issued_at": "issuedAt",
    "expiration_time": "expirationTime",
    "not_before": "notBefore",
    "request_id": "requestId",
}


@dataclass(frozen=True)
class SiweMessage:
    """
    Sign-In with Ethereum (EIP-4361) message fields.

    Only ``statement``, ``resources`` and ``uri`` are read or written when
    capabilities are embedded or verified; every other field is carried
    through untouched. Parsing the EIP-4361 text format and checking the
    signature are left to SIWE libraries.
    """

    domain: str
    address: str
    uri: str
    version: str = "1"
    chain_id: int = 1
    nonce: str = ""
    issued_at: str = ""
    statement: Optional[str] = None
    expiration_time: Optional[str] = None
    not_before: Optional[str] = None
    request_id: Optional[str] = None
    resources: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.resources, tuple):
            object.__setattr__(self, "resources", tuple(self.resources))
        for r in self.resources:
            if not isinstance(r, str):
                raise TypeError("resources must contain only strings")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SiweMessage":
        """Build from JSON; accepts camelCase or snake_case keys."""

        kwargs: Dict[str, Any] = {}
        for f in fields(cls):
            key = _JSON_KEYS.get(f.name, f.name)
            if key in data:
                kwargs[f.name] = data[key]
            elif f.name in data:
                kwargs[f.name] = data[f.name]
        missing = [n for n in ("domain", "address", "uri") if n not in kwargs]
        if missing:
            raise ValueError(f"message is missing required fields: {', '.join(missing)}")
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "resources":
                value = list(value)
            out[_JSON_KEYS.get(f.name, f.name)] = value
        return out
