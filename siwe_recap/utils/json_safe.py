from __future__ import annotations

import json
import math
from typing import Any, Mapping


class NotJsonable(TypeError):
    """Raised when a value has no canonical JSON representation."""


def to_canonical(obj: Any) -> Any:
    """
    Convert an opaque value to its canonical JSON equivalent.

    Rules
    - Object keys must be strings and are emitted in sorted order.
    - Lists and tuples become arrays, order preserved.
    - NaN and infinities are rejected (not valid JSON).
    - Anything else (bytes, sets, arbitrary objects) is rejected rather
      than stringified, so decode(encode(x)) == x holds.

    """
    if obj is None or isinstance(obj, (str, bool, int)):
        return obj

    if isinstance(obj, float):
        if not math.isfinite(obj):
            raise NotJsonable(f"non-finite float: {obj!r}")
        return obj

    if isinstance(obj, Mapping):
        for k in obj:
            if not isinstance(k, str):
                raise NotJsonable(f"object key must be a string: {k!r}")
        return {k: to_canonical(obj[k]) for k in sorted(obj)}

    if isinstance(obj, (list, tuple)):
        return [to_canonical(x) for x in obj]

    raise NotJsonable(f"value is not JSON serializable: {type(obj).__name__}")


def canonical_json_bytes(obj: Any) -> bytes:
    """Compact JSON, UTF-8, with caller-controlled key order.

    Key order of ``obj`` is kept as given; use ``to_canonical`` first for
    values whose order is not already fixed.
    """

    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False, allow_nan=False).encode(
        "utf-8"
    )
