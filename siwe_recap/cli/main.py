from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, List

from siwe_recap.config import KNOWN_RESOURCE_PREFIXES, RecapConfig, load_config
from siwe_recap.core.capability import Capability
from siwe_recap.core.codec import from_canonical_dict, to_canonical_dict
from siwe_recap.core.exceptions import IncorrectStatement, RecapError
from siwe_recap.core.statement import capability_statement
from siwe_recap.message import SiweMessage
from siwe_recap.translation import build_message, extract_and_verify, from_resource, to_resource

EXIT_OK = 0
EXIT_MISMATCH = 1
EXIT_ERROR = 2


def _read_json(path: str) -> Any:
    """Read a JSON file ('-' reads stdin)."""

    if path == "-":
        return json.load(sys.stdin)
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _print_json(obj: Any) -> None:
    print(json.dumps(obj, indent=2, ensure_ascii=False))


def _config(args: argparse.Namespace) -> RecapConfig:
    if getattr(args, "prefix", None):
        return RecapConfig(resource_prefix=args.prefix)
    return load_config()


def _load_capability(path: str) -> Capability:
    return from_canonical_dict(_read_json(path))


def cmd_encode(args: argparse.Namespace) -> int:
    print(to_resource(_load_capability(args.capabilities), config=_config(args)))
    return EXIT_OK


def cmd_decode(args: argparse.Namespace) -> int:
    _print_json(to_canonical_dict(from_resource(args.resource, config=_config(args))))
    return EXIT_OK


def cmd_statement(args: argparse.Namespace) -> int:
    print(capability_statement(_load_capability(args.capabilities), args.uri))
    return EXIT_OK


def cmd_build(args: argparse.Namespace) -> int:
    message = SiweMessage.from_dict(_read_json(args.message))
    capability = _load_capability(args.capabilities)
    _print_json(build_message(capability, message, config=_config(args)).to_dict())
    return EXIT_OK


def cmd_verify(args: argparse.Namespace) -> int:
    """Verify that a message's statement matches its encoded capabilities.

    Exit codes:
    - 0 verified, or no capabilities present
    - 1 statement mismatch
    - 2 malformed input

    """

    message = SiweMessage.from_dict(_read_json(args.message))
    try:
        capability = extract_and_verify(message, config=_config(args))
    except IncorrectStatement as e:
        print(f"error: statement mismatch; expected it to end with: {e.expected}", file=sys.stderr)
        return EXIT_MISMATCH

    if capability is None:
        print("no capabilities")
        return EXIT_OK
    _print_json(to_canonical_dict(capability))
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="siwe-recap", description="Encode and verify SIWE capability delegations"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default WARNING)",
    )
    parser.add_argument(
        "--prefix",
        default=None,
        choices=sorted(KNOWN_RESOURCE_PREFIXES),
        help="Resource prefix (default from SIWE_RECAP_RESOURCE_PREFIX or urn:recap:)",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    enc = sub.add_parser("encode", help="Encode a capability JSON file as a resource URI")
    enc.add_argument("capabilities", help='Path to {"att": ..., "prf": ...} JSON ("-" for stdin)')
    enc.set_defaults(func=cmd_encode)

    dec = sub.add_parser("decode", help="Decode a capability resource URI")
    dec.add_argument("resource", help="Resource URI, e.g. urn:recap:eyJ...")
    dec.set_defaults(func=cmd_decode)

    st = sub.add_parser("statement", help="Render the statement clause for a capability file")
    st.add_argument("capabilities", help="Path to capability JSON")
    st.add_argument("--uri", required=True, help="Delegee URI shown in the statement")
    st.set_defaults(func=cmd_statement)

    bd = sub.add_parser("build", help="Apply a capability file to a SIWE message JSON")
    bd.add_argument("message", help="Path to SIWE message JSON")
    bd.add_argument("capabilities", help="Path to capability JSON")
    bd.set_defaults(func=cmd_build)

    vf = sub.add_parser("verify", help="Verify a SIWE message JSON's capability statement")
    vf.add_argument("message", help="Path to SIWE message JSON")
    vf.set_defaults(func=cmd_verify)

    return parser


def main(argv: List[str] | None = None) -> int:
    """CLI entry."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")
    try:
        return int(args.func(args))
    except (RecapError, ValueError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
