"""HashFort CLI: hash and verify passwords from the shell."""

import argparse
import base64
import getpass
import logging
import sys
from dataclasses import fields

from hashfort.config import HashParameters, Variant
from hashfort.core import encoding
from hashfort.core.hash import PasswordHash
from hashfort.errors import HashFortError

_DEFAULTS = HashParameters.default()


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``hashfort`` console script."""
    parser = argparse.ArgumentParser(prog="hashfort", description="HashFort CLI")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    hash_cmd = sub.add_parser("hash", help="Hash a password with a fresh salt")
    hash_cmd.add_argument(
        "--variant",
        default="id",
        choices=["d", "i", "id"],
        help="Argon2 variant (default: id)",
    )
    for f in fields(HashParameters):
        hash_cmd.add_argument(
            f"--{f.name.replace('_', '-')}",
            dest=f.name,
            type=int,
            default=getattr(_DEFAULTS, f.name),
            help=f"default: {getattr(_DEFAULTS, f.name)}",
        )
    hash_cmd.add_argument(
        "--format",
        default="phc",
        choices=["phc", "hex", "base64"],
        help="phc: self-describing string; hex/base64: raw salt || hash (default: phc)",
    )
    hash_cmd.add_argument("--stdin", action="store_true", help="Read the password from stdin")

    verify_cmd = sub.add_parser("verify", help="Check a password against a PHC hash string")
    verify_cmd.add_argument("encoded", help='PHC string, e.g. "$argon2id$v=19$m=8192,t=40,p=2$..."')
    verify_cmd.add_argument("--stdin", action="store_true", help="Read the password from stdin")

    sub.add_parser("params", help="Show the default hash parameters")

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 1

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        if args.command == "hash":
            return _hash(args)
        if args.command == "verify":
            return _verify(args)
        return _params()
    except HashFortError as exc:
        print(f"error: {exc.code}: {exc.message}", file=sys.stderr)
        return 2


def _read_password(from_stdin: bool) -> bytearray:
    """Read one password. Callers wipe the returned buffer; the intermediate
    ``str`` from getpass or stdin cannot be wiped."""
    if from_stdin:
        line = sys.stdin.readline()
        return bytearray(line.rstrip("\r\n").encode("utf-8"))
    return bytearray(getpass.getpass("Password: ").encode("utf-8"))


def _wipe(buffer: bytearray) -> None:
    buffer[:] = bytes(len(buffer))


def _hash(args: argparse.Namespace) -> int:
    parameters = HashParameters(**{f.name: getattr(args, f.name) for f in fields(HashParameters)})
    variant = Variant.from_name(args.variant)
    password = _read_password(args.stdin)
    try:
        password_hash = PasswordHash.create(password, variant, parameters)
    finally:
        _wipe(password)

    if args.format == "phc":
        print(encoding.encode(password_hash, variant, parameters))
    elif args.format == "hex":
        print(bytes(password_hash).hex())
    else:
        print(base64.b64encode(bytes(password_hash)).decode("ascii"))
    return 0


def _verify(args: argparse.Namespace) -> int:
    stored = encoding.decode(args.encoded)
    password = _read_password(args.stdin)
    try:
        ok = stored.password_hash.verify(password, stored.variant, stored.parameters)
    finally:
        _wipe(password)

    print("OK" if ok else "MISMATCH")
    return 0 if ok else 1


def _params() -> int:
    for f in fields(HashParameters):
        print(f"{f.name}={getattr(_DEFAULTS, f.name)}")
    return 0
