"""Command-line front end for `md5.py`.

Usage:
    python md5_cli.py "message"
    python md5_cli.py -f path/to/file [--chunk-size N]
    python md5_cli.py --check [vectors.yaml]

Without flags, the argument is interpreted as a UTF-8 string and hashed.
With `-f`, the file is read in chunks which are fed to the context one at a
time. With `--check`, every vector in the YAML file is hashed and compared
against its expected digest.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Dict, List

import yaml

from md5 import md5_finalize, md5_format, md5_hex, md5_init, md5_update


DEFAULT_VECTORS = Path(__file__).with_name("md5_vectors.yaml")

DEFAULT_CHUNK_SIZE = 4096


def load_vectors(path) -> List[Dict[str, str]]:
    """Load known-answer vectors from a YAML document.

    The document must hold a top-level `vectors` list whose entries each have
    an `input` string and a 32-character hex `digest`.
    """
    with open(path, "r", encoding="utf-8") as f:
        document = yaml.safe_load(f)

    if not isinstance(document, dict) or not isinstance(document.get("vectors"), list):
        raise ValueError(f"{path}: expected a top-level 'vectors' list")

    vectors: List[Dict[str, str]] = []
    for idx, entry in enumerate(document["vectors"]):
        if not isinstance(entry, dict):
            raise ValueError(f"{path}: vector {idx} is not a mapping")
        message = entry.get("input")
        digest = entry.get("digest")
        if not isinstance(message, str):
            raise ValueError(f"{path}: vector {idx} has no string 'input'")
        if not isinstance(digest, str) or len(digest) != 32:
            raise ValueError(f"{path}: vector {idx} needs a 32-character 'digest'")
        vectors.append({"input": message, "digest": digest.lower()})

    return vectors


def hash_file(path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> str:
    """Hash the file at `path`, reading `chunk_size` bytes at a time."""
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    ctx = md5_init()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            md5_update(ctx, chunk)
    return md5_format(md5_finalize(ctx))


def check_vectors(vectors: List[Dict[str, str]]) -> bool:
    """Hash each vector, print one result line per vector, return overall success."""
    all_passed = True
    for vector in vectors:
        digest_hex = md5_hex(vector["input"].encode("utf-8"))
        successful = digest_hex == vector["digest"]
        all_passed = all_passed and successful
        print(
            f"{vector['input']} = {digest_hex} : "
            f"{'success' if successful else 'failed'}"
        )
    return all_passed


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compute MD5 digests (RFC 1321)"
    )
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument(
        "message",
        nargs="?",
        help="UTF-8 string to hash",
    )
    mode.add_argument(
        "-f",
        "--file",
        type=str,
        help="Hash the raw bytes of this file",
    )
    mode.add_argument(
        "--check",
        nargs="?",
        const=str(DEFAULT_VECTORS),
        metavar="VECTORS",
        help=f"Verify known-answer vectors from a YAML file (default: {DEFAULT_VECTORS.name})",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=DEFAULT_CHUNK_SIZE,
        help=f"Bytes per update when hashing a file (default: {DEFAULT_CHUNK_SIZE})",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns the process exit status."""
    if argv is None:
        argv = sys.argv[1:]

    parser = _build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # argparse has already written usage or help text.
        return 1 if e.code else 0

    if args.chunk_size <= 0:
        sys.stderr.write(f"Error: --chunk-size must be positive (got {args.chunk_size})\n")
        return 1

    if args.check is not None:
        try:
            vectors = load_vectors(args.check)
        except (OSError, yaml.YAMLError, ValueError) as e:
            sys.stderr.write(f"Error loading vectors '{args.check}': {e}\n")
            return 1
        return 0 if check_vectors(vectors) else 1

    if args.file is not None:
        try:
            digest_hex = hash_file(args.file, args.chunk_size)
        except OSError as e:
            sys.stderr.write(f"Error reading file '{args.file}': {e}\n")
            return 1
        print(digest_hex)
        return 0

    print(md5_hex(args.message.encode("utf-8")))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
