"""Incremental MD5 built on `compress` from `md5_compress.py`.

This module provides:

- `MD5Context`: the streaming state (registers, 64-byte cache, byte count).
- `md5_init()`, `md5_update(ctx, data)`, `md5_finalize(ctx)`: the functional
  surface over `MD5Context`.
- `md5(data) -> bytes`: digest of a buffer that is fully available.
- `md5_format(digest) -> str`: 32 lowercase hex characters.

Typical use:

    ctx = md5_init()
    for chunk in chunks:
        md5_update(ctx, chunk)
    digest = md5_finalize(ctx)

Chunk boundaries never affect the digest.
"""

from __future__ import annotations

from typing import Optional, Tuple

from md5_compress import BLOCK_SIZE, MASK32, compress


MD5_SIZE = 16

# 32 hex characters plus a terminator slot.
MD5_SIZE_FORMATTED = 33

MASK64 = 0xFFFFFFFFFFFFFFFF

# Offset of the 8-byte length field in the final block.
LENGTH_OFFSET = BLOCK_SIZE - 8

# Initial chaining value, RFC 1321 section 3.3.
_IV: Tuple[int, int, int, int] = (
    0x67452301,
    0xEFCDAB89,
    0x98BADCFE,
    0x10325476,
)

_HEX_DIGITS = "0123456789abcdef"


def _zero_fill(buf: bytearray, start: int, end: int) -> None:
    """Clear `buf[start:end]` in place."""
    if end > start:
        buf[start:end] = bytes(end - start)


def _as_byte_view(data, size: Optional[int]) -> memoryview:
    """Validate an update argument and return a flat byte view of it.

    `size`, when given, is the number of leading bytes of `data` to consume.
    """
    if size is not None and size < 0:
        raise ValueError(f"size must be non-negative, got {size}")

    if data is None:
        if size:
            raise ValueError(f"data is None but size is {size}")
        return memoryview(b"")

    if isinstance(data, str):
        raise TypeError("Strings must be encoded before hashing")

    view = memoryview(data).cast("B")
    if size is None:
        return view
    if size > len(view):
        raise ValueError(
            f"size {size} exceeds the {len(view)} bytes of data supplied"
        )
    return view[:size]


def encode_bit_length(size: int) -> bytes:
    """Encode the message length field for a message of `size` bytes.

    The bit count is taken modulo 2**64 and written as two little-endian
    32-bit halves, low half first.
    """
    bits = (size << 3) & MASK64
    lo = bits & MASK32
    hi = bits >> 32
    return lo.to_bytes(4, byteorder="little") + hi.to_bytes(4, byteorder="little")


def encode_digest(state: Tuple[int, int, int, int]) -> bytes:
    """Serialize the final chaining value into the 16-byte digest."""
    return b"".join((word & MASK32).to_bytes(4, byteorder="little") for word in state)


class MD5Context:
    """Running MD5 computation.

    A context is consumed by `finalize`; after that both `update` and
    `finalize` raise ValueError. Contexts are not thread-safe.
    """

    def __init__(self) -> None:
        self.a, self.b, self.c, self.d = _IV
        self.size = 0
        self.cache = bytearray(BLOCK_SIZE)
        self.cache_len = 0
        self._finalized = False

    @property
    def state(self) -> Tuple[int, int, int, int]:
        return self.a, self.b, self.c, self.d

    @property
    def finalized(self) -> bool:
        return self._finalized

    def _process_block(self, block) -> None:
        self.a, self.b, self.c, self.d = compress(self.state, block)

    def _flush_cache(self) -> None:
        self._process_block(self.cache)
        self.cache_len = 0

    def _check_live(self) -> None:
        if self._finalized:
            raise ValueError(
                "MD5 context already finalized; start a new one with md5_init()"
            )

    def update(self, data, size: Optional[int] = None) -> None:
        """Append `data` (or its first `size` bytes) to the message."""
        self._check_live()
        view = _as_byte_view(data, size)
        total = len(view)

        offset = 0
        while offset < total:
            remaining = total - offset
            if self.cache_len == 0 and remaining > BLOCK_SIZE:
                # Nothing cached: compress straight from the caller's buffer.
                self._process_block(view[offset : offset + BLOCK_SIZE])
                offset += BLOCK_SIZE
                continue

            count = min(remaining, BLOCK_SIZE - self.cache_len)
            self.cache[self.cache_len : self.cache_len + count] = view[
                offset : offset + count
            ]
            self.cache_len += count
            offset += count

            if self.cache_len == BLOCK_SIZE:
                self._flush_cache()

        self.size = (self.size + total) & MASK64

    def finalize(self) -> bytes:
        """Apply MD5 padding and return the 16-byte digest.

        The context is spent afterwards.
        """
        self._check_live()

        # Cannot happen through update(), which flushes a full cache at once.
        if self.cache_len == BLOCK_SIZE:
            self._flush_cache()

        self.cache[self.cache_len] = 0x80
        self.cache_len += 1

        # No room left for the length field: pad out this block first.
        if BLOCK_SIZE - self.cache_len < 8:
            _zero_fill(self.cache, self.cache_len, BLOCK_SIZE)
            self._flush_cache()

        _zero_fill(self.cache, self.cache_len, LENGTH_OFFSET)
        self.cache[LENGTH_OFFSET:BLOCK_SIZE] = encode_bit_length(self.size)
        self._flush_cache()

        self._finalized = True
        return encode_digest(self.state)


#
# Functional surface
#

def md5_init() -> MD5Context:
    """Return a fresh context holding the RFC 1321 initial state."""
    return MD5Context()


def md5_update(ctx: MD5Context, data, size: Optional[int] = None) -> None:
    """Feed `data` into `ctx`. See `MD5Context.update`."""
    ctx.update(data, size)


def md5_finalize(ctx: MD5Context) -> bytes:
    """Finish `ctx` and return its digest. See `MD5Context.finalize`."""
    return ctx.finalize()


def md5(data) -> bytes:
    """Compute the MD5 digest of `data` in one call."""
    ctx = md5_init()
    md5_update(ctx, data)
    return md5_finalize(ctx)


def md5_format(digest: bytes, capacity: int = MD5_SIZE_FORMATTED) -> str:
    """Render a 16-byte digest as 32 lowercase hex characters.

    `capacity` is the size of the destination the text is meant for, counting
    one slot for a terminator. When it is smaller than `MD5_SIZE_FORMATTED`
    nothing fits and the empty string is returned.
    """
    if len(digest) != MD5_SIZE:
        raise ValueError(f"Expected {MD5_SIZE}-byte digest, got {len(digest)}")

    if capacity < MD5_SIZE_FORMATTED:
        return ""

    chars = []
    for byte in digest:
        chars.append(_HEX_DIGITS[(byte & 0xF0) >> 4])
        chars.append(_HEX_DIGITS[byte & 0x0F])
    return "".join(chars)


def md5_hex(data) -> str:
    """Convenience helper to return the MD5 hex digest of `data`."""
    return md5_format(md5(data))
