"""Forward MD5 compression (RFC 1321, section 3.4).

Given the current chaining value `(a, b, c, d)` and one 64-byte block, the
block is read as sixteen little-endian words `x[0..15]` and 64 steps are run.
Step `i` uses the round function `fn` of its round, the word `x[word_index(i)]`,
the additive constant `K_VALUES[i]` and the rotation `shift_amount(i)`:

    a' = b + ((a + fn(b, c, d) + x[j] + k) <<< s)

after which the registers rotate roles:

    (a, b, c, d) <- (d, a', b, c)

The four working registers left after step 63 are added into the incoming
chaining value to produce the next one.

All additions are performed modulo 2**32, as in MD5.
"""

from __future__ import annotations

from typing import Callable, List, Sequence, Tuple


MASK32 = 0xFFFFFFFF

BLOCK_SIZE = 64

# K[i] = floor(2**32 * abs(sin(i + 1))), RFC 1321 section 3.4.
K_VALUES: Tuple[int, ...] = (
    # Round 1
    0xD76AA478, 0xE8C7B756, 0x242070DB, 0xC1BDCEEE,
    0xF57C0FAF, 0x4787C62A, 0xA8304613, 0xFD469501,
    0x698098D8, 0x8B44F7AF, 0xFFFF5BB1, 0x895CD7BE,
    0x6B901122, 0xFD987193, 0xA679438E, 0x49B40821,
    # Round 2
    0xF61E2562, 0xC040B340, 0x265E5A51, 0xE9B6C7AA,
    0xD62F105D, 0x02441453, 0xD8A1E681, 0xE7D3FBC8,
    0x21E1CDE6, 0xC33707D6, 0xF4D50D87, 0x455A14ED,
    0xA9E3E905, 0xFCEFA3F8, 0x676F02D9, 0x8D2A4C8A,
    # Round 3
    0xFFFA3942, 0x8771F681, 0x6D9D6122, 0xFDE5380C,
    0xA4BEEA44, 0x4BDECFA9, 0xF6BB4B60, 0xBEBFBC70,
    0x289B7EC6, 0xEAA127FA, 0xD4EF3085, 0x04881D05,
    0xD9D4D039, 0xE6DB99E5, 0x1FA27CF8, 0xC4AC5665,
    # Round 4
    0xF4292244, 0x432AFF97, 0xAB9423A7, 0xFC93A039,
    0x655B59C3, 0x8F0CCC92, 0xFFEFF47D, 0x85845DD1,
    0x6FA87E4F, 0xFE2CE6E0, 0xA3014314, 0x4E0811A1,
    0xF7537E82, 0xBD3AF235, 0x2AD7D2BB, 0xEB86D391,
)

# Per-round rotation amounts; each row is cycled four times within its round.
S_VALUES: Tuple[Tuple[int, int, int, int], ...] = (
    (7, 12, 17, 22),
    (5, 9, 14, 20),
    (4, 11, 16, 23),
    (6, 10, 15, 21),
)


def _rotl(x: int, n: int) -> int:
    """Left-rotate a 32-bit word `x` by `n` bits."""
    x &= MASK32
    return ((x << n) | (x >> (32 - n))) & MASK32


def _f(x: int, y: int, z: int) -> int:
    return (x & y) | (~x & z)


def _g(x: int, y: int, z: int) -> int:
    return (x & z) | (y & ~z)


def _h(x: int, y: int, z: int) -> int:
    return x ^ y ^ z


def _i(x: int, y: int, z: int) -> int:
    return y ^ (x | (~z & MASK32))


RoundFunction = Callable[[int, int, int], int]

ROUND_FUNCTIONS: Tuple[RoundFunction, ...] = (_f, _g, _h, _i)


def word_index(i: int) -> int:
    """Index into the decoded block for step `i` (0..63)."""
    if not 0 <= i < 64:
        raise ValueError(f"step index must be in 0..63, got {i}")
    r = i // 16
    if r == 0:
        return i
    if r == 1:
        return (5 * i + 1) % 16
    if r == 2:
        return (3 * i + 5) % 16
    return (7 * i) % 16


def shift_amount(i: int) -> int:
    """Left-rotation amount for step `i` (0..63)."""
    if not 0 <= i < 64:
        raise ValueError(f"step index must be in 0..63, got {i}")
    return S_VALUES[i // 16][i % 4]


def decode_block(block) -> List[int]:
    """Read a 64-byte block as sixteen little-endian 32-bit words."""
    if len(block) != BLOCK_SIZE:
        raise ValueError(f"Expected {BLOCK_SIZE}-byte block, got {len(block)}")

    return [
        int.from_bytes(block[4 * i : 4 * (i + 1)], byteorder="little")
        for i in range(16)
    ]


def compression(
    a: int,
    b: int,
    c: int,
    d: int,
    x: int,
    s: int,
    k: int,
    fn: RoundFunction,
) -> Tuple[int, int, int, int]:
    """Perform one MD5 step.

    Parameters
    ----------
    a, b, c, d : int
        32-bit words in their current roles.
    x : int
        Message word selected by `word_index` for this step.
    s : int
        Left-rotation amount.
    k : int
        Additive constant `K[i]`.
    fn : callable
        One of `ROUND_FUNCTIONS`.

    Returns
    -------
    (a_next, b_next, c_next, d_next) : tuple[int, ...]
        Registers in their roles for the next step, i.e. `(d, a', b, c)`.
    """
    a &= MASK32
    b &= MASK32
    c &= MASK32
    d &= MASK32

    temp = (a + (fn(b, c, d) & MASK32) + (x & MASK32) + (k & MASK32)) & MASK32
    a_new = (b + _rotl(temp, s)) & MASK32

    return d, a_new, b, c


def compress64(
    a: int,
    b: int,
    c: int,
    d: int,
    xs: Sequence[int],
) -> Tuple[int, int, int, int]:
    """Run all 64 MD5 steps over one decoded block.

    Parameters
    ----------
    a, b, c, d : int
        Initial working registers (the current chaining value).
    xs : Sequence[int]
        The sixteen words of the block, as returned by `decode_block`.

    Returns
    -------
    (a, b, c, d) : tuple[int, ...]
        Working registers after step 63, before the feed-forward addition.
    """
    if len(xs) != 16:
        raise ValueError(f"compress64 expects 16 message words, got {len(xs)}")

    a_, b_, c_, d_ = a, b, c, d
    for i in range(64):
        a_, b_, c_, d_ = compression(
            a_,
            b_,
            c_,
            d_,
            xs[word_index(i)],
            shift_amount(i),
            K_VALUES[i],
            ROUND_FUNCTIONS[i // 16],
        )

    # After 64 rotations every register is back in its starting role.
    return a_, b_, c_, d_


def compress(
    state: Tuple[int, int, int, int], block
) -> Tuple[int, int, int, int]:
    """Compress one 64-byte block into the chaining value `state`.

    Returns the new chaining value; `state` and `block` are not modified.
    """
    if len(state) != 4:
        raise ValueError(f"state must hold 4 registers, got {len(state)}")

    xs = decode_block(block)
    a, b, c, d = compress64(*state, xs)

    return (
        (state[0] + a) & MASK32,
        (state[1] + b) & MASK32,
        (state[2] + c) & MASK32,
        (state[3] + d) & MASK32,
    )
