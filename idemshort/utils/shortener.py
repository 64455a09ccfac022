"""Shortcode encoding utility

This module turns a non-negative integer identifier into a short, deterministic,
non-sequential Base62 shortcode and back.

Functions:
    generate_shortcode(counter, salt='default_salt', length=7, mult=1315423911):
        Encode an identifier as a URL slug.
    decode_shortcode(shortcode, salt='default_salt', length=7, mult=1315423911):
        Recover the identifier from a URL slug.

Classes:
    ShortcodeEncoder:
        Binds salt, length and multiplier once at startup.

Example:
    >>> from idemshort.utils.shortener import ShortcodeEncoder
    >>> encoder = ShortcodeEncoder(salt='my_secret')
    >>> code = encoder.encode(1001)
    >>> encoder.decode(code)
    1001
"""

import math
import string
from dataclasses import dataclass

import xxhash

from idemshort.constants import Defaults


ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits
BASE = len(ALPHABET)  # 26 lowercase + 26 uppercase + 10 digits
INDEX = {character: i for i, character in enumerate(ALPHABET)}


def _validate(salt: str, length: int, mult: int) -> int:
    if not isinstance(salt, str):
        raise TypeError(f'Salt must be of type string (given type: {type(salt)}).')
    if not salt:
        raise ValueError(f'Salt must be a non-empty string (given value: {salt}).')
    if not isinstance(length, int) or length < 1:
        raise ValueError(f'Length must be a positive integer (given value: {length}).')
    modulo_space = BASE**length
    if math.gcd(mult, modulo_space) != 1:
        raise ValueError(f'Multiplicative factor must be coprime with mod ({modulo_space}) (given value: mult={mult}).')
    return modulo_space


def _salt_hash(salt: str) -> int:
    # xxhash 4 rejects str input
    return xxhash.xxh64_intdigest(salt.encode('utf-8'))


def _to_base62(number: int) -> str:
    digits = []
    while number:
        number, remainder = divmod(number, BASE)
        digits.append(ALPHABET[remainder])
    return ''.join(reversed(digits))


def generate_shortcode(
    counter: int,
    salt: str = Defaults.SHORTCODE_SALT,
    length: int = Defaults.SHORTCODE_LENGTH,
    mult: int = Defaults.SHORTCODE_MULT,
) -> str:
    """Generate a short, deterministic URL slug from a counter and salt.

    The low `length` Base62 digits of the counter are scrambled with an affine
    permutation over BASE^length and rendered as exactly `length` symbols,
    most significant first. Whatever does not fit (counter // BASE^length) is
    rendered as a plain Base62 prefix. This gives:
    - 1:1 mapping for every non-negative integer (no wrap-around collisions)
    - Deterministic output for a fixed (salt, length, mult)
    - No visible sequential patterns
    - At least `length` symbols, including for counter 0

    Args:
        counter (int):
            Unique non-negative integer identifying the URL.

        salt (str, optional):
            Secret string used to randomize the output space.
            Highly recommended to set a custom salt.

        length (int, optional):
            Minimum length of the resulting slug. Defaults to 7.

        mult (int, optional):
            Multiplicative factor for the permutation.
            Must be coprime with mod (BASE**length).

    Returns:
        str: Base62 slug of at least `length` characters.

    Raises:
        TypeError: If counter is not an integer or salt is not a string.
        ValueError: If counter is negative, salt is empty or mult is not coprime.

    NOTE:
        - The output is not trivially predictable without knowledge of the salt
          and permutation parameters (this is obfuscation, not encryption).
        - Uses ultra-fast xxhash for hashing the salt.
    """
    if not isinstance(counter, int) or isinstance(counter, bool):
        raise TypeError(f'Counter must be of type integer (given type: {type(counter)}).')
    if counter < 0:
        raise ValueError(f'Counter must be a non-negative integer (given value: {counter}).')
    modulo_space = _validate(salt, length, mult)

    high, low = divmod(counter, modulo_space)
    salt_hash = _salt_hash(salt) % modulo_space
    permuted = (low * mult + salt_hash) % modulo_space

    # Fixed-width block: most significant digit first, padded with the zero symbol
    block = _to_base62(permuted).rjust(length, ALPHABET[0])
    # A non-zero prefix never starts with the zero symbol, so the split is unambiguous
    return _to_base62(high) + block


def decode_shortcode(
    shortcode: str,
    salt: str = Defaults.SHORTCODE_SALT,
    length: int = Defaults.SHORTCODE_LENGTH,
    mult: int = Defaults.SHORTCODE_MULT,
) -> int:
    """Recover the counter encoded by `generate_shortcode()`.

    Raises:
        ValueError: If the slug is too short, has a leading zero prefix, or
                    contains characters outside the Base62 alphabet.
    """
    modulo_space = _validate(salt, length, mult)
    if not isinstance(shortcode, str):
        raise TypeError(f'Shortcode must be of type string (given type: {type(shortcode)}).')
    if len(shortcode) < length:
        raise ValueError(f'Shortcode must have at least {length} characters (given value: {shortcode!r}).')
    if any(character not in INDEX for character in shortcode):
        raise ValueError(f'Shortcode contains non-Base62 characters (given value: {shortcode!r}).')

    prefix, block = shortcode[:-length], shortcode[-length:]
    if prefix.startswith(ALPHABET[0]):
        raise ValueError(f'Shortcode prefix must not start with {ALPHABET[0]!r} (given value: {shortcode!r}).')

    high = 0
    for character in prefix:
        high = high * BASE + INDEX[character]
    permuted = 0
    for character in block:
        permuted = permuted * BASE + INDEX[character]

    salt_hash = _salt_hash(salt) % modulo_space
    low = ((permuted - salt_hash) * pow(mult, -1, modulo_space)) % modulo_space
    return high * modulo_space + low


@dataclass(frozen=True)
class ShortcodeEncoder:
    """Shortcode encoder configured once at startup.

    Validates the configuration eagerly so a bad salt or multiplier fails at
    wiring time, not on the first request.
    """

    salt: str = Defaults.SHORTCODE_SALT
    length: int = Defaults.SHORTCODE_LENGTH
    mult: int = Defaults.SHORTCODE_MULT

    def __post_init__(self):
        _validate(self.salt, self.length, self.mult)

    def encode(self, identifier: int) -> str:
        return generate_shortcode(identifier, salt=self.salt, length=self.length, mult=self.mult)

    def decode(self, shortcode: str) -> int:
        return decode_shortcode(shortcode, salt=self.salt, length=self.length, mult=self.mult)
