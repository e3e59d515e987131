"""String hash primitives and the leaf serialization shared by prover and verifier.

Digests are rendered as lowercase hex strings. Internal Merkle nodes hash the
concatenation of two such strings, so the rendering must be identical on the
construction side and the verification side.
"""

import hashlib
from typing import Callable

from stark_primitives.field import FieldElement

# --- Type Aliases ---

HashFunction = Callable[[str], str]
Digest = str

# --- Hash Functions ---

_HASH_CONSTRUCTORS = {
    "sha256": hashlib.sha256,
    "sha3_256": hashlib.sha3_256,
    "blake2b": hashlib.blake2b,
    "blake2s": hashlib.blake2s,
}


def sha256_hex(data: str) -> Digest:
    """SHA-256 of the UTF-8 encoding of `data`, as lowercase hex."""
    return hashlib.sha256(data.encode()).hexdigest()


def get_hash_function(name: str) -> HashFunction:
    """Resolve a hash name to a `str -> hex str` function.

    Args:
        name: One of "sha256", "sha3_256", "blake2b", "blake2s"

    Raises:
        ValueError: If the name is not supported
    """
    if name == "sha256":
        return sha256_hex
    try:
        constructor = _HASH_CONSTRUCTORS[name]
    except KeyError:
        raise ValueError(
            f"unsupported hash function {name!r}, expected one of {sorted(_HASH_CONSTRUCTORS)}"
        ) from None

    def _hex_digest(data: str) -> Digest:
        return constructor(data.encode()).hexdigest()

    _hex_digest.__name__ = f"{name}_hex"
    return _hex_digest


# --- Leaf Serialization ---


def serialize_leaf(value) -> str:
    """Decimal form of a leaf's field residue, without leading zeros.

    Plain ints are reduced into the field first, so `serialize_leaf(p + 3)`
    and `serialize_leaf(FieldElement(3))` agree.
    """
    if not isinstance(value, FieldElement):
        value = FieldElement(value)
    return str(value.value)
