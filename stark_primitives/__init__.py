"""stark_primitives - Prime field arithmetic and Merkle commitments for STARK-style proofs."""

from stark_primitives.field import (
    FF,
    GENERATOR,
    PRIME,
    FieldElement,
    from_ff,
    get_root_of_unity,
    to_ff,
)
from stark_primitives.hashing import (
    Digest,
    HashFunction,
    get_hash_function,
    serialize_leaf,
    sha256_hex,
)
from stark_primitives.merkle_tree import ConstructionError, MerkleTree
from stark_primitives.merkle_verifier import (
    AuthenticationPath,
    Decommitment,
    MerkleConfig,
    MerkleRoot,
    MerkleVerifier,
    verify_decommitment,
)
from stark_primitives.polynomial import Polynomial

__version__ = "0.1.0"
__all__ = [
    # Field
    "FF",
    "PRIME",
    "GENERATOR",
    "FieldElement",
    "get_root_of_unity",
    "to_ff",
    "from_ff",
    # Hashing
    "Digest",
    "HashFunction",
    "sha256_hex",
    "get_hash_function",
    "serialize_leaf",
    # Merkle Tree
    "MerkleTree",
    "MerkleConfig",
    "MerkleRoot",
    "AuthenticationPath",
    "ConstructionError",
    # Verification
    "Decommitment",
    "MerkleVerifier",
    "verify_decommitment",
    # Polynomials
    "Polynomial",
]
