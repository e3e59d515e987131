"""Merkle decommitment verification.

Verification is stateless: given a leaf index, the claimed leaf value, its
authentication path and a root, the hash chain is replayed from the leaf up
to the root. A mismatch is reported as False and never raised, since a bad
proof is an expected outcome for a verifier.
"""

import logging
import operator
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from stark_primitives.field import FieldElement
from stark_primitives.hashing import (
    Digest,
    HashFunction,
    get_hash_function,
    serialize_leaf,
    sha256_hex,
)

logger = logging.getLogger(__name__)

# --- Type Aliases ---

MerkleRoot = Digest
AuthenticationPath = List[Digest]


# --- Configuration ---


@dataclass(frozen=True)
class MerkleConfig:
    """Merkle tree configuration.

    Attributes:
        hash_name: Name of the string hash used for every node (see get_hash_function)
        max_workers: Threads used to hash each tree level; 1 builds sequentially
    """

    hash_name: str = "sha256"
    max_workers: int = 1

    def __post_init__(self) -> None:
        get_hash_function(self.hash_name)
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")

    @property
    def hash_fn(self) -> HashFunction:
        return get_hash_function(self.hash_name)


# --- Decommitment Record ---


@dataclass(frozen=True)
class Decommitment:
    """Inclusion proof for a single leaf.

    Attributes:
        leaf_id: Index of the leaf in the padded leaf sequence
        leaf_value: Claimed value at that index
        path: Sibling digests ordered from the root level down to the leaf level
        root: Root digest the path should reproduce
        hash_fn: Hash the tree was built with
    """

    leaf_id: int
    leaf_value: FieldElement
    path: Tuple[Digest, ...]
    root: MerkleRoot
    hash_fn: HashFunction = field(default=sha256_hex, compare=False, repr=False)

    def verify(self, hash_fn: Optional[HashFunction] = None) -> bool:
        """Replay the path with `hash_fn`, defaulting to the record's own hash."""
        if hash_fn is None:
            hash_fn = self.hash_fn
        return verify_decommitment(self.leaf_id, self.leaf_value, list(self.path), self.root, hash_fn)


# --- Verification ---


def verify_decommitment(
    leaf_id: int,
    leaf_value,
    path: Sequence[Digest],
    root: MerkleRoot,
    hash_fn: HashFunction = sha256_hex,
) -> bool:
    """Check that `leaf_value` sits at `leaf_id` in the tree committed to by `root`.

    The number of leaves is inferred as 2^len(path). The bits of
    leaf_id + num_leaves below the leading 1 are replayed from the leaf
    upward: a 0 bit means the running digest is a left child, a 1 bit means
    it is a right child.

    Args:
        leaf_id: Index of the leaf
        leaf_value: Claimed leaf value (FieldElement or int)
        path: Sibling digests ordered from the root level down to the leaf level
        root: Claimed root digest
        hash_fn: Hash used when the tree was built

    Returns:
        True if the replayed chain reproduces `root`, False otherwise
        (including for malformed input)
    """
    if not isinstance(path, (list, tuple)) or not all(isinstance(s, str) for s in path):
        logger.debug("Rejecting decommitment: path must be a sequence of digest strings")
        return False
    if not isinstance(root, str):
        logger.debug("Rejecting decommitment: root must be a digest string")
        return False

    num_leaves = 1 << len(path)
    try:
        leaf_id = operator.index(leaf_id)
    except TypeError:
        logger.debug(f"Rejecting decommitment: leaf_id {leaf_id!r} is not an integer")
        return False
    if not 0 <= leaf_id < num_leaves:
        logger.debug(f"Rejecting decommitment: leaf_id {leaf_id!r} outside [0, {num_leaves})")
        return False

    try:
        leaf_data = serialize_leaf(leaf_value)
    except (TypeError, ValueError):
        logger.debug(f"Rejecting decommitment: cannot serialize leaf value {leaf_value!r}")
        return False

    node_id = leaf_id + num_leaves
    current = hash_fn(leaf_data)

    for bit, sibling in zip(reversed(bin(node_id)[3:]), reversed(path)):
        if bit == "0":
            current = hash_fn(current + sibling)
        else:
            current = hash_fn(sibling + current)

    if current != root:
        logger.debug(f"Decommitment mismatch for leaf {leaf_id}: computed {current}, expected {root}")
        return False
    return True


# --- Verifier Class ---


class MerkleVerifier:
    """Verifier bound to one published root and hash configuration.

    Usage:
        verifier = MerkleVerifier(root, MerkleConfig(hash_name="sha256"))
        for leaf_id, value, path in queries:
            if not verifier.verify_query(leaf_id, value, path):
                return False
        return True
    """

    def __init__(self, root: MerkleRoot, config: MerkleConfig = None) -> None:
        self.root = root
        self.config = config if config is not None else MerkleConfig()
        self._hash_fn = self.config.hash_fn

    def verify_query(self, leaf_id: int, leaf_value, path: Sequence[Digest]) -> bool:
        """Verify a single leaf against the bound root."""
        return verify_decommitment(leaf_id, leaf_value, path, self.root, self._hash_fn)

    def verify_decommitment(self, decommitment: Decommitment) -> bool:
        """Verify a Decommitment record; its own root must match the bound root."""
        if decommitment.root != self.root:
            logger.debug("Decommitment root differs from verifier root")
            return False
        return decommitment.verify(self._hash_fn)
