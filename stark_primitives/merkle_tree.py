"""Binary Merkle tree commitment over field-element leaves.

Nodes use heap indexing: node 1 is the root, node k has children 2k and
2k + 1, and the padded leaves occupy [num_leaves, 2 * num_leaves). Leaf
digests hash the decimal form of the leaf value; internal digests hash the
concatenation of the left and right child digests.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from stark_primitives.field import FieldElement
from stark_primitives.hashing import Digest, HashFunction, serialize_leaf
from stark_primitives.merkle_verifier import (
    AuthenticationPath,
    Decommitment,
    MerkleConfig,
    MerkleRoot,
)

logger = logging.getLogger(__name__)


class ConstructionError(ValueError):
    """Raised when a Merkle tree cannot be built from the given leaves."""


# --- Merkle Tree ---


class MerkleTree:
    """Binary Merkle tree, built once at construction and read-only afterwards.

    Usage:
        tree = MerkleTree([FieldElement(v) for v in values])
        path = tree.get_authentication_path(idx)
        assert verify_decommitment(idx, values[idx], path, tree.root)
    """

    def __init__(
        self,
        data: Iterable,
        hash_fn: Optional[HashFunction] = None,
        config: Optional[MerkleConfig] = None,
    ):
        """Build the tree.

        Args:
            data: Leaf values (FieldElements, ints, or an FF array)
            hash_fn: String hash for every node; overrides config.hash_name
            config: Tree configuration, defaults to MerkleConfig()

        Raises:
            ConstructionError: If data is empty
        """
        leaves = [x if isinstance(x, FieldElement) else FieldElement(x) for x in data]
        if len(leaves) == 0:
            raise ConstructionError("Cannot construct an empty Merkle tree")

        self.config = config if config is not None else MerkleConfig()
        self._hash_fn = hash_fn if hash_fn is not None else self.config.hash_fn

        self._height = (len(leaves) - 1).bit_length()
        self._num_leaves = 1 << self._height
        leaves.extend([FieldElement.zero()] * (self._num_leaves - len(leaves)))
        self._leaves = tuple(leaves)

        self._nodes = np.empty(2 * self._num_leaves, dtype=object)
        self._facts: Dict[Digest, Tuple[str, str]] = {}

        if self.config.max_workers > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                self._build(executor)
        else:
            self._build(None)

        self._root: MerkleRoot = self._nodes[1]
        logger.debug(
            f"Built Merkle tree: {self._num_leaves} leaves, height {self._height}, root {self._root}"
        )

    # --- Construction ---

    def _build(self, executor: Optional[ThreadPoolExecutor]) -> None:
        """Hash level by level from the leaves up to the root."""
        n = self._num_leaves

        leaf_data = [serialize_leaf(leaf) for leaf in self._leaves]
        for i, (data, digest) in enumerate(zip(leaf_data, self._hash_level(leaf_data, executor))):
            self._nodes[n + i] = digest
            self._facts[digest] = (data, "")

        # Level occupies [start, 2 * start); its parents occupy [start // 2, start)
        start = n
        while start > 1:
            pairs = [(self._nodes[k], self._nodes[k + 1]) for k in range(start, 2 * start, 2)]
            digests = self._hash_level([left + right for left, right in pairs], executor)
            parent_start = start // 2
            for i, (pair, digest) in enumerate(zip(pairs, digests)):
                self._nodes[parent_start + i] = digest
                self._facts[digest] = pair
            start = parent_start

    def _hash_level(self, inputs: List[str], executor: Optional[ThreadPoolExecutor]) -> List[Digest]:
        if executor is None or len(inputs) < 2:
            return [self._hash_fn(x) for x in inputs]
        return list(executor.map(self._hash_fn, inputs))

    # --- Accessors ---

    @property
    def root(self) -> MerkleRoot:
        return self._root

    def get_root(self) -> MerkleRoot:
        """Return the Merkle root commitment."""
        return self._root

    @property
    def height(self) -> int:
        """ceil(log2) of the unpadded leaf count."""
        return self._height

    @property
    def num_leaves(self) -> int:
        """Number of leaves after padding to a power of two."""
        return self._num_leaves

    @property
    def leaves(self) -> Tuple[FieldElement, ...]:
        return self._leaves

    @property
    def hash_fn(self) -> HashFunction:
        return self._hash_fn

    def get_node(self, node_id: int) -> Digest:
        """Digest at heap index node_id, 1 <= node_id < 2 * num_leaves."""
        if not 1 <= node_id < 2 * self._num_leaves:
            raise IndexError(f"Node id {node_id} out of range [1, {2 * self._num_leaves})")
        return self._nodes[node_id]

    def get_preimage(self, digest: Digest) -> Tuple[str, str]:
        """Inputs that hashed to `digest`: (leaf data, "") or (left, right).

        Raises:
            KeyError: If the digest was not produced by this tree
        """
        return self._facts[digest]

    # --- Decommitment ---

    def get_authentication_path(self, leaf_id: int) -> AuthenticationPath:
        """Sibling digests for a leaf, ordered from the root level down to the leaf level.

        Walks down from the root following the bits of leaf_id + num_leaves
        below the leading 1: a 0 bit descends left and records the right
        sibling, a 1 bit descends right and records the left sibling.

        Raises:
            IndexError: If leaf_id is outside [0, num_leaves)
        """
        if not 0 <= leaf_id < self._num_leaves:
            raise IndexError(f"Leaf id {leaf_id} out of range [0, {self._num_leaves})")

        path: AuthenticationPath = []
        current = self._root
        for bit in bin(leaf_id + self._num_leaves)[3:]:
            left, right = self._facts[current]
            if bit == "0":
                path.append(right)
                current = left
            else:
                path.append(left)
                current = right
        return path

    def get_decommitment(self, leaf_id: int) -> Decommitment:
        """Bundle leaf value, authentication path and root for one leaf."""
        path = self.get_authentication_path(leaf_id)
        return Decommitment(
            leaf_id=leaf_id,
            leaf_value=self._leaves[leaf_id],
            path=tuple(path),
            root=self._root,
            hash_fn=self._hash_fn,
        )

    def __len__(self) -> int:
        return self._num_leaves

    def __repr__(self) -> str:
        return f"MerkleTree(num_leaves={self._num_leaves}, height={self._height}, root={self._root!r})"
