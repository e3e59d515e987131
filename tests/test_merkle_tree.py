"""Tests for Merkle tree construction and authentication paths."""

import hashlib

import pytest

from stark_primitives.field import FF, PRIME, FieldElement
from stark_primitives.hashing import sha256_hex
from stark_primitives.merkle_tree import ConstructionError, MerkleTree
from stark_primitives.merkle_verifier import MerkleConfig, verify_decommitment


def _elements(values):
    return [FieldElement(v) for v in values]


@pytest.fixture
def tree() -> MerkleTree:
    """Four-leaf tree over [1, 2, 3, 4]."""
    return MerkleTree(_elements([1, 2, 3, 4]))


class TestConstruction:
    """Shape, padding and root computation."""

    def test_four_leaves(self, tree: MerkleTree) -> None:
        assert tree.num_leaves == 4
        assert tree.height == 2
        assert len(tree) == 4
        assert tree.leaves == tuple(_elements([1, 2, 3, 4]))

    def test_root_matches_manual_hashing(self, tree: MerkleTree) -> None:
        """Leaves hash their decimal form, parents hash left + right."""
        h = [sha256_hex(str(v)) for v in (1, 2, 3, 4)]
        expected = sha256_hex(sha256_hex(h[0] + h[1]) + sha256_hex(h[2] + h[3]))
        assert tree.root == expected
        assert tree.get_root() == expected

    def test_padding_with_zero(self) -> None:
        """Three leaves are padded to four with the zero element."""
        tree = MerkleTree(_elements([1, 2, 3]))
        assert tree.num_leaves == 4
        assert tree.height == 2
        assert tree.leaves[3] == FieldElement.zero()
        assert tree.root == MerkleTree(_elements([1, 2, 3, 0])).root

    @pytest.mark.parametrize(
        "n,height,num_leaves",
        [(1, 0, 1), (2, 1, 2), (3, 2, 4), (4, 2, 4), (5, 3, 8), (8, 3, 8), (9, 4, 16), (1000, 10, 1024)],
    )
    def test_height(self, n: int, height: int, num_leaves: int) -> None:
        tree = MerkleTree(_elements(range(n)))
        assert tree.height == height
        assert tree.num_leaves == num_leaves

    def test_single_leaf(self) -> None:
        """A single leaf is its own root and has an empty path."""
        tree = MerkleTree([FieldElement(42)])
        assert tree.root == sha256_hex("42")
        assert tree.get_authentication_path(0) == []
        assert verify_decommitment(0, FieldElement(42), [], tree.root)

    def test_empty_input(self) -> None:
        with pytest.raises(ConstructionError):
            MerkleTree([])

    def test_construction_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            MerkleTree(iter([]))

    def test_accepts_ints_and_ff_arrays(self) -> None:
        """Ints and galois arrays are reduced into the field like FieldElements."""
        expected = MerkleTree(_elements([1, 2, 3])).root
        assert MerkleTree([1, 2, 3]).root == expected
        assert MerkleTree(FF([1, 2, 3])).root == expected
        assert MerkleTree([PRIME + 1, PRIME + 2, 3]).root == expected

    @pytest.mark.parametrize("bad", [1.5, 3.0, "1", None])
    def test_rejects_non_integer_leaves(self, bad) -> None:
        """Non-integer leaves are refused rather than truncated."""
        with pytest.raises(TypeError):
            MerkleTree([1, bad])

    def test_different_data_different_root(self) -> None:
        assert MerkleTree([1, 2, 3, 4]).root != MerkleTree([1, 2, 4, 3]).root


class TestNodes:
    """Heap-indexed node access and the commitment map."""

    def test_node_layout(self, tree: MerkleTree) -> None:
        assert tree.get_node(1) == tree.root
        assert tree.get_node(4) == sha256_hex("1")
        assert tree.get_node(7) == sha256_hex("4")
        assert tree.get_node(2) == sha256_hex(tree.get_node(4) + tree.get_node(5))

    @pytest.mark.parametrize("node_id", [0, 8, -1])
    def test_node_out_of_range(self, tree: MerkleTree, node_id: int) -> None:
        with pytest.raises(IndexError):
            tree.get_node(node_id)

    def test_preimages(self, tree: MerkleTree) -> None:
        assert tree.get_preimage(tree.root) == (tree.get_node(2), tree.get_node(3))
        assert tree.get_preimage(tree.get_node(4)) == ("1", "")
        assert tree.get_preimage(tree.get_node(6)) == ("3", "")

    def test_every_node_is_recorded(self) -> None:
        tree = MerkleTree(_elements(range(1, 12)))
        for node_id in range(1, 2 * tree.num_leaves):
            tree.get_preimage(tree.get_node(node_id))

    def test_unknown_preimage(self, tree: MerkleTree) -> None:
        with pytest.raises(KeyError):
            tree.get_preimage(sha256_hex("not a node"))


class TestAuthenticationPath:
    """Path extraction."""

    def test_path_for_index_two(self, tree: MerkleTree) -> None:
        """Siblings are ordered from the root level down to the leaf level."""
        path = tree.get_authentication_path(2)
        assert len(path) == 2
        assert path[0] == tree.get_node(2)
        assert path[1] == tree.get_node(7)

    def test_path_for_index_one(self, tree: MerkleTree) -> None:
        path = tree.get_authentication_path(1)
        assert path == [tree.get_node(3), tree.get_node(4)]

    @pytest.mark.parametrize("leaf_id", [4, 5, -1])
    def test_out_of_range(self, tree: MerkleTree, leaf_id: int) -> None:
        with pytest.raises(IndexError):
            tree.get_authentication_path(leaf_id)

    def test_padding_leaf_has_a_path(self) -> None:
        tree = MerkleTree(_elements([1, 2, 3]))
        path = tree.get_authentication_path(3)
        assert verify_decommitment(3, FieldElement.zero(), path, tree.root)

    def test_returned_path_is_a_copy(self, tree: MerkleTree) -> None:
        path = tree.get_authentication_path(2)
        path[0] = "tampered"
        path.append("extra")
        assert tree.get_authentication_path(2) == [tree.get_node(2), tree.get_node(7)]

    @pytest.mark.parametrize("n", [1, 2, 3, 5, 8, 13, 16, 33])
    def test_round_trip(self, n: int) -> None:
        """Every leaf, padding included, verifies against the root."""
        data = _elements(range(100, 100 + n))
        tree = MerkleTree(data)
        for leaf_id in range(tree.num_leaves):
            path = tree.get_authentication_path(leaf_id)
            assert len(path) == tree.height
            assert verify_decommitment(leaf_id, tree.leaves[leaf_id], path, tree.root)

    def test_decommitment_record(self, tree: MerkleTree) -> None:
        record = tree.get_decommitment(2)
        assert record.leaf_id == 2
        assert record.leaf_value == FieldElement(3)
        assert list(record.path) == tree.get_authentication_path(2)
        assert record.root == tree.root
        assert record.verify()

    def test_decommitment_record_keeps_tree_hash(self) -> None:
        """Records verify with the hash their tree was built with."""
        config = MerkleConfig(hash_name="blake2b")
        record = MerkleTree([1, 2, 3, 4], config=config).get_decommitment(2)
        assert record.hash_fn("3") == config.hash_fn("3")
        assert record.verify()
        assert not record.verify(sha256_hex)

        def sha1_hex(data: str) -> str:
            return hashlib.sha1(data.encode()).hexdigest()

        assert MerkleTree([1, 2, 3], hash_fn=sha1_hex).get_decommitment(1).verify()


class TestConfiguration:
    """Hash selection and threaded construction."""

    def test_threaded_build_matches_sequential(self) -> None:
        data = _elements(range(1, 101))
        sequential = MerkleTree(data)
        threaded = MerkleTree(data, config=MerkleConfig(max_workers=4))
        assert threaded.root == sequential.root
        for leaf_id in (0, 37, 99, 127):
            assert threaded.get_authentication_path(leaf_id) == sequential.get_authentication_path(leaf_id)

    def test_configured_hash(self) -> None:
        config = MerkleConfig(hash_name="blake2b")
        tree = MerkleTree([1, 2, 3, 4], config=config)
        path = tree.get_authentication_path(2)
        assert tree.root == config.hash_fn(config.hash_fn(config.hash_fn("1") + config.hash_fn("2"))
                                           + config.hash_fn(config.hash_fn("3") + config.hash_fn("4")))
        assert tree.root != MerkleTree([1, 2, 3, 4]).root
        assert verify_decommitment(2, 3, path, tree.root, config.hash_fn)
        assert not verify_decommitment(2, 3, path, tree.root)

    def test_injected_hash_overrides_config(self) -> None:
        def sha1_hex(data: str) -> str:
            return hashlib.sha1(data.encode()).hexdigest()

        tree = MerkleTree([1, 2, 3], hash_fn=sha1_hex, config=MerkleConfig(hash_name="blake2s"))
        assert tree.hash_fn is sha1_hex
        assert tree.get_node(4) == sha1_hex("1")
        assert verify_decommitment(0, 1, tree.get_authentication_path(0), tree.root, sha1_hex)

    def test_invalid_config(self) -> None:
        with pytest.raises(ValueError):
            MerkleConfig(hash_name="md4")
        with pytest.raises(ValueError):
            MerkleConfig(max_workers=0)
