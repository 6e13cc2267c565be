import random

import pytest

from zkvoting.errors import LeafNotFound
from zkvoting.merkle import (
    KeccakPairHasher, Leaf, MerkleTree, Sha256PairHasher, build_tree, verify_proof,
)


def make_leaves(n, seed=1):
    rng = random.Random(seed)
    return [Leaf(bytes(rng.getrandbits(8) for _ in range(20))) for _ in range(n)]


@pytest.mark.parametrize("n", [1, 2, 3, 4, 5, 7, 8, 13])
def test_every_member_proves_and_verifies(n):
    leaves = make_leaves(n)
    tree = MerkleTree(leaves)
    for leaf in leaves:
        proof = tree.prove(leaf)
        assert verify_proof(leaf, proof, tree.root)
        assert tree.verify(leaf, proof)


def test_non_member_has_no_proof():
    leaves = make_leaves(5)
    tree = MerkleTree(leaves[:4])
    with pytest.raises(LeafNotFound):
        tree.prove(leaves[4])
    assert leaves[4] not in tree


def test_root_independent_of_input_order():
    leaves = make_leaves(9)
    shuffled = list(leaves)
    random.Random(3).shuffle(shuffled)
    assert MerkleTree(leaves).root == MerkleTree(shuffled).root
    assert MerkleTree(leaves + leaves[:2]).root == MerkleTree(leaves).root


def test_single_leaf_tree():
    leaf = Leaf("0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC")
    tree = MerkleTree([leaf])
    assert tree.prove(leaf) == []
    assert tree.root == KeccakPairHasher().leaf(leaf.value)


def test_odd_level_carries_last_node():
    hasher = KeccakPairHasher()
    leaves = sorted(make_leaves(3))
    a, b, c = (hasher.leaf(leaf.value) for leaf in leaves)
    tree = MerkleTree(leaves)
    assert tree.root == hasher.combine(hasher.combine(a, b), c)
    # Le dernier nœud n'a pas de frère au premier niveau
    assert tree.prove(leaves[2]) == [hasher.combine(a, b)]
    assert tree.prove(leaves[0]) == [b, c]


def test_tampered_proof_fails():
    leaves = make_leaves(6)
    tree = MerkleTree(leaves)
    proof = tree.prove(leaves[2])
    proof[0] = bytes(32)
    assert not verify_proof(leaves[2], proof, tree.root)
    assert not verify_proof(leaves[2], tree.prove(leaves[2])[:-1], tree.root)
    assert not verify_proof(leaves[3], tree.prove(leaves[2]), tree.root)


def test_alternative_hasher():
    leaves = make_leaves(5)
    tree = MerkleTree(leaves, Sha256PairHasher())
    assert tree.root != MerkleTree(leaves).root
    proof = tree.prove(leaves[1])
    assert verify_proof(leaves[1], proof, tree.root, Sha256PairHasher())
    assert not verify_proof(leaves[1], proof, tree.root)


def test_serialization():
    leaves = make_leaves(4)
    tree = MerkleTree(leaves)
    data = tree.to_bytes()
    assert len(data) == 80
    restored = MerkleTree.from_bytes(data)
    assert restored.root == tree.root
    assert restored.leaves == tree.leaves
    with pytest.raises(ValueError):
        MerkleTree.from_bytes(data[:-1])


def test_leaf_validation_and_order():
    with pytest.raises(ValueError):
        Leaf(b"\x01" * 19)
    with pytest.raises(ValueError):
        MerkleTree([])
    low = Leaf("0x" + "00" * 19 + "ff")
    high = Leaf("0x01" + "00" * 19)
    assert low < high
    tree = build_tree([high.hex(), low.value])
    assert tree.leaves == (low, high)


def test_tree_is_read_only():
    tree = MerkleTree(make_leaves(3))
    with pytest.raises(AttributeError):
        tree.leaves = ()
    with pytest.raises(AttributeError):
        tree.levels = ()
    with pytest.raises(AttributeError):
        tree.hasher = Sha256PairHasher()
    with pytest.raises(AttributeError):
        tree.extra = 1
    assert isinstance(tree.leaves, tuple)
    assert all(isinstance(level, tuple) for level in tree.levels)
