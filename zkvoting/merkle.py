"""
Arbre de Merkle d'éligibilité

L'arbre engage l'ensemble des adresses autorisées à voter. Un votant prouve
son appartenance avec la liste des nœuds frères, de la feuille vers la racine.
"""

from functools import total_ordering
from typing import Iterable, List, Tuple, Union

from Crypto.Hash import SHA256, keccak

from zkvoting.crypto_utils.algebra import parse_hex
from zkvoting.errors import LeafNotFound

LEAF_SIZE = 20
NODE_SIZE = 32


@total_ordering
class Leaf:
    """Adresse de 20 octets, ordonnée par valeur numérique"""

    __slots__ = ("value",)

    def __init__(self, value: Union[bytes, str]):
        if isinstance(value, str):
            value = parse_hex(value)
        if len(value) != LEAF_SIZE:
            raise ValueError(f"Une adresse fait {LEAF_SIZE} octets")
        self.value = bytes(value)

    def __eq__(self, other):
        if not isinstance(other, Leaf):
            return NotImplemented
        return self.value == other.value

    def __lt__(self, other):
        if not isinstance(other, Leaf):
            return NotImplemented
        # Même largeur : l'ordre des octets est l'ordre numérique
        return self.value < other.value

    def __hash__(self):
        return hash(self.value)

    def hex(self) -> str:
        return "0x" + self.value.hex()

    def __repr__(self):
        return f"Leaf({self.hex()})"


class PairHasher:
    """
    Stratégie de hachage de l'arbre

    La combinaison doit être commutative : les preuves ne portent pas la
    position gauche/droite des frères.
    """

    def digest(self, data: bytes) -> bytes:
        raise NotImplementedError

    def leaf(self, data: bytes) -> bytes:
        return self.digest(data)

    def combine(self, left: bytes, right: bytes) -> bytes:
        a, b = sorted((left, right))
        return self.digest(a + b)


class KeccakPairHasher(PairHasher):
    """keccak-256 sur la paire triée (compatible avec un vérificateur EVM)"""

    def digest(self, data: bytes) -> bytes:
        return keccak.new(data=data, digest_bits=256).digest()


class Sha256PairHasher(PairHasher):
    def digest(self, data: bytes) -> bytes:
        return SHA256.new(data).digest()


DEFAULT_HASHER = KeccakPairHasher()


class MerkleTree:
    """
    Arbre immuable construit sur les feuilles triées par ordre croissant

    Un nœud isolé en fin de niveau est remonté tel quel (jamais dupliqué).
    """

    __slots__ = ("_leaves", "_hasher", "_levels")

    def __init__(self, leaves: Iterable[Leaf], hasher: PairHasher = DEFAULT_HASHER):
        leaves = tuple(sorted(set(leaves)))
        if not leaves:
            raise ValueError("L'arbre doit contenir au moins une adresse")
        self._leaves: Tuple[Leaf, ...] = leaves
        self._hasher = hasher
        self._levels: Tuple[Tuple[bytes, ...], ...] = self._build_levels()

    @property
    def leaves(self) -> Tuple[Leaf, ...]:
        return self._leaves

    @property
    def hasher(self) -> PairHasher:
        return self._hasher

    @property
    def levels(self) -> Tuple[Tuple[bytes, ...], ...]:
        return self._levels

    def _build_levels(self) -> Tuple[Tuple[bytes, ...], ...]:
        level = tuple(self.hasher.leaf(leaf.value) for leaf in self.leaves)
        levels = [level]
        while len(level) > 1:
            next_level = []
            for i in range(0, len(level), 2):
                if i + 1 < len(level):
                    next_level.append(self.hasher.combine(level[i], level[i + 1]))
                else:
                    next_level.append(level[i])
            level = tuple(next_level)
            levels.append(level)
        return tuple(levels)

    @property
    def root(self) -> bytes:
        return self.levels[-1][0]

    def __contains__(self, leaf: Leaf) -> bool:
        return self.hasher.leaf(leaf.value) in self.levels[0]

    def __len__(self):
        return len(self.leaves)

    def prove(self, leaf: Leaf) -> List[bytes]:
        """
        Génère la preuve d'appartenance d'une adresse

        Args:
            leaf: L'adresse du votant

        Returns:
            List[bytes]: Les nœuds frères, de la feuille vers la racine

        Raises:
            LeafNotFound: Si l'adresse n'est pas dans l'arbre
        """
        target = self.hasher.leaf(leaf.value)
        try:
            index = self.levels[0].index(target)
        except ValueError:
            raise LeafNotFound(f"L'adresse {leaf.hex()} n'est pas éligible")

        proof = []
        for level in self.levels[:-1]:
            if index % 2 == 1:
                sibling = level[index - 1]
                proof.append(sibling)
                target = self.hasher.combine(sibling, target)
            elif index + 1 < len(level):
                sibling = level[index + 1]
                proof.append(sibling)
                target = self.hasher.combine(target, sibling)
            # Nœud isolé : remonté sans frère
            index //= 2
        return proof

    def verify(self, leaf: Leaf, proof: List[bytes]) -> bool:
        return verify_proof(leaf, proof, self.root, self.hasher)

    def to_bytes(self) -> bytes:
        """Sérialise les adresses triées (20 octets chacune)"""
        return b"".join(leaf.value for leaf in self.leaves)

    @classmethod
    def from_bytes(cls, data: bytes, hasher: PairHasher = DEFAULT_HASHER) -> "MerkleTree":
        if len(data) % LEAF_SIZE != 0:
            raise ValueError(f"La taille doit être un multiple de {LEAF_SIZE} octets")
        leaves = [Leaf(data[i:i + LEAF_SIZE]) for i in range(0, len(data), LEAF_SIZE)]
        return cls(leaves, hasher)


def build_tree(addresses: Iterable[Union[Leaf, bytes, str]],
               hasher: PairHasher = DEFAULT_HASHER) -> MerkleTree:
    """Construit l'arbre à partir d'adresses brutes ou de feuilles"""
    leaves = [a if isinstance(a, Leaf) else Leaf(a) for a in addresses]
    return MerkleTree(leaves, hasher)


def verify_proof(leaf: Leaf, proof: List[bytes], root: bytes,
                 hasher: PairHasher = DEFAULT_HASHER) -> bool:
    """Recalcule la racine depuis la feuille et la compare à celle attendue"""
    node = hasher.leaf(leaf.value)
    for sibling in proof:
        if len(sibling) != NODE_SIZE:
            return False
        node = hasher.combine(node, sibling)
    return node == root
