from typing import List, Optional

from zkvoting.crypto_utils.curves import Curve, Point, default_curve
from zkvoting.ecelgamal import ECEG_encode_ballot
from zkvoting.merkle import Leaf, MerkleTree
from zkvoting.models import Proposal, VoteSubmission
from zkvoting.proofs import BP_prove_ballot


def create_vote(candidate: int, num_candidates: int) -> List[int]:
    """Crée un vote pour un candidat (liste de 0 et 1)"""
    if not 0 <= candidate < num_candidates:
        raise ValueError("Candidat invalide")
    return [1 if i == candidate else 0 for i in range(num_candidates)]


class VoteBuilder:
    """Assemble côté client un bulletin prêt à soumettre au registre"""

    def __init__(self, public_key: Point, curve: Optional[Curve] = None):
        curve = curve or default_curve()
        self.public_key = public_key
        self.curve = curve

    def build(self, proposal: Proposal, tree: MerkleTree, voter: Leaf,
              candidate: int) -> VoteSubmission:
        """
        Chiffre le choix, prouve l'éligibilité et lie chaque aléa au défi

        Args:
            proposal: La proposition lue depuis le registre
            tree: L'arbre des votants dont la racine est celle de la proposition
            voter: L'adresse du votant
            candidate: Index du candidat choisi

        Raises:
            ValueError: Si l'arbre ne correspond pas à la proposition
            LeafNotFound: Si le votant n'est pas éligible
        """
        if tree.root != proposal.merkle_root:
            raise ValueError("L'arbre ne correspond pas à la racine de la proposition")
        eligibility_proof = tree.prove(voter)

        slots, randomness = ECEG_encode_ballot(
            candidate, len(proposal.candidates), self.public_key, self.curve
        )
        proofs = BP_prove_ballot(randomness, proposal.commitment, self.public_key, self.curve)

        return VoteSubmission(
            proposal_id=proposal.id,
            voter=voter,
            randomness=randomness,
            ciphertexts=[slot.ciphertext for slot in slots],
            eligibility_proof=eligibility_proof,
            proof_r=[proof.r for proof in proofs],
            proof_t=[proof.t for proof in proofs],
        )
