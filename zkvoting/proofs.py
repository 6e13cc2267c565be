"""
Preuve de liaison entre un chiffré et son aléa déclaré

Pour chaque candidat le votant publie x, T = v·Pub et r = v + c·x mod n, où
c est le défi fixé à la création de la proposition. Le vérificateur contrôle

    r·Pub == T + c·(x·Pub)

ce qui lie r à l'aléa déclaré x et au défi c.
"""

from typing import List, Optional, Sequence

from zkvoting.crypto_utils.curves import Curve, Point, default_curve
from zkvoting.errors import InvalidProof, RejectReason
from zkvoting.models import BindingProof


def BP_prove(randomness: int, commitment: int, public_key: Point,
             curve: Optional[Curve] = None) -> BindingProof:
    """
    Construit la preuve (T, r) pour un aléa x

    Args:
        randomness: L'aléa x du chiffré
        commitment: Le défi c de la proposition
        public_key: Clé publique de l'autorité
    """
    curve = curve or default_curve()
    curve.check_scalar(randomness)
    v = curve.random_scalar()
    T = curve.mult(v, public_key)
    r = (v + commitment * randomness) % curve.order
    return BindingProof(t=T, r=r)


def BP_verify(proof: BindingProof, randomness: int, commitment: int,
              public_key: Point, curve: Optional[Curve] = None) -> bool:
    """Vérifie r·Pub == T + c·(x·Pub)"""
    curve = curve or default_curve()
    if not 0 < randomness < curve.order or not 0 <= proof.r < curve.order:
        return False
    if not curve.is_on_curve(proof.t):
        return False
    left = curve.mult(proof.r, public_key)
    right = curve.add(proof.t, curve.mult(commitment * randomness % curve.order, public_key))
    return left == right


def BP_prove_ballot(randomness: Sequence[int], commitment: int, public_key: Point,
                    curve: Optional[Curve] = None) -> List[BindingProof]:
    curve = curve or default_curve()
    return [BP_prove(x, commitment, public_key, curve) for x in randomness]


def verify_ballot(ciphertexts: Sequence[Point], randomness: Sequence[int],
                  proof_t: Sequence[Point], proof_r: Sequence[int],
                  commitment: int, public_key: Point, num_candidates: int,
                  curve: Optional[Curve] = None) -> None:
    """
    Vérifie un bulletin complet

    Raises:
        InvalidProof: Avec le motif CANDIDATE_COUNT_MISMATCH, SUM_NOT_VALID
            ou VOTES_NOT_VALID. Le message ne désigne jamais un candidat.
    """
    curve = curve or default_curve()
    lengths = {len(ciphertexts), len(randomness), len(proof_t), len(proof_r)}
    if lengths != {num_candidates}:
        raise InvalidProof(RejectReason.CANDIDATE_COUNT_MISMATCH)

    # Chaque aléa doit ouvrir son chiffré sur 0 ou G, et la somme sur G
    total = curve.identity
    for C, x in zip(ciphertexts, randomness):
        if not 0 < x < curve.order or not curve.is_on_curve(C):
            raise InvalidProof(RejectReason.SUM_NOT_VALID)
        M = curve.sub(C, curve.mult(x, public_key))
        if M != curve.identity and M != curve.base:
            raise InvalidProof(RejectReason.SUM_NOT_VALID)
        total = curve.add(total, M)
    if total != curve.base:
        raise InvalidProof(RejectReason.SUM_NOT_VALID)

    for T, r, x in zip(proof_t, proof_r, randomness):
        if not BP_verify(BindingProof(t=T, r=r), x, commitment, public_key, curve):
            raise InvalidProof(RejectReason.VOTES_NOT_VALID)
