import logging
from math import isqrt
from typing import Callable, List, Optional, Sequence

from zkvoting import config
from zkvoting.crypto_utils.curves import Curve, Point, default_curve
from zkvoting.ecelgamal import ECEG_decrypt
from zkvoting.errors import UnresolvedTally
from zkvoting.models import AggregateSnapshot, TallyResult

logger = logging.getLogger(__name__)

Decryptor = Callable[[Point, Point], Point]


def bruteECLog(M: Point, upper_bound: int, curve: Optional[Curve] = None) -> Optional[int]:
    """
    Cherche k dans [0, upper_bound] tel que k·G == M par balayage linéaire

    Returns:
        Optional[int]: k, ou None si aucun k de la borne ne convient
    """
    curve = curve or default_curve()
    current = curve.identity
    for k in range(upper_bound + 1):
        if current == M:
            return k
        current = curve.add(current, curve.base)
    return None


def bsgsECLog(M: Point, upper_bound: int, curve: Optional[Curve] = None) -> Optional[int]:
    """Même contrat que bruteECLog, en pas de bébé / pas de géant"""
    curve = curve or default_curve()
    if M == curve.identity:
        return 0
    m = isqrt(upper_bound) + 1

    # Pas de bébé : j·G pour j dans [0, m)
    table = {}
    current = curve.identity
    for j in range(m):
        table.setdefault(current, j)
        current = curve.add(current, curve.base)

    # Pas de géant : M - i·m·G
    giant = curve.neg(curve.base_mult(m))
    current = M
    for i in range(m + 1):
        j = table.get(current)
        if j is not None:
            k = i * m + j
            return k if k <= upper_bound else None
        current = curve.add(current, giant)
    return None


SEARCHES = {
    "linear": bruteECLog,
    "bsgs": bsgsECLog,
}


def recover_count(M: Point, upper_bound: int, curve: Optional[Curve] = None,
                  search: str = "linear") -> int:
    """
    Retrouve le nombre de votes encodé dans un point déchiffré

    Raises:
        UnresolvedTally: Si aucun compte dans [0, upper_bound] ne correspond
        ValueError: Si la méthode de recherche est inconnue
    """
    curve = curve or default_curve()
    try:
        method = SEARCHES[search]
    except KeyError:
        raise ValueError(f"Recherche inconnue: {search}")
    if curve.is_identity(M):
        return 0
    count = method(M, upper_bound, curve)
    if count is None:
        raise UnresolvedTally(
            f"Aucun compte dans [0, {upper_bound}] ne correspond au point déchiffré"
        )
    return count


def resolve_with(ciphertexts: Sequence[Point], randomness: Sequence[int],
                 decryptor: Decryptor, curve: Optional[Curve] = None,
                 upper_bound: Optional[int] = None, search: str = "linear") -> List[int]:
    """
    Dépouille les agrégats avec un déchiffreur quelconque (clé locale ou service)

    Args:
        ciphertexts: Somme des chiffrés par candidat
        randomness: Somme des aléas par candidat
        decryptor: Fonction (C, R) -> M
        upper_bound: Nombre maximal de votes possible

    Returns:
        List[int]: Le nombre de votes par candidat
    """
    curve = curve or default_curve()
    if len(ciphertexts) != len(randomness):
        raise ValueError("Autant d'aléas que de chiffrés sont requis")
    if upper_bound is None:
        upper_bound = config.TALLY_UPPER_BOUND

    counts = []
    for C, x in zip(ciphertexts, randomness):
        R = curve.base_mult(curve.check_scalar(x))
        M = decryptor(C, R)
        counts.append(recover_count(M, upper_bound, curve, search))
    logger.info("Dépouillement terminé sur %d candidats", len(counts))
    return counts


def resolve(ciphertexts: Sequence[Point], randomness: Sequence[int], private_key: int,
            curve: Optional[Curve] = None, upper_bound: Optional[int] = None,
            search: str = "linear") -> List[int]:
    """Dépouille les agrégats avec la clé privée de l'autorité"""
    curve = curve or default_curve()

    def decryptor(C: Point, R: Point) -> Point:
        return ECEG_decrypt(private_key, C, R, curve)

    return resolve_with(ciphertexts, randomness, decryptor, curve, upper_bound, search)


def resolve_snapshot(snapshot: AggregateSnapshot, decryptor: Decryptor,
                     curve: Optional[Curve] = None, upper_bound: Optional[int] = None,
                     search: str = "linear") -> TallyResult:
    curve = curve or default_curve()
    counts = resolve_with(snapshot.ciphertexts, snapshot.randomness, decryptor,
                          curve, upper_bound, search)
    return TallyResult(proposal_id=snapshot.proposal_id, version=snapshot.version,
                       counts=counts)
