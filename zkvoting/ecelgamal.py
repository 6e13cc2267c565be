from typing import List, Optional, Tuple

from zkvoting.crypto_utils.curves import Curve, Point, default_curve
from zkvoting.models import BallotSlot


def EGencode(message: int, curve: Optional[Curve] = None) -> Point:
    """
    Encode un bit en point sur la courbe

    Args:
        message: Doit être 0 ou 1
        curve: La courbe utilisée

    Returns:
        Point: L'élément neutre pour 0, le point de base pour 1

    Raises:
        ValueError: Si le message n'est pas 0 ou 1
    """
    curve = curve or default_curve()
    if not isinstance(message, int) or message not in (0, 1):
        raise ValueError("Le message doit être 0 ou 1")
    return curve.base if message == 1 else curve.identity


def ECEG_generate_keys(curve: Optional[Curve] = None) -> Tuple[int, Point]:
    """
    Génère une paire de clés pour l'autorité de dépouillement

    Returns:
        Tuple[int, Point]: (clé privée sk, clé publique Pub = sk·G)
    """
    curve = curve or default_curve()
    # Clé privée aléatoire dans [1, ORDER-1]
    private_key = curve.random_scalar()
    public_key = curve.base_mult(private_key)

    if not curve.is_on_curve(public_key):
        raise ValueError("Erreur: La clé publique générée n'est pas sur la courbe")

    return private_key, public_key


def ECEG_encrypt(message: int, randomness: int, public_key: Point,
                 curve: Optional[Curve] = None) -> Point:
    """Chiffre un bit avec un aléa donné : C = M + x·Pub"""
    curve = curve or default_curve()
    curve.check_scalar(randomness)
    M = EGencode(message, curve)
    return curve.add(M, curve.mult(randomness, public_key))


def ECEG_encode_ballot(choice: int, num_candidates: int, public_key: Point,
                       curve: Optional[Curve] = None) -> Tuple[List[BallotSlot], List[int]]:
    """
    Chiffre un choix sous forme d'un vecteur one-hot, un chiffré par candidat

    Args:
        choice: Index du candidat choisi
        num_candidates: Nombre de candidats
        public_key: Clé publique de l'autorité

    Returns:
        Tuple[List[BallotSlot], List[int]]: Les chiffrés et les aléas utilisés

    Raises:
        ValueError: Si le choix est hors de [0, num_candidates)
    """
    curve = curve or default_curve()
    if not 0 <= choice < num_candidates:
        raise ValueError("Candidat invalide")

    slots = []
    randomness = []
    for i in range(num_candidates):
        # Aléa frais pour chaque candidat, divulgué avec le chiffré
        x = curve.random_scalar()
        C = ECEG_encrypt(1 if i == choice else 0, x, public_key, curve)
        slots.append(BallotSlot(ciphertext=C, randomness=x))
        randomness.append(x)
    return slots, randomness


def ECEG_decrypt(private_key: int, C: Point, R: Point,
                 curve: Optional[Curve] = None) -> Point:
    """
    Déchiffre un point : M = C - sk·R

    Args:
        private_key: Clé privée de l'autorité
        C: Le chiffré (somme des chiffrés pour un agrégat)
        R: Le point éphémère x·G (somme des aléas fois G pour un agrégat)

    Returns:
        Point: Le point clair M
    """
    curve = curve or default_curve()
    S = curve.mult(private_key, R)
    return curve.sub(C, S)


def ECEG_add(A: Point, B: Point, curve: Optional[Curve] = None) -> Point:
    """Addition homomorphe de deux chiffrés"""
    curve = curve or default_curve()
    return curve.add(A, B)


"""
Le schéma est additif :

C1 + C2 = (M1 + x1·Pub) + (M2 + x2·Pub) = (M1 + M2) + (x1 + x2)·Pub

La somme des chiffrés d'un candidat se déchiffre donc avec la somme des
aléas, et donne (nombre de votes)·G.
"""
