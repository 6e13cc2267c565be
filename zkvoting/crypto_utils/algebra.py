from typing import Optional


def mod_inv(a: int, m: int) -> int:
    """
    Calcule l'inverse modulaire de a modulo m

    Raises:
        ValueError: Si a n'est pas inversible modulo m
    """
    if a % m == 0:
        raise ValueError("L'élément n'est pas inversible")
    return pow(a, -1, m)


def mod_sqrt(a: int, p: int) -> int:
    """
    Racine carrée modulaire (Tonelli-Shanks) pour p premier impair

    Args:
        a: L'élément dont on cherche la racine
        p: Le module premier

    Returns:
        int: Une racine r telle que r² = a (mod p)

    Raises:
        ValueError: Si a n'est pas un résidu quadratique modulo p
    """
    a %= p
    if a == 0:
        return 0
    if pow(a, (p - 1) // 2, p) != 1:
        raise ValueError("Pas de racine carrée modulo p")

    # Cas simple p = 3 mod 4 (secp256k1)
    if p % 4 == 3:
        return pow(a, (p + 1) // 4, p)

    # p - 1 = q * 2^s
    q, s = p - 1, 0
    while q % 2 == 0:
        q //= 2
        s += 1

    # Cherche un non-résidu z
    z = 2
    while pow(z, (p - 1) // 2, p) != p - 1:
        z += 1

    m, c, t, r = s, pow(z, q, p), pow(a, q, p), pow(a, (q + 1) // 2, p)
    while t != 1:
        i, t2 = 0, t
        while t2 != 1:
            t2 = t2 * t2 % p
            i += 1
        b = pow(c, 1 << (m - i - 1), p)
        m, c, t, r = i, b * b % p, t * b * b % p, r * b % p
    return r


def int_to_bytes(n: int, length: Optional[int] = None, byteorder: str = 'big') -> bytes:
    """Convertit un entier positif en octets (taille minimale par défaut)"""
    if n < 0:
        raise ValueError("L'entier doit être positif")
    if length is None:
        length = max(1, (n.bit_length() + 7) // 8)
    return n.to_bytes(length, byteorder=byteorder)


def parse_hex(value: str) -> bytes:
    """
    Décode une chaîne hexadécimale, avec ou sans préfixe 0x

    Raises:
        ValueError: Si la chaîne n'est pas de l'hexadécimal valide
    """
    if value.startswith(('0x', '0X')):
        value = value[2:]
    return bytes.fromhex(value)
