"""
Abstraction de courbe elliptique

Les points sont des tuples affines (x, y). Chaque courbe expose la même
interface (addition, multiplication scalaire, élément neutre, point de base,
ordre, (dé)sérialisation) pour que le chiffrement, les preuves et le
dépouillement soient écrits une seule fois.
"""

from secrets import randbelow
from typing import Dict, Tuple

from zkvoting import config
from zkvoting.crypto_utils.algebra import mod_inv, mod_sqrt
from zkvoting.errors import InvalidCurvePoint, OutOfRangeScalar

Point = Tuple[int, int]


class Curve:
    """Interface commune aux courbes supportées"""

    name: str = ""
    p: int = 0
    order: int = 0
    identity: Point = None
    base: Point = None

    def is_on_curve(self, P: Point) -> bool:
        raise NotImplementedError

    def add(self, P: Point, Q: Point) -> Point:
        raise NotImplementedError

    def neg(self, P: Point) -> Point:
        raise NotImplementedError

    def encode_point(self, P: Point) -> bytes:
        raise NotImplementedError

    def decode_point(self, data: bytes) -> Point:
        raise NotImplementedError

    def sub(self, P: Point, Q: Point) -> Point:
        return self.add(P, self.neg(Q))

    def mult(self, k: int, P: Point) -> Point:
        """
        Multiplication scalaire k*P par échelle de Montgomery

        Le nombre d'itérations ne dépend que de la taille de l'ordre,
        pas des bits du scalaire.
        """
        if k < 0:
            return self.mult(-k, self.neg(P))
        R0, R1 = self.identity, P
        for i in reversed(range(max(self.order.bit_length(), k.bit_length()))):
            if (k >> i) & 1:
                R0 = self.add(R0, R1)
                R1 = self.add(R1, R1)
            else:
                R1 = self.add(R0, R1)
                R0 = self.add(R0, R0)
        return R0

    def base_mult(self, k: int) -> Point:
        return self.mult(k, self.base)

    def is_identity(self, P: Point) -> bool:
        return P == self.identity

    def random_scalar(self) -> int:
        """Tire un scalaire uniforme dans [1, n)"""
        return randbelow(self.order - 1) + 1

    def check_scalar(self, k: int) -> int:
        if not isinstance(k, int) or not 0 <= k < self.order:
            raise OutOfRangeScalar(f"Scalaire hors de [0, n) pour {self.name}")
        return k

    def encode_hex(self, P: Point) -> str:
        return self.encode_point(P).hex()

    def decode_hex(self, value: str) -> Point:
        if value.startswith(('0x', '0X')):
            value = value[2:]
        try:
            data = bytes.fromhex(value)
        except ValueError:
            raise InvalidCurvePoint("Encodage hexadécimal invalide")
        return self.decode_point(data)

    def __repr__(self):
        return f"<Curve {self.name}>"


class Ed25519Curve(Curve):
    """
    Courbe d'Edwards tordue -x² + y² = 1 + d·x²·y² sur 2^255 - 19

    Encodage RFC 8032 : y en little-endian, bit de poids fort = parité de x.
    """

    name = "ed25519"
    p = 2**255 - 19
    order = 2**252 + 27742317777372353535851937790883648493
    d = (-121665 * mod_inv(121666, 2**255 - 19)) % (2**255 - 19)
    identity = (0, 1)
    base = (
        15112221349535400772501151409588531511454012693041857206046113283949847762202,
        46316835694926478169428394003475163141307993866256225615783033603165251855960,
    )

    def is_on_curve(self, P: Point) -> bool:
        x, y = P
        p = self.p
        return (-x * x + y * y - 1 - self.d * x * x * y * y) % p == 0

    def add(self, P: Point, Q: Point) -> Point:
        # Formule complète : pas de cas particulier pour le doublement
        x1, y1 = P
        x2, y2 = Q
        p = self.p
        t = self.d * x1 * x2 * y1 * y2 % p
        x3 = (x1 * y2 + y1 * x2) * mod_inv((1 + t) % p, p) % p
        y3 = (y1 * y2 + x1 * x2) * mod_inv((1 - t) % p, p) % p
        return (x3, y3)

    def neg(self, P: Point) -> Point:
        return ((-P[0]) % self.p, P[1])

    def encode_point(self, P: Point) -> bytes:
        x, y = P
        return (y | ((x & 1) << 255)).to_bytes(32, 'little')

    def decode_point(self, data: bytes) -> Point:
        if len(data) != 32:
            raise InvalidCurvePoint("Un point ed25519 fait 32 octets")
        value = int.from_bytes(data, 'little')
        sign = value >> 255
        y = value & ((1 << 255) - 1)
        p = self.p
        if y >= p:
            raise InvalidCurvePoint("Coordonnée y hors du corps")

        # x² = (y² - 1) / (d·y² + 1)
        u = (y * y - 1) * mod_inv((self.d * y * y + 1) % p, p) % p
        try:
            x = mod_sqrt(u, p)
        except ValueError:
            raise InvalidCurvePoint("Point hors de la courbe ed25519")
        if x == 0 and sign:
            raise InvalidCurvePoint("Encodage non canonique")
        if x & 1 != sign:
            x = p - x
        P = (x, y)
        # Refuse les points d'ordre faible et les composantes de torsion
        if self.mult(self.order, P) != self.identity:
            raise InvalidCurvePoint("Point hors du sous-groupe d'ordre premier")
        return P


class Secp256k1Curve(Curve):
    """
    Courbe de Weierstrass y² = x³ + 7 (famille secp)

    Le point à l'infini est représenté par (0, 0), qui n'est pas sur la courbe.
    Encodage SEC1 : compressé sur 33 octets, 0x00 pour l'infini.
    """

    name = "secp256k1"
    p = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F
    order = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
    a = 0
    b = 7
    identity = (0, 0)
    base = (
        0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798,
        0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8,
    )

    def is_on_curve(self, P: Point) -> bool:
        if P == self.identity:
            return True
        x, y = P
        return (y * y - (x * x * x + self.a * x + self.b)) % self.p == 0

    def add(self, P: Point, Q: Point) -> Point:
        if P == self.identity:
            return Q
        if Q == self.identity:
            return P
        x1, y1 = P
        x2, y2 = Q
        p = self.p
        if x1 == x2:
            if (y1 + y2) % p == 0:
                return self.identity
            lam = (3 * x1 * x1 + self.a) * mod_inv(2 * y1, p) % p
        else:
            lam = (y2 - y1) * mod_inv((x2 - x1) % p, p) % p
        x3 = (lam * lam - x1 - x2) % p
        y3 = (lam * (x1 - x3) - y1) % p
        return (x3, y3)

    def neg(self, P: Point) -> Point:
        if P == self.identity:
            return P
        return (P[0], (-P[1]) % self.p)

    def encode_point(self, P: Point) -> bytes:
        if P == self.identity:
            return b'\x00'
        x, y = P
        return bytes([2 + (y & 1)]) + x.to_bytes(32, 'big')

    def decode_point(self, data: bytes) -> Point:
        if data == b'\x00':
            return self.identity
        p = self.p
        if len(data) == 33 and data[0] in (2, 3):
            x = int.from_bytes(data[1:], 'big')
            if x >= p:
                raise InvalidCurvePoint("Coordonnée x hors du corps")
            try:
                y = mod_sqrt((x * x * x + self.a * x + self.b) % p, p)
            except ValueError:
                raise InvalidCurvePoint("Point hors de la courbe secp256k1")
            if y & 1 != data[0] & 1:
                y = p - y
            return (x, y)
        if len(data) == 65 and data[0] == 4:
            x = int.from_bytes(data[1:33], 'big')
            y = int.from_bytes(data[33:], 'big')
            if x >= p or y >= p or not self.is_on_curve((x, y)):
                raise InvalidCurvePoint("Point hors de la courbe secp256k1")
            return (x, y)
        raise InvalidCurvePoint("Encodage SEC1 invalide")


ED25519 = Ed25519Curve()
SECP256K1 = Secp256k1Curve()

CURVES: Dict[str, Curve] = {
    ED25519.name: ED25519,
    SECP256K1.name: SECP256K1,
}


def get_curve(name: str) -> Curve:
    """Sélectionne une courbe par son nom ("ed25519" ou "secp256k1")"""
    try:
        return CURVES[name.lower()]
    except KeyError:
        raise ValueError(f"Courbe inconnue: {name}")


def default_curve() -> Curve:
    """Courbe choisie par la configuration (DEFAULT_CURVE)"""
    return get_curve(config.DEFAULT_CURVE)
