import logging
from typing import Optional

import requests

from zkvoting.crypto_utils.curves import Curve, Point, default_curve
from zkvoting.errors import InvalidCurvePoint

logger = logging.getLogger(__name__)

ENDPOINTS = {
    "ed25519": "ec/decrypt",
    "secp256k1": "ec/decrypt/evm",
}


class RemoteDecryptor:
    """
    Déchiffre via le service de l'autorité ; utilisable comme déchiffreur
    du dépouillement (appel (C, R) -> M)
    """

    def __init__(self, base_url: str, curve: Optional[Curve] = None, timeout: float = 10.0):
        curve = curve or default_curve()
        self.url = f"{base_url.rstrip('/')}/{ENDPOINTS[curve.name]}"
        self.curve = curve
        self.timeout = timeout

    def decrypt(self, C: Point, R: Point) -> Point:
        """
        Raises:
            requests.HTTPError: Si le service répond par une erreur
            InvalidCurvePoint: Si la réponse n'est pas un point valide
        """
        logger.debug("Déchiffrement distant via %s", self.url)
        response = requests.post(
            self.url,
            json={"message": self.curve.encode_hex(C), "r": self.curve.encode_hex(R)},
            timeout=self.timeout,
        )
        response.raise_for_status()
        message = response.json()["message"]

        if isinstance(message, dict):
            try:
                M = (int(message["x"]), int(message["y"]))
            except (KeyError, TypeError, ValueError):
                raise InvalidCurvePoint("Réponse du service mal formée")
            if not self.curve.is_on_curve(M):
                raise InvalidCurvePoint("Le service a renvoyé un point hors de la courbe")
            return M
        return self.curve.decode_hex(message)

    def __call__(self, C: Point, R: Point) -> Point:
        return self.decrypt(C, R)
