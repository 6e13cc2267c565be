import logging
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from zkvoting import config
from zkvoting.crypto_utils.curves import Curve, ED25519, SECP256K1
from zkvoting.ecelgamal import ECEG_decrypt
from zkvoting.errors import InvalidCurvePoint

logger = logging.getLogger(__name__)

app = FastAPI(title="Service de déchiffrement de l'autorité de dépouillement")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class DecryptRequest(BaseModel):
    message: str   # Chiffré C (hexadécimal)
    r: str         # Point éphémère R (hexadécimal)


class DecryptResponse(BaseModel):
    message: str


class AffinePoint(BaseModel):
    x: str
    y: str


class DecryptEvmResponse(BaseModel):
    message: AffinePoint


def _parse_key(value: str) -> Optional[int]:
    if not value:
        return None
    return int(value[2:] if value.startswith(("0x", "0X")) else value, 16)


class ECService:
    """Détient les clés privées en mémoire ; elles ne sont ni stockées ni journalisées"""

    def __init__(self, private_key: Optional[int] = None, ec_private_key: Optional[int] = None):
        self._private_key = private_key
        self._ec_private_key = ec_private_key

    @classmethod
    def from_config(cls) -> "ECService":
        return cls(_parse_key(config.PRIV_KEY), _parse_key(config.PRIV_KEY_EC))

    def _decrypt(self, key: Optional[int], curve: Curve, message: str, r: str):
        if key is None:
            raise HTTPException(status_code=503, detail="Clé privée non configurée")
        try:
            C = curve.decode_hex(message)
            R = curve.decode_hex(r)
        except InvalidCurvePoint:
            logger.warning("Point invalide reçu sur %s", curve.name)
            raise HTTPException(status_code=400, detail="Point invalide")
        return ECEG_decrypt(key, C, R, curve)

    def decrypt(self, message: str, r: str) -> DecryptResponse:
        M = self._decrypt(self._private_key, ED25519, message, r)
        return DecryptResponse(message=ED25519.encode_hex(M))

    def decrypt_evm(self, message: str, r: str) -> DecryptEvmResponse:
        M = self._decrypt(self._ec_private_key, SECP256K1, message, r)
        # Le neutre est renvoyé comme (0, 0)
        return DecryptEvmResponse(message=AffinePoint(x=str(M[0]), y=str(M[1])))


_ec_service: Optional[ECService] = None


def get_ec_service() -> ECService:
    global _ec_service
    if _ec_service is None:
        _ec_service = ECService.from_config()
    return _ec_service


@app.get("/health")
async def health():
    """Vérifie que le service répond"""
    return {"status": "ok"}


@app.post("/ec/decrypt", response_model=DecryptResponse)
def decrypt(request: DecryptRequest, service: ECService = Depends(get_ec_service)):
    """Déchiffre un point ed25519 : M = C - sk·R"""
    return service.decrypt(request.message, request.r)


@app.post("/ec/decrypt/evm", response_model=DecryptEvmResponse)
def decrypt_evm(request: DecryptRequest, service: ECService = Depends(get_ec_service)):
    """Déchiffre un point secp256k1 : M = C - sk·R"""
    return service.decrypt_evm(request.message, request.r)


if __name__ == "__main__":
    config.setup_logging()
    uvicorn.run("zkvoting.api:app", host=config.HOST, port=config.PORT)
