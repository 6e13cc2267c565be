import logging
import os

# Clés de l'autorité de dépouillement (hexadécimal, jamais journalisées)
PRIV_KEY = os.environ.get("PRIV_KEY", "")        # ed25519
PRIV_KEY_EC = os.environ.get("PRIV_KEY_EC", "")  # secp256k1

# Service de déchiffrement
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "10000"))
CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]

# Protocole
DEFAULT_CURVE = os.environ.get("DEFAULT_CURVE", "secp256k1")
TALLY_UPPER_BOUND = int(os.environ.get("TALLY_UPPER_BOUND", "100"))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


def setup_logging(level: str = LOG_LEVEL):
    """Configure la journalisation du service"""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
