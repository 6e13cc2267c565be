"""Vote confidentiel : chiffrement homomorphe sur courbe elliptique et éligibilité par arbre de Merkle"""

__version__ = "0.1.0"
