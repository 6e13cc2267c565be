from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple

from zkvoting.crypto_utils.curves import Point
from zkvoting.merkle import Leaf


@dataclass
class BallotSlot:
    """Contribution d'un vote pour un candidat : C = M + x·Pub"""
    ciphertext: Point
    randomness: int   # Publiée avec le chiffré


@dataclass
class BindingProof:
    """Transcription (T, r) avec T = v·Pub et r = v + c·x mod n"""
    t: Point
    r: int


@dataclass
class VoteSubmission:
    """Bulletin complet tel que soumis au registre"""
    proposal_id: int
    voter: Leaf
    randomness: List[int]
    ciphertexts: List[Point]
    eligibility_proof: List[bytes]
    proof_r: List[int]
    proof_t: List[Point]


@dataclass(frozen=True)
class AggregateSnapshot:
    """Instantané versionné des agrégats d'une proposition"""
    proposal_id: int
    version: int
    ciphertexts: Tuple[Point, ...]
    randomness: Tuple[int, ...]


@dataclass
class Proposal:
    id: int
    candidates: List[str]
    merkle_root: bytes
    commitment: int               # Scalaire de défi c, fixé à la création
    start_date: int
    end_date: int
    ballot_boxes: List[Point]     # Somme des chiffrés par candidat
    random_numbers: List[int]     # Somme des aléas par candidat
    metadata: bytes = b""
    version: int = 0
    receipts: Set[Leaf] = field(default_factory=set)

    def snapshot(self) -> AggregateSnapshot:
        return AggregateSnapshot(
            proposal_id=self.id,
            version=self.version,
            ciphertexts=tuple(self.ballot_boxes),
            randomness=tuple(self.random_numbers),
        )


@dataclass
class TallyResult:
    proposal_id: Optional[int]
    version: int
    counts: List[int]

    @property
    def total_votes(self) -> int:
        return sum(self.counts)
