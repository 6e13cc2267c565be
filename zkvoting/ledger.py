"""
Registre de référence des propositions

Simule en mémoire le registre externe : création des propositions, contrôle
des bulletins, agrégation homomorphe des chiffrés et des aléas, reçus de vote.
Chaque vote accepté est appliqué sous verrou, dans l'ordre d'acceptation.
"""

import copy
import logging
import threading
import time
from typing import Dict, List, Optional

from zkvoting.crypto_utils.curves import Curve, Point, default_curve
from zkvoting.errors import InvalidProof, RejectReason, TallyNotReady, VoteRejected
from zkvoting.merkle import DEFAULT_HASHER, PairHasher, verify_proof
from zkvoting.models import AggregateSnapshot, Proposal, TallyResult, VoteSubmission
from zkvoting.proofs import verify_ballot
from zkvoting.tally import Decryptor, resolve_snapshot

logger = logging.getLogger(__name__)


class ProposalLedger:
    def __init__(self, public_key: Point, curve: Optional[Curve] = None,
                 hasher: PairHasher = DEFAULT_HASHER):
        """
        Args:
            public_key: Clé publique de l'autorité de dépouillement
            curve: Courbe des chiffrés
            hasher: Stratégie de hachage de l'arbre d'éligibilité
        """
        curve = curve or default_curve()
        if not curve.is_on_curve(public_key) or public_key == curve.identity:
            raise ValueError("Clé publique invalide")
        self.public_key = public_key
        self.curve = curve
        self.hasher = hasher
        self._proposals: Dict[int, Proposal] = {}
        self._lock = threading.Lock()

    @property
    def proposal_count(self) -> int:
        return len(self._proposals)

    def init_proposal(self, candidates: List[str], merkle_root: bytes, start_date: int,
                      end_date: int, commitment: int, metadata: bytes = b"",
                      blind_initial: bool = True) -> int:
        """
        Crée une proposition et initialise ses urnes

        Avec blind_initial, chaque urne démarre sur un chiffré de zéro
        (neutre + r·Pub) dont l'aléa r est publié ; sinon sur le neutre.

        Returns:
            int: L'identifiant de la proposition
        """
        if len(candidates) < 2:
            raise ValueError("Il faut au moins 2 candidats")
        if end_date <= start_date:
            raise ValueError("La date de fin doit suivre la date de début")
        if len(merkle_root) != 32:
            raise ValueError("La racine de Merkle fait 32 octets")
        self.curve.check_scalar(commitment)

        ballot_boxes = []
        random_numbers = []
        for _ in candidates:
            if blind_initial:
                r = self.curve.random_scalar()
                ballot_boxes.append(self.curve.mult(r, self.public_key))
                random_numbers.append(r)
            else:
                ballot_boxes.append(self.curve.identity)
                random_numbers.append(0)

        with self._lock:
            proposal_id = len(self._proposals)
            self._proposals[proposal_id] = Proposal(
                id=proposal_id,
                candidates=list(candidates),
                merkle_root=bytes(merkle_root),
                commitment=commitment,
                start_date=start_date,
                end_date=end_date,
                ballot_boxes=ballot_boxes,
                random_numbers=random_numbers,
                metadata=bytes(metadata),
            )
        logger.info("Proposition %d créée avec %d candidats", proposal_id, len(candidates))
        return proposal_id

    def _get(self, proposal_id: int) -> Proposal:
        proposal = self._proposals.get(proposal_id)
        if proposal is None:
            raise VoteRejected(RejectReason.UNKNOWN_PROPOSAL)
        return proposal

    def get_proposal(self, proposal_id: int) -> Proposal:
        """Copie en lecture seule de la proposition"""
        with self._lock:
            return copy.deepcopy(self._get(proposal_id))

    def snapshot(self, proposal_id: int) -> AggregateSnapshot:
        with self._lock:
            return self._get(proposal_id).snapshot()

    def has_voted(self, proposal_id: int, voter) -> bool:
        with self._lock:
            return voter in self._get(proposal_id).receipts

    def vote(self, submission: VoteSubmission, now: Optional[int] = None) -> int:
        """
        Contrôle un bulletin et l'ajoute aux urnes

        Returns:
            int: La nouvelle version des agrégats

        Raises:
            VoteRejected: Avec un motif distinguable
        """
        if now is None:
            now = int(time.time())
        curve = self.curve

        with self._lock:
            proposal = self._get(submission.proposal_id)

            if not proposal.start_date <= now < proposal.end_date:
                raise VoteRejected(RejectReason.CAMPAIGN_NOT_ACTIVE)
            if submission.voter in proposal.receipts:
                raise VoteRejected(RejectReason.ALREADY_VOTED)
            if not verify_proof(submission.voter, submission.eligibility_proof,
                                proposal.merkle_root, self.hasher):
                raise VoteRejected(RejectReason.INVALID_ELIGIBILITY_PROOF)

            try:
                verify_ballot(
                    submission.ciphertexts, submission.randomness,
                    submission.proof_t, submission.proof_r,
                    proposal.commitment, self.public_key,
                    len(proposal.candidates), curve,
                )
            except InvalidProof as e:
                logger.warning("Vote refusé sur la proposition %d : %s",
                               proposal.id, e.reason.value)
                raise VoteRejected(e.reason)

            # Agrégation homomorphe
            for i in range(len(proposal.candidates)):
                proposal.ballot_boxes[i] = curve.add(proposal.ballot_boxes[i],
                                                     submission.ciphertexts[i])
                proposal.random_numbers[i] = (proposal.random_numbers[i]
                                              + submission.randomness[i]) % curve.order
            proposal.receipts.add(submission.voter)
            proposal.version += 1
            logger.info("Vote accepté sur la proposition %d (version %d)",
                        proposal.id, proposal.version)
            return proposal.version

    def tally(self, proposal_id: int, decryptor: Decryptor, now: Optional[int] = None,
              upper_bound: Optional[int] = None, search: str = "linear") -> TallyResult:
        """
        Dépouille une proposition close

        Raises:
            TallyNotReady: Si la campagne n'est pas terminée
        """
        if now is None:
            now = int(time.time())
        with self._lock:
            proposal = self._get(proposal_id)
            if now < proposal.end_date:
                raise TallyNotReady("La campagne n'est pas terminée")
            snapshot = proposal.snapshot()

        if upper_bound is None:
            upper_bound = snapshot.version
        return resolve_snapshot(snapshot, decryptor, self.curve, upper_bound, search)
