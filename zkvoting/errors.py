from enum import Enum


class RejectReason(str, Enum):
    """Motifs de rejet d'un vote, distinguables par l'appelant"""
    UNKNOWN_PROPOSAL = "unknown_proposal"
    CAMPAIGN_NOT_ACTIVE = "campaign_not_active"
    ALREADY_VOTED = "already_voted"
    INVALID_ELIGIBILITY_PROOF = "invalid_eligibility_proof"
    CANDIDATE_COUNT_MISMATCH = "candidate_count_mismatch"
    SUM_NOT_VALID = "sum_not_valid"
    VOTES_NOT_VALID = "votes_not_valid"


# Messages affichables : ne révèlent jamais le candidat visé
REJECT_MESSAGES = {
    RejectReason.UNKNOWN_PROPOSAL: "Proposition inconnue",
    RejectReason.CAMPAIGN_NOT_ACTIVE: "La campagne n'est pas ouverte",
    RejectReason.ALREADY_VOTED: "Vous avez déjà voté pour cette proposition",
    RejectReason.INVALID_ELIGIBILITY_PROOF: "Preuve d'éligibilité invalide",
    RejectReason.CANDIDATE_COUNT_MISMATCH: "Nombre de candidats incorrect",
    RejectReason.SUM_NOT_VALID: "Somme des votes invalide",
    RejectReason.VOTES_NOT_VALID: "Preuve des votes invalide",
}


class VotingError(Exception):
    """Exception de base du protocole de vote"""
    pass


class LeafNotFound(VotingError):
    """L'adresse demandée n'appartient pas à l'arbre d'éligibilité"""
    pass


class InvalidCurvePoint(VotingError):
    """Octets mal formés ou point hors de la courbe"""
    pass


class OutOfRangeScalar(VotingError):
    """Scalaire hors de l'intervalle [0, n)"""
    pass


class UnresolvedTally(VotingError):
    """Aucun compte dans la borne ne correspond au point déchiffré"""
    pass


class TallyNotReady(VotingError):
    """Dépouillement demandé avant la clôture de la campagne"""
    pass


class InvalidProof(VotingError):
    """Échec de vérification, avec un motif distinguable"""

    def __init__(self, reason: RejectReason, message: str = None):
        self.reason = reason
        super().__init__(message or REJECT_MESSAGES[reason])


class VoteRejected(InvalidProof):
    """Vote refusé par le registre"""
    pass
