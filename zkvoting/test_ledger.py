import dataclasses
from concurrent.futures import ThreadPoolExecutor

import pytest

from zkvoting.ecelgamal import ECEG_decrypt, ECEG_generate_keys
from zkvoting.errors import LeafNotFound, RejectReason, TallyNotReady, VoteRejected
from zkvoting.ledger import ProposalLedger
from zkvoting.merkle import Leaf, MerkleTree
from zkvoting.voting import VoteBuilder, create_vote

START, END = 1000, 2000

VOTERS = [
    Leaf("0x70997970C51812dc3A010C7d01b50e0d17dc79C9"),
    Leaf("0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"),
    Leaf("0x90F79bf6EB2c4f870365E785982E1f101E93b906"),
    Leaf("0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"),
]
OUTSIDER = Leaf("0x15d34AAf54267DB7D7c367839AAf71A00a2C6A65")


@pytest.fixture
def election(curve):
    sk, pub = ECEG_generate_keys(curve)
    tree = MerkleTree(VOTERS)
    ledger = ProposalLedger(pub, curve)
    proposal_id = ledger.init_proposal(
        ["A", "B", "C"], tree.root, START, END, commitment=curve.random_scalar()
    )
    builder = VoteBuilder(pub, curve)
    return sk, tree, ledger, proposal_id, builder


def decryptor_for(sk, curve):
    return lambda C, R: ECEG_decrypt(sk, C, R, curve)


def cast(ledger, builder, tree, proposal_id, voter, choice, now=START + 1):
    proposal = ledger.get_proposal(proposal_id)
    submission = builder.build(proposal, tree, voter, choice)
    return ledger.vote(submission, now=now)


def test_full_campaign(curve, election):
    sk, tree, ledger, pid, builder = election
    for voter, choice in zip(VOTERS, [0, 1, 2, 0]):
        cast(ledger, builder, tree, pid, voter, choice)

    assert ledger.snapshot(pid).version == 4
    assert ledger.has_voted(pid, VOTERS[0])
    result = ledger.tally(pid, decryptor_for(sk, curve), now=END)
    assert result.counts == [2, 1, 1]
    assert result.version == 4


def test_concurrent_votes_are_folded_once(curve, election):
    sk, tree, ledger, pid, builder = election
    proposal = ledger.get_proposal(pid)
    submissions = [builder.build(proposal, tree, voter, choice)
                   for voter, choice in zip(VOTERS, [0, 1, 2, 0])]
    # Le premier bulletin est soumis deux fois en parallèle
    batch = submissions + [submissions[0]]

    def submit(submission):
        try:
            return ledger.vote(submission, now=START + 1)
        except VoteRejected as e:
            return e.reason

    with ThreadPoolExecutor(max_workers=len(batch)) as pool:
        outcomes = list(pool.map(submit, batch))

    versions = sorted(o for o in outcomes if isinstance(o, int))
    assert versions == [1, 2, 3, 4]
    assert [o for o in outcomes if isinstance(o, RejectReason)] == [RejectReason.ALREADY_VOTED]
    assert ledger.snapshot(pid).version == 4
    assert ledger.tally(pid, decryptor_for(sk, curve), now=END).counts == [2, 1, 1]


def test_tally_without_votes(curve, election):
    sk, _, ledger, pid, _ = election
    result = ledger.tally(pid, decryptor_for(sk, curve), now=END, upper_bound=10)
    assert result.counts == [0, 0, 0]


def test_unblinded_initial_boxes(curve):
    sk, pub = ECEG_generate_keys(curve)
    tree = MerkleTree(VOTERS)
    ledger = ProposalLedger(pub, curve)
    pid = ledger.init_proposal(["A", "B"], tree.root, START, END, 5, blind_initial=False)
    proposal = ledger.get_proposal(pid)
    assert proposal.ballot_boxes == [curve.identity, curve.identity]
    assert proposal.random_numbers == [0, 0]
    cast(ledger, VoteBuilder(pub, curve), tree, pid, VOTERS[2], 1)
    assert ledger.tally(pid, decryptor_for(sk, curve), now=END).counts == [0, 1]


def test_tally_before_close_is_refused(curve, election):
    sk, _, ledger, pid, _ = election
    with pytest.raises(TallyNotReady):
        ledger.tally(pid, decryptor_for(sk, curve), now=END - 1)


def test_reject_reasons(curve, election):
    _, tree, ledger, pid, builder = election
    proposal = ledger.get_proposal(pid)
    good = builder.build(proposal, tree, VOTERS[0], 1)

    def rejected(submission, now=START + 1):
        with pytest.raises(VoteRejected) as e:
            ledger.vote(submission, now=now)
        return e.value.reason

    assert rejected(dataclasses.replace(good, proposal_id=42)) == RejectReason.UNKNOWN_PROPOSAL
    assert rejected(good, now=END) == RejectReason.CAMPAIGN_NOT_ACTIVE
    assert rejected(good, now=START - 1) == RejectReason.CAMPAIGN_NOT_ACTIVE
    assert rejected(dataclasses.replace(good, voter=OUTSIDER)) == \
        RejectReason.INVALID_ELIGIBILITY_PROOF
    assert rejected(dataclasses.replace(good, voter=VOTERS[1])) == \
        RejectReason.INVALID_ELIGIBILITY_PROOF
    assert rejected(dataclasses.replace(good, ciphertexts=good.ciphertexts[:2])) == \
        RejectReason.CANDIDATE_COUNT_MISMATCH

    shifted = list(good.randomness)
    shifted[0] = (shifted[0] + 1) % curve.order
    assert rejected(dataclasses.replace(good, randomness=shifted)) == RejectReason.SUM_NOT_VALID

    bad_r = [(r + 1) % curve.order for r in good.proof_r]
    assert rejected(dataclasses.replace(good, proof_r=bad_r)) == RejectReason.VOTES_NOT_VALID

    # Rien n'a été agrégé
    assert ledger.snapshot(pid).version == 0

    ledger.vote(good, now=START + 1)
    assert rejected(good) == RejectReason.ALREADY_VOTED
    assert ledger.snapshot(pid).version == 1


def test_snapshot_is_stable(curve, election):
    _, tree, ledger, pid, builder = election
    before = ledger.snapshot(pid)
    copy = ledger.get_proposal(pid)
    cast(ledger, builder, tree, pid, VOTERS[3], 2)
    after = ledger.snapshot(pid)
    assert before.version == 0 and after.version == 1
    assert before.ciphertexts != after.ciphertexts
    assert copy.version == 0


def test_builder_requires_matching_tree(curve, election):
    _, _, ledger, pid, builder = election
    other = MerkleTree(VOTERS[:2])
    with pytest.raises(ValueError):
        builder.build(ledger.get_proposal(pid), other, VOTERS[0], 0)
    with pytest.raises(LeafNotFound):
        builder.build(ledger.get_proposal(pid), MerkleTree(VOTERS), OUTSIDER, 0)


def test_init_proposal_validation(curve, election):
    _, tree, ledger, _, _ = election
    with pytest.raises(ValueError):
        ledger.init_proposal(["A"], tree.root, START, END, 1)
    with pytest.raises(ValueError):
        ledger.init_proposal(["A", "B"], tree.root, END, START, 1)
    with pytest.raises(ValueError):
        ledger.init_proposal(["A", "B"], b"\x00" * 31, START, END, 1)
    assert ledger.proposal_count == 1


def test_create_vote():
    assert create_vote(1, 3) == [0, 1, 0]
    with pytest.raises(ValueError):
        create_vote(3, 3)
