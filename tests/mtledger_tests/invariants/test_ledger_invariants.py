"""
Ledger Invariant Tests using Property-Based Testing

Random operation sequences are run against a fresh ledger. After every step:
- tracked supply equals the sum of balances for each token id
- a rejected operation leaves balances, approvals and supply unchanged
- events are only emitted by operations that commit

Uses Hypothesis to generate the sequences.
"""

from hypothesis import given, settings, strategies as st

from mtledger.core.contracts.erc1155 import ERC1155Ledger
from mtledger.core.ledger_exceptions import LedgerError
from mtledger.core.safe_math import MAX_UINT256

ACCOUNTS = [0, 1, 2, 3]
TOKEN_IDS = [1, 2, 3]

accounts = st.sampled_from(ACCOUNTS)
token_ids = st.sampled_from(TOKEN_IDS)
amounts = st.one_of(
    st.integers(min_value=0, max_value=2_000),
    st.sampled_from([MAX_UINT256, MAX_UINT256 + 1, -1]),
)
batch = st.lists(st.tuples(token_ids, amounts), max_size=4)

operations = st.one_of(
    st.tuples(st.just("mint"), accounts, accounts, token_ids, amounts),
    st.tuples(st.just("burn"), accounts, accounts, token_ids, amounts),
    st.tuples(st.just("transfer"), accounts, accounts, accounts, token_ids, amounts),
    st.tuples(st.just("approve"), accounts, accounts, st.sampled_from([0, 1, 2])),
    st.tuples(st.just("mint_batch"), accounts, accounts, batch),
    st.tuples(st.just("burn_batch"), accounts, accounts, batch),
    st.tuples(st.just("batch_transfer"), accounts, accounts, accounts, batch),
)


def apply(ledger: ERC1155Ledger, op: tuple) -> None:
    kind, *args = op
    if kind == "mint":
        ledger.mint(*args)
    elif kind == "burn":
        ledger.burn(*args)
    elif kind == "transfer":
        ledger.safe_transfer_from(*args)
    elif kind == "approve":
        ledger.set_approval_for_all(*args)
    else:
        *addresses, pairs = args
        ids = [tid for tid, _ in pairs]
        values = [value for _, value in pairs]
        if kind == "mint_batch":
            ledger.mint_batch(*addresses, ids, values)
        elif kind == "burn_batch":
            ledger.burn_batch(*addresses, ids, values)
        else:
            ledger.safe_batch_transfer_from(*addresses, ids, values)


class TestLedgerInvariants:
    """Property tests over random operation sequences."""

    @given(st.lists(operations, max_size=30))
    @settings(max_examples=200, deadline=None)
    def test_conservation_and_atomicity(self, ops):
        ledger = ERC1155Ledger()

        for op in ops:
            digest = ledger.balances.snapshot_digest()
            approvals = ledger.approvals.snapshot()
            supply = dict(ledger.supply)
            event_count = len(ledger.events)

            try:
                apply(ledger, op)
            except LedgerError:
                assert ledger.balances.snapshot_digest() == digest, f"state changed by rejected {op}"
                assert ledger.approvals.snapshot() == approvals
                assert ledger.supply == supply
                assert len(ledger.events) == event_count
            else:
                assert len(ledger.events) == event_count + 1

            for token_id in TOKEN_IDS:
                assert ledger.verify_conservation(token_id), f"supply drift after {op}"

    @given(st.lists(st.tuples(accounts, token_ids), max_size=20))
    @settings(max_examples=100, deadline=None)
    def test_zero_account_never_holds_balance(self, pairs):
        ledger = ERC1155Ledger()
        for account, token_id in pairs:
            try:
                ledger.mint(1, account, token_id, 10)
                ledger.safe_transfer_from(account, account, 0, token_id, 1)
            except LedgerError:
                pass
        assert not any(ledger.balances.contains(0, token_id) for token_id in TOKEN_IDS)

    @given(
        st.lists(st.integers(min_value=0, max_value=MAX_UINT256), min_size=1, max_size=5),
    )
    @settings(max_examples=100, deadline=None)
    def test_batch_mint_duplicates_are_all_or_nothing(self, values):
        ledger = ERC1155Ledger()
        ids = [TOKEN_IDS[0]] * len(values)
        try:
            ledger.mint_batch(1, 1, ids, values)
        except LedgerError:
            assert ledger.balance_of(1, TOKEN_IDS[0]) == 0
            assert sum(values) > MAX_UINT256
        else:
            assert ledger.balance_of(1, TOKEN_IDS[0]) == sum(values)
