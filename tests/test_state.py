"""Snapshot and rollback of the chain state."""

import pytest

from cctp_bridge.revert import ExternalCallFailure, InsufficientBalance, InvalidAmount
from cctp_bridge.state import ChainState
from cctp_bridge.testing import make_address
from cctp_bridge.token import Transfer, create_token


def test_transaction_commits(state: ChainState, user_1, user_2):
    state.set_native_balance(user_1, 100)
    with state.transaction():
        state.transfer_native(user_1, user_2, 40)

    assert state.get_native_balance(user_1) == 60
    assert state.get_native_balance(user_2) == 40


def test_transaction_rolls_back(state: ChainState, user_1, user_2):
    token = create_token(state, make_address("token"), "TKN", supply=1_000, owner=user_1)
    state.set_native_balance(user_1, 100)
    state.storage[(token.address, "paused")] = False
    log_count = len(state.logs)

    with pytest.raises(InvalidAmount):
        with state.transaction():
            state.transfer_native(user_1, user_2, 40)
            token.transfer(user_1, user_2, 500)
            token.approve(user_1, user_2, 10)
            state.storage[(token.address, "paused")] = True
            raise InvalidAmount("boom")

    assert state.get_native_balance(user_1) == 100
    assert state.get_native_balance(user_2) == 0
    assert token.balance_of(user_1) == 1_000
    assert token.allowance(user_1, user_2) == 0
    assert state.storage[(token.address, "paused")] is False
    assert len(state.logs) == log_count

    # Deployments stay
    assert state.get_contract(token.address) is token


def test_nested_snapshots(state: ChainState, user_1):
    state.set_native_balance(user_1, 1)
    outer = state.snapshot()
    state.set_native_balance(user_1, 2)
    inner = state.snapshot()
    state.set_native_balance(user_1, 3)

    assert state.revert(outer)
    assert state.get_native_balance(user_1) == 1

    # Reverting the outer snapshot discarded the inner one
    assert not state.revert(inner)


def test_revert_unknown_snapshot(state: ChainState):
    assert not state.revert(999)


def test_get_logs(state: ChainState, user_1, user_2):
    a = create_token(state, make_address("a"), "A", supply=10, owner=user_1)
    b = create_token(state, make_address("b"), "B", supply=10, owner=user_1)
    a.transfer(user_1, user_2, 1)

    assert len(state.get_logs(Transfer)) == 3
    assert [log.event.value for log in state.get_logs(Transfer, a.address)] == [10, 1]
    assert state.get_logs(Transfer, b.address)[0].event_name == "Transfer"


def test_no_contract(state: ChainState):
    with pytest.raises(ExternalCallFailure):
        state.get_contract(make_address("nothing"))


def test_native_overdraft(state: ChainState, user_1, user_2):
    state.set_native_balance(user_1, 5)
    with pytest.raises(InsufficientBalance):
        state.transfer_native(user_1, user_2, 6)
