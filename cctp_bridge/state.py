"""In-process chain state.

A minimal EVM-like ledger the bridge and its collaborators operate on:
native balances, ERC-20 balances and allowances, contract storage
and emitted event logs.

Public entrypoints run inside :py:meth:`ChainState.transaction`.
Like ``evm_snapshot`` / ``evm_revert`` on Anvil, the state is snapshotted
before the call and restored if the call raises, so a call either commits
in full, including its nested collaborator calls, or leaves no trace.

Example::

    state = ChainState()
    state.set_native_balance(user, 10**18)

    with state.transaction():
        state.transfer_native(user, bridge, 10**18)
        raise InvalidAmount("boom")

    # Rolled back
    assert state.get_native_balance(user) == 10**18
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator

from eth_typing import ChecksumAddress, HexAddress
from web3 import Web3

from cctp_bridge.revert import ExternalCallFailure, InsufficientBalance

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class LogEntry:
    """An event emitted by a contract."""

    #: Emitting contract
    address: ChecksumAddress

    #: Event payload, a dataclass like :py:class:`cctp_bridge.event.BridgeDepositReceived`
    event: Any

    @property
    def event_name(self) -> str:
        return type(self.event).__name__


@dataclass(slots=True, frozen=True)
class _Snapshot:
    native_balances: dict
    balances: dict
    allowances: dict
    storage: dict
    log_count: int


@dataclass
class ChainState:
    """Balances, allowances and logs of one simulated chain."""

    #: holder -> wei
    native_balances: dict[ChecksumAddress, int] = field(default_factory=dict)

    #: (token, holder) -> raw amount
    balances: dict[tuple[ChecksumAddress, ChecksumAddress], int] = field(default_factory=dict)

    #: (token, owner, spender) -> raw amount
    allowances: dict[tuple[ChecksumAddress, ChecksumAddress, ChecksumAddress], int] = field(default_factory=dict)

    #: Contract storage slots other than token balances, (contract, key) -> value.
    #: Values must be immutable.
    storage: dict[tuple[ChecksumAddress, str], Any] = field(default_factory=dict)

    #: All committed logs, in emission order
    logs: list[LogEntry] = field(default_factory=list)

    #: Deployed contract objects by address. Deployments are not rolled back.
    contracts: dict[ChecksumAddress, Any] = field(default_factory=dict, repr=False)

    _snapshots: dict[int, _Snapshot] = field(default_factory=dict, repr=False)
    _next_snapshot_id: int = field(default=1, repr=False)

    def register_contract(self, address: HexAddress | str, instance: Any):
        """Make a contract object callable by address."""
        self.contracts[Web3.to_checksum_address(address)] = instance

    def get_contract(self, address: HexAddress | str) -> Any:
        """Resolve a contract object, like casting an address to an interface in Solidity.

        :raise ExternalCallFailure:
            Nothing deployed at the address
        """
        address = Web3.to_checksum_address(address)
        instance = self.contracts.get(address)
        if instance is None:
            raise ExternalCallFailure(f"No contract deployed at {address}")
        return instance

    def snapshot(self) -> int:
        """Take a snapshot of the current state.

        :return:
            Snapshot id for :py:meth:`revert`
        """
        snapshot_id = self._next_snapshot_id
        self._next_snapshot_id += 1
        self._snapshots[snapshot_id] = _Snapshot(
            native_balances=dict(self.native_balances),
            balances=dict(self.balances),
            allowances=dict(self.allowances),
            storage=dict(self.storage),
            log_count=len(self.logs),
        )
        return snapshot_id

    def revert(self, snapshot_id: int) -> bool:
        """Restore a snapshot.

        Snapshots taken after this one are discarded.

        :return:
            True if a snapshot was reverted
        """
        snap = self._snapshots.get(snapshot_id)
        if snap is None:
            return False
        self.native_balances = dict(snap.native_balances)
        self.balances = dict(snap.balances)
        self.allowances = dict(snap.allowances)
        self.storage = dict(snap.storage)
        del self.logs[snap.log_count :]
        self._discard(snapshot_id)
        return True

    def _discard(self, snapshot_id: int):
        for key in [k for k in self._snapshots if k >= snapshot_id]:
            del self._snapshots[key]

    @contextmanager
    def transaction(self) -> Iterator["ChainState"]:
        """Run a block atomically.

        Any exception restores the state of the block start and is re-raised.
        """
        snapshot_id = self.snapshot()
        try:
            yield self
        except BaseException as e:
            self.revert(snapshot_id)
            logger.debug("Reverted snapshot %d: %s", snapshot_id, e)
            raise
        else:
            self._discard(snapshot_id)

    def emit(self, address: HexAddress | str, event: Any):
        """Append an event log."""
        self.logs.append(LogEntry(address=Web3.to_checksum_address(address), event=event))

    def get_logs(self, event_type: type | None = None, address: HexAddress | str | None = None) -> list[LogEntry]:
        """Filter committed logs by event class and emitting address."""
        if address is not None:
            address = Web3.to_checksum_address(address)
        return [log for log in self.logs if (event_type is None or isinstance(log.event, event_type)) and (address is None or log.address == address)]

    def get_native_balance(self, holder: HexAddress | str) -> int:
        return self.native_balances.get(Web3.to_checksum_address(holder), 0)

    def set_native_balance(self, holder: HexAddress | str, amount: int):
        assert amount >= 0, f"Negative balance: {amount}"
        self.native_balances[Web3.to_checksum_address(holder)] = amount

    def transfer_native(self, sender: HexAddress | str, receiver: HexAddress | str, amount: int):
        """Move native value, like ``msg.value`` attached to a call.

        :raise InsufficientBalance:
            If the sender cannot cover the amount
        """
        assert amount >= 0, f"Negative amount: {amount}"
        balance = self.get_native_balance(sender)
        if balance < amount:
            raise InsufficientBalance(f"Native balance {balance} of {sender} below {amount}")
        self.set_native_balance(sender, balance - amount)
        self.set_native_balance(receiver, self.get_native_balance(receiver) + amount)
