"""ERC-20 tokens.

- :py:class:`ERC20` is the token interface the bridge consumes
- :py:class:`LedgerToken` implements it on top of :py:class:`cctp_bridge.state.ChainState`
- :py:class:`WrappedNativeToken` adds WETH9 ``deposit()`` / ``withdraw()``

Every state changing method takes the calling account as its first argument,
standing in for ``msg.sender``.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from eth_typing import ChecksumAddress, HexAddress
from web3 import Web3

from cctp_bridge.constants import ZERO_ADDRESS
from cctp_bridge.revert import InsufficientAllowance, InsufficientBalance
from cctp_bridge.state import ChainState

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Transfer:
    """ERC-20 Transfer event."""

    sender: ChecksumAddress
    receiver: ChecksumAddress
    value: int


@dataclass(slots=True, frozen=True)
class Approval:
    """ERC-20 Approval event."""

    owner: ChecksumAddress
    spender: ChecksumAddress
    value: int


class ERC20(Protocol):
    """ERC-20 calls used by the bridge."""

    @property
    def address(self) -> ChecksumAddress: ...

    def decimals(self) -> int: ...

    def balance_of(self, holder: HexAddress | str) -> int: ...

    def allowance(self, owner: HexAddress | str, spender: HexAddress | str) -> int: ...

    def transfer(self, caller: HexAddress | str, receiver: HexAddress | str, amount: int) -> bool: ...

    def approve(self, caller: HexAddress | str, spender: HexAddress | str, amount: int) -> bool: ...

    def transfer_from(self, caller: HexAddress | str, sender: HexAddress | str, receiver: HexAddress | str, amount: int) -> bool: ...


class LedgerToken:
    """ERC-20 token whose balances live in a :py:class:`ChainState`."""

    def __init__(self, state: ChainState, address: HexAddress | str, symbol: str, decimals: int = 18, name: str | None = None):
        assert 0 <= decimals <= 77, f"Bad decimals: {decimals}"
        self.state = state
        self._address = Web3.to_checksum_address(address)
        self.symbol = symbol
        self.name = name or symbol
        self._decimals = decimals
        state.register_contract(self._address, self)

    def __repr__(self):
        return f"<{self.name} ({self.symbol}) at {self._address}, {self._decimals} decimals>"

    @property
    def address(self) -> ChecksumAddress:
        return self._address

    def decimals(self) -> int:
        return self._decimals

    def convert_to_decimals(self, raw_amount: int) -> Decimal:
        """Convert raw token units to decimals.

        Example:

        .. code-block:: python

            details = LedgerToken(state, usdc_address, "USDC", 6)
            # Convert 1 raw unit to decimals
            assert details.convert_to_decimals(1) == Decimal("0.000001")

        """
        return Decimal(raw_amount) / Decimal(10**self._decimals)

    def convert_to_raw(self, decimal_amount: Decimal | int) -> int:
        """Convert decimal amount to raw token units, rounding down."""
        return int(Decimal(decimal_amount) * 10**self._decimals)

    def balance_of(self, holder: HexAddress | str) -> int:
        return self.state.balances.get((self._address, Web3.to_checksum_address(holder)), 0)

    def allowance(self, owner: HexAddress | str, spender: HexAddress | str) -> int:
        return self.state.allowances.get((self._address, Web3.to_checksum_address(owner), Web3.to_checksum_address(spender)), 0)

    def _set_balance(self, holder: ChecksumAddress, amount: int):
        self.state.balances[(self._address, holder)] = amount

    def _move(self, sender: HexAddress | str, receiver: HexAddress | str, amount: int):
        assert amount >= 0, f"Negative amount: {amount}"
        sender = Web3.to_checksum_address(sender)
        receiver = Web3.to_checksum_address(receiver)
        balance = self.balance_of(sender)
        if balance < amount:
            raise InsufficientBalance(f"{self.symbol}: balance {balance} of {sender} below {amount}")
        self._set_balance(sender, balance - amount)
        self._set_balance(receiver, self.balance_of(receiver) + amount)
        self.state.emit(self._address, Transfer(sender, receiver, amount))

    def transfer(self, caller: HexAddress | str, receiver: HexAddress | str, amount: int) -> bool:
        self._move(caller, receiver, amount)
        return True

    def approve(self, caller: HexAddress | str, spender: HexAddress | str, amount: int) -> bool:
        assert amount >= 0, f"Negative allowance: {amount}"
        owner = Web3.to_checksum_address(caller)
        spender = Web3.to_checksum_address(spender)
        self.state.allowances[(self._address, owner, spender)] = amount
        self.state.emit(self._address, Approval(owner, spender, amount))
        return True

    def transfer_from(self, caller: HexAddress | str, sender: HexAddress | str, receiver: HexAddress | str, amount: int) -> bool:
        spender = Web3.to_checksum_address(caller)
        sender = Web3.to_checksum_address(sender)
        allowance = self.allowance(sender, spender)
        if allowance < amount:
            raise InsufficientAllowance(f"{self.symbol}: allowance {allowance} of {spender} from {sender} below {amount}")
        self._move(sender, receiver, amount)
        self.state.allowances[(self._address, sender, spender)] = allowance - amount
        return True

    def mint(self, receiver: HexAddress | str, amount: int):
        """Create new tokens out of thin air. Test helper."""
        assert amount >= 0, f"Negative amount: {amount}"
        receiver = Web3.to_checksum_address(receiver)
        self._set_balance(receiver, self.balance_of(receiver) + amount)
        self.state.emit(self._address, Transfer(ZERO_ADDRESS, receiver, amount))

    def burn(self, holder: HexAddress | str, amount: int):
        """Destroy tokens of a holder, as CCTP TokenMinter does."""
        holder = Web3.to_checksum_address(holder)
        balance = self.balance_of(holder)
        if balance < amount:
            raise InsufficientBalance(f"{self.symbol}: cannot burn {amount}, balance {balance} of {holder}")
        self._set_balance(holder, balance - amount)
        self.state.emit(self._address, Transfer(holder, ZERO_ADDRESS, amount))


class WrappedNativeToken(LedgerToken):
    """WETH9 style wrapper of the native gas asset.

    The token contract holds the wrapped native value as its own native balance.
    """

    def deposit(self, caller: HexAddress | str, value: int):
        """Wrap ``value`` native units of the caller."""
        self.state.transfer_native(caller, self.address, value)
        self.mint(caller, value)

    def withdraw(self, caller: HexAddress | str, amount: int):
        """Unwrap back to native units."""
        self.burn(caller, amount)
        self.state.transfer_native(self.address, caller, amount)


def create_token(
    state: ChainState,
    address: HexAddress | str,
    symbol: str,
    decimals: int = 18,
    supply: int = 0,
    owner: HexAddress | str | None = None,
) -> LedgerToken:
    """Create a ledger token for tests.

    :param supply:
        Raw amount minted to ``owner``
    """
    token = LedgerToken(state, address, symbol, decimals)
    if supply:
        assert owner, "Supply needs an owner"
        token.mint(owner, supply)
    logger.info("Created token %s at %s", symbol, token.address)
    return token
