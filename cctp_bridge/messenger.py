"""CCTP TokenMessenger interface.

The bridge hands the reference asset to Circle's ``TokenMessenger.depositForBurn()``.
The messenger burns the tokens and assigns the message nonce that Circle's
attestation service and the destination chain use to identify the transfer.

The MessageTransmitter, which completes the transfer on the destination chain,
is not called by the bridge.
"""

from dataclasses import dataclass
from typing import Protocol

from eth_typing import ChecksumAddress, HexAddress

from cctp_bridge.address import CanonicalAddress


@dataclass(slots=True, frozen=True)
class DepositForBurn:
    """TokenMessenger ``DepositForBurn`` event."""

    nonce: int
    burn_token: ChecksumAddress
    amount: int
    depositor: ChecksumAddress
    mint_recipient: CanonicalAddress
    destination_domain: int
    destination_token_messenger: CanonicalAddress
    destination_caller: CanonicalAddress


class TokenMessenger(Protocol):
    """Burn side of CCTP."""

    @property
    def address(self) -> ChecksumAddress: ...

    def deposit_for_burn(
        self,
        caller: HexAddress | str,
        amount: int,
        destination_domain: int,
        mint_recipient: CanonicalAddress,
        burn_token: HexAddress | str,
    ) -> int:
        """Burn ``amount`` of ``burn_token`` pulled from the caller.

        The caller must have approved the messenger for ``amount``.

        :return:
            Message nonce, increasing with every burn
        """
        ...
