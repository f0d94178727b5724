"""Single owner access control.

Python counterpart of OpenZeppelin ``Ownable``: one owner set at construction,
transferable by the owner, and an :py:func:`only_owner` guard for methods
taking the calling account as their first argument.
"""

import logging
from dataclasses import dataclass
from functools import wraps

from eth_typing import ChecksumAddress, HexAddress
from web3 import Web3

from cctp_bridge.constants import ZERO_ADDRESS
from cctp_bridge.revert import Unauthorized

logger = logging.getLogger(__name__)


def only_owner(func):
    """Reject the call unless ``caller`` is the owner.

    The decorated method must be ``method(self, caller, ...)`` on an :py:class:`Ownable`.
    The check runs before the method body, so a rejected call mutates nothing.
    """

    @wraps(func)
    def wrapper(self: "Ownable", caller: HexAddress | str, *args, **kwargs):
        self.check_owner(caller)
        return func(self, caller, *args, **kwargs)

    return wrapper


@dataclass
class Ownable:
    """Owner bookkeeping."""

    #: Current owner
    owner: ChecksumAddress

    def __post_init__(self):
        self.owner = Web3.to_checksum_address(self.owner)

    def is_owner(self, caller: HexAddress | str) -> bool:
        return Web3.to_checksum_address(caller) == self.owner

    def check_owner(self, caller: HexAddress | str):
        """:raise Unauthorized: if caller is not the owner"""
        if not self.is_owner(caller):
            logger.warning("Unauthorized call by %s, owner is %s", caller, self.owner)
            raise Unauthorized(f"Caller {caller} is not the owner")

    @only_owner
    def transfer_ownership(self, caller: HexAddress | str, new_owner: HexAddress | str):
        """Hand over the ownership.

        :raise ValueError:
            Zero address as the new owner
        """
        new_owner = Web3.to_checksum_address(new_owner)
        if new_owner == ZERO_ADDRESS:
            raise ValueError("New owner is the zero address")
        logger.info("Ownership transferred %s -> %s", self.owner, new_owner)
        self.owner = new_owner
