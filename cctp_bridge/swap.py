"""Swap deposits to the reference asset.

The bridge only burns USDC. Any other deposited ERC-20, or the native gas asset,
is first swapped to USDC with a single-hop Uniswap v3 ``exactInputSingle()``
call, with the bridge as the swap recipient.

.. warning::

    ``amountOutMinimum`` is always zero: the swap accepts any price,
    so a deposit can be sandwiched. Depositors carry this slippage risk.
"""

import logging
from dataclasses import dataclass
from typing import Protocol

from eth_typing import ChecksumAddress, HexAddress
from web3 import Web3

from cctp_bridge.constants import NATIVE_TOKEN
from cctp_bridge.revert import ExternalCallFailure, ReentrantCall
from cctp_bridge.state import ChainState
from cctp_bridge.token import ERC20, WrappedNativeToken

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ExactInputSingleParams:
    """Uniswap v3 ``ISwapRouter.ExactInputSingleParams``.

    SwapRouter02 layout, no deadline.
    """

    token_in: ChecksumAddress
    token_out: ChecksumAddress

    #: Pool fee tier in 1/1,000,000 units, e.g. 3000 = 30 BPS
    fee: int
    recipient: ChecksumAddress
    amount_in: int
    amount_out_minimum: int = 0
    sqrt_price_limit_x96: int = 0


class SwapRouter(Protocol):
    """Uniswap v3 router calls used by the bridge."""

    @property
    def address(self) -> ChecksumAddress: ...

    def exact_input_single(self, caller: HexAddress | str, params: ExactInputSingleParams) -> int:
        """Swap ``params.amount_in`` of ``token_in`` pulled from the caller.

        :return:
            Amount of ``token_out`` sent to ``params.recipient``
        """
        ...


class SwapAdapter:
    """Converts bridge-held deposits to the reference asset.

    The deposit must already be held by ``holder``, the bridge.
    Native deposits are wrapped first, then swapped as the wrapped token.
    """

    def __init__(
        self,
        state: ChainState,
        holder: HexAddress | str,
        router: SwapRouter,
        reference_token: ERC20,
        wrapped_native: WrappedNativeToken,
        default_fee: int,
    ):
        assert default_fee > 0, f"Bad default swap fee: {default_fee}"
        self.state = state
        self.holder = Web3.to_checksum_address(holder)
        self.router = router
        self.reference_token = reference_token
        self.wrapped_native = wrapped_native
        self.default_fee = default_fee

    def is_reference(self, token: HexAddress | str) -> bool:
        return Web3.to_checksum_address(token) == self.reference_token.address

    def convert_to_reference(self, source_token: HexAddress | str, amount_in: int, fee_tier: int = 0) -> int:
        """Swap ``amount_in`` of the source token to the reference asset.

        :param source_token:
            ERC-20 address, or :py:data:`cctp_bridge.constants.NATIVE_TOKEN`

        :param fee_tier:
            Uniswap v3 pool fee. Zero falls back to :py:attr:`default_fee`,
            which the bridge sets from the deployment ``weth_usdc_swap_fee``.

        :return:
            Reference asset amount now held by the bridge.
            ``amount_in`` itself when the source already is the reference asset.

        :raise ExternalCallFailure:
            The router call failed, or delivered less than it reported
        """
        assert amount_in > 0, f"Bad swap amount: {amount_in}"

        if self.is_reference(source_token):
            return amount_in

        source_token = Web3.to_checksum_address(source_token)
        if source_token == NATIVE_TOKEN:
            self.wrapped_native.deposit(self.holder, amount_in)
            token_in: ERC20 = self.wrapped_native
        else:
            token_in = self.state.get_contract(source_token)

        fee = fee_tier or self.default_fee

        token_in.approve(self.holder, self.router.address, amount_in)

        params = ExactInputSingleParams(
            token_in=token_in.address,
            token_out=self.reference_token.address,
            fee=fee,
            recipient=self.holder,
            amount_in=amount_in,
            amount_out_minimum=0,
            sqrt_price_limit_x96=0,
        )

        balance_before = self.reference_token.balance_of(self.holder)

        try:
            amount_out = self.router.exact_input_single(self.holder, params)
        except ReentrantCall:
            raise
        except Exception as e:
            logger.warning("exactInputSingle() failed: %s, params %s", e, params)
            raise ExternalCallFailure(f"Swap {token_in.address} -> {self.reference_token.address} failed: {e}") from e

        received = self.reference_token.balance_of(self.holder) - balance_before
        if received < amount_out:
            raise ExternalCallFailure(f"Router reported {amount_out} out but bridge received {received}")

        logger.info(
            "Swapped %d %s to %d %s, fee tier %d",
            amount_in,
            token_in.address,
            amount_out,
            self.reference_token.address,
            fee,
        )
        return amount_out
