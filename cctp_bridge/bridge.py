"""Cross-chain USDC bridge.

:py:class:`CrossChainBridge` accepts a deposit of any token or the native gas
asset, swaps it to USDC when needed, burns the USDC through CCTP towards the
destination domain and emits :py:class:`cctp_bridge.event.BridgeDepositReceived`
for the off-chain relayers that complete the mint.

A deposit is atomic: it runs inside a :py:meth:`cctp_bridge.state.ChainState.transaction`
and either burns and emits, or raises a :py:class:`cctp_bridge.revert.BridgeRevert`
with every balance, allowance and log left as it was.

Example::

    bridge = CrossChainBridge(state, bridge_address, deployer, deployment)

    usdc.approve(user, bridge.address, 100 * 10**6)
    event = bridge.deposit(
        sender=user,
        amount=100 * 10**6,
        source_token=usdc.address,
        swap_fee_tier=0,
        destination_token=get_token_info("USDC-Avalanche").token,
        destination_domain=CCTP_DOMAIN_AVALANCHE,
        recipient=canonicalise(receiver, ChainType.EVM),
        destination_contract=canonicalise(avalanche_bridge, ChainType.EVM),
    )
"""

import logging

from eth_typing import ChecksumAddress, HexAddress
from web3 import Web3

from cctp_bridge.address import CanonicalAddress, as_canonical
from cctp_bridge.constants import NATIVE_TOKEN, ChainType
from cctp_bridge.deployment import BridgeDeployment
from cctp_bridge.event import BridgeDepositReceived
from cctp_bridge.messenger import TokenMessenger
from cctp_bridge.registry import DestinationRegistry
from cctp_bridge.revert import (
    BridgeRevert,
    ExternalCallFailure,
    InvalidAmount,
    ReentrantCall,
    UnsupportedDestination,
    UnsupportedDestinationToken,
)
from cctp_bridge.state import ChainState
from cctp_bridge.swap import SwapAdapter, SwapRouter
from cctp_bridge.token import ERC20, WrappedNativeToken

logger = logging.getLogger(__name__)


class CrossChainBridge:
    """Bridge contract bound to a :py:class:`ChainState`.

    Collaborator contracts named in the deployment must already be
    registered in the state.
    """

    def __init__(
        self,
        state: ChainState,
        address: HexAddress | str,
        deployer: HexAddress | str,
        deployment: BridgeDeployment,
    ):
        self.state = state
        self.address: ChecksumAddress = Web3.to_checksum_address(address)
        self.deployment = deployment

        self._router: SwapRouter = state.get_contract(deployment.swap_router)
        self._usdc: ERC20 = state.get_contract(deployment.usdc_token)
        self._messenger: TokenMessenger = state.get_contract(deployment.token_messenger)
        self._weth: WrappedNativeToken = state.get_contract(deployment.weth_token)

        self.registry = DestinationRegistry.create(
            owner=deployer,
            destination_domains=deployment.destination_domains,
            chain_types=deployment.destination_chain_types,
            token_domains=deployment.destination_token_domains,
            tokens=deployment.destination_tokens,
        )

        self.swap_adapter = SwapAdapter(
            state,
            holder=self.address,
            router=self._router,
            reference_token=self._usdc,
            wrapped_native=self._weth,
            default_fee=deployment.weth_usdc_swap_fee,
        )

        self._entered = False

        state.register_contract(self.address, self)
        logger.info("Deployed CrossChainBridge at %s, CCTP domain %d, owner %s", self.address, self.cctp_domain, self.owner)

    def __repr__(self):
        return f"<CrossChainBridge {self.address} domain {self.cctp_domain}>"

    @property
    def swap_router(self) -> ChecksumAddress:
        return self._router.address

    @property
    def usdc_token(self) -> ChecksumAddress:
        return self._usdc.address

    @property
    def token_messenger(self) -> ChecksumAddress:
        return self._messenger.address

    @property
    def message_transmitter(self) -> ChecksumAddress:
        return Web3.to_checksum_address(self.deployment.message_transmitter)

    @property
    def uniswap_factory(self) -> ChecksumAddress:
        return Web3.to_checksum_address(self.deployment.uniswap_factory)

    @property
    def weth(self) -> ChecksumAddress:
        return self._weth.address

    @property
    def cctp_domain(self) -> int:
        return self.deployment.cctp_domain

    @property
    def default_swap_fee(self) -> int:
        return self.deployment.weth_usdc_swap_fee

    @property
    def owner(self) -> ChecksumAddress:
        return self.registry.owner

    def transfer_ownership(self, caller: HexAddress | str, new_owner: HexAddress | str):
        self.registry.transfer_ownership(caller, new_owner)

    def add_destination_chain(self, caller: HexAddress | str, domain_id: int, chain_type: ChainType | int):
        self.registry.add_destination_chain(caller, domain_id, chain_type)

    def remove_destination_chain(self, caller: HexAddress | str, domain_id: int):
        self.registry.remove_destination_chain(caller, domain_id)

    def add_destination_token(self, caller: HexAddress | str, domain_id: int, token: bytes | str):
        self.registry.add_destination_token(caller, domain_id, token)

    def remove_destination_token(self, caller: HexAddress | str, domain_id: int, token: bytes | str):
        self.registry.remove_destination_token(caller, domain_id, token)

    def is_destination_supported(self, domain_id: int) -> bool:
        return self.registry.is_destination_supported(domain_id)

    def chain_type_of(self, domain_id: int) -> ChainType | None:
        return self.registry.chain_type_of(domain_id)

    def is_token_supported(self, domain_id: int, token: bytes | str) -> bool:
        return self.registry.is_token_supported(domain_id, token)

    def deposit(
        self,
        sender: HexAddress | str,
        amount: int,
        source_token: HexAddress | str,
        swap_fee_tier: int,
        destination_token: bytes | str,
        destination_domain: int,
        recipient: bytes | str,
        destination_contract: bytes | str,
        value: int = 0,
    ) -> BridgeDepositReceived:
        """Bridge a deposit to another chain.

        :param sender:
            Depositor, ``msg.sender``

        :param amount:
            Raw amount of ``source_token`` to deposit

        :param source_token:
            ERC-20 to pull from the sender with ``transferFrom()``,
            or :py:data:`cctp_bridge.constants.NATIVE_TOKEN`

        :param swap_fee_tier:
            Uniswap v3 pool fee for the swap to USDC. Zero uses the default fee.
            Ignored for USDC deposits.

        :param destination_token:
            Canonical token the recipient wants on the destination chain

        :param destination_domain:
            CCTP domain to burn towards

        :param recipient:
            Canonical address of the final receiver

        :param destination_contract:
            Canonical address that CCTP mints to on the destination chain

        :param value:
            Native value attached to the call. Must equal ``amount`` for
            native deposits and be zero otherwise.

        :return:
            The emitted event

        :raise BridgeRevert:
            Any failure. Nothing has changed in the state.
        """
        if self._entered:
            raise ReentrantCall("Reentrant deposit() call")

        self._entered = True
        try:
            with self.state.transaction():
                return self._deposit(
                    Web3.to_checksum_address(sender),
                    amount,
                    Web3.to_checksum_address(source_token),
                    swap_fee_tier,
                    as_canonical(destination_token),
                    destination_domain,
                    as_canonical(recipient),
                    as_canonical(destination_contract),
                    value,
                )
        except BridgeRevert as e:
            logger.warning("deposit() by %s reverted: %s: %s", sender, type(e).__name__, e)
            raise
        finally:
            self._entered = False

    def _deposit(
        self,
        sender: ChecksumAddress,
        amount: int,
        source_token: ChecksumAddress,
        swap_fee_tier: int,
        destination_token: CanonicalAddress,
        destination_domain: int,
        recipient: CanonicalAddress,
        destination_contract: CanonicalAddress,
        value: int,
    ) -> BridgeDepositReceived:
        # Checks: every read the invariants depend on happens before the first external call
        if not self.registry.is_destination_supported(destination_domain):
            raise UnsupportedDestination(f"Destination domain {destination_domain} is not supported")

        if not self.registry.is_token_supported(destination_domain, destination_token):
            raise UnsupportedDestinationToken(f"Token {destination_token.hex()} is not supported on domain {destination_domain}")

        if amount <= 0:
            raise InvalidAmount(f"Deposit amount must be positive, got {amount}")

        is_native = source_token == NATIVE_TOKEN
        if is_native:
            if value != amount:
                raise InvalidAmount(f"Attached native value {value} does not match amount {amount}")
        elif value != 0:
            raise InvalidAmount(f"Native value {value} attached to a {source_token} deposit")

        source_domain = self.cctp_domain
        usdc_balance_before = self._usdc.balance_of(self.address)

        # Interactions
        if is_native:
            self.state.transfer_native(sender, self.address, value)
        else:
            token: ERC20 = self.state.get_contract(source_token)
            token.transfer_from(self.address, sender, self.address, amount)

        usdc_amount = self.swap_adapter.convert_to_reference(source_token, amount, swap_fee_tier)

        # Allowance is overwritten, not reset to zero first
        self._usdc.approve(self.address, self._messenger.address, usdc_amount)

        try:
            nonce = self._messenger.deposit_for_burn(
                self.address,
                usdc_amount,
                destination_domain,
                destination_contract,
                self._usdc.address,
            )
        except ReentrantCall:
            raise
        except Exception as e:
            raise ExternalCallFailure(f"depositForBurn() failed: {e}") from e

        usdc_balance_after = self._usdc.balance_of(self.address)
        if usdc_balance_after != usdc_balance_before:
            raise ExternalCallFailure(f"USDC balance of the bridge changed {usdc_balance_before} -> {usdc_balance_after}, burn did not consume {usdc_amount}")

        event = BridgeDepositReceived(
            sender=sender,
            recipient=recipient,
            source_domain=source_domain,
            destination_domain=destination_domain,
            nonce=nonce,
            amount=usdc_amount,
            source_token=source_token,
            destination_token=destination_token,
        )
        self.state.emit(self.address, event)

        logger.info(
            "Bridged %d %s from %s as %d USDC to domain %d, recipient %s, nonce %d",
            amount,
            source_token,
            sender,
            usdc_amount,
            destination_domain,
            recipient.hex(),
            nonce,
        )
        return event
