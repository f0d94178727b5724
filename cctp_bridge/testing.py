"""Simulated collaborators for bridge tests.

In-memory stand-ins for the contracts the bridge calls, running on
a :py:class:`cctp_bridge.state.ChainState`:

- :py:class:`SimulatedSwapRouter`: Uniswap v3 ``exactInputSingle()`` with fixed rates per pool
- :py:class:`SimulatedTokenMessenger`: CCTP ``depositForBurn()`` that burns and counts nonces

:py:func:`deploy_simulated_bridge` wires a USDC, a WETH, a router, a messenger and
the bridge together.

Example::

    state = ChainState()
    env = deploy_simulated_bridge(state, deployer)
    env.usdc.mint(user, 1_000 * 10**6)
    env.usdc.approve(user, env.bridge.address, 100 * 10**6)
    env.bridge.deposit(user, 100 * 10**6, env.usdc.address, 0, ...)
"""

import logging
from dataclasses import dataclass
from fractions import Fraction

from eth_typing import ChecksumAddress, HexAddress
from hexbytes import HexBytes
from web3 import Web3

from cctp_bridge.address import CanonicalAddress, EvmAddress, as_canonical, to_canonical
from cctp_bridge.bridge import CrossChainBridge
from cctp_bridge.constants import CCTP_DOMAIN_ETHEREUM, WETH_USDC_SWAP_FEE, ChainType
from cctp_bridge.deployment import BridgeDeployment
from cctp_bridge.messenger import DepositForBurn
from cctp_bridge.state import ChainState
from cctp_bridge.swap import ExactInputSingleParams
from cctp_bridge.token import LedgerToken, WrappedNativeToken

logger = logging.getLogger(__name__)


def make_address(label: str) -> ChecksumAddress:
    """Deterministic test address from a label."""
    return Web3.to_checksum_address(Web3.keccak(text=label)[-20:])


class SwapFailed(Exception):
    """Simulated router revert."""


class SimulatedSwapRouter:
    """Uniswap v3 router with fixed exchange rates.

    Each ``(token_in, token_out, fee)`` pool has a constant rate. Output comes
    from the router's own ``token_out`` balance, so the router must be funded.
    """

    def __init__(self, state: ChainState, address: HexAddress | str):
        self.state = state
        self._address = Web3.to_checksum_address(address)
        self.rates: dict[tuple[ChecksumAddress, ChecksumAddress, int], Fraction] = {}
        self.calls: list[ExactInputSingleParams] = []
        state.register_contract(self._address, self)

    @property
    def address(self) -> ChecksumAddress:
        return self._address

    def set_rate(self, token_in: HexAddress | str, token_out: HexAddress | str, fee: int, rate: Fraction | int):
        """Open a pool.

        :param rate:
            Raw ``token_out`` units per raw ``token_in`` unit
        """
        self.rates[(Web3.to_checksum_address(token_in), Web3.to_checksum_address(token_out), fee)] = Fraction(rate)

    def exact_input_single(self, caller: HexAddress | str, params: ExactInputSingleParams) -> int:
        self.calls.append(params)

        rate = self.rates.get((params.token_in, params.token_out, params.fee))
        if rate is None:
            raise SwapFailed(f"No pool {params.token_in}/{params.token_out} fee {params.fee}")

        amount_out = int(params.amount_in * rate)
        if amount_out < params.amount_out_minimum:
            raise SwapFailed("Too little received")

        token_in: LedgerToken = self.state.get_contract(params.token_in)
        token_out: LedgerToken = self.state.get_contract(params.token_out)
        token_in.transfer_from(self.address, caller, self.address, params.amount_in)
        token_out.transfer(self.address, params.recipient, amount_out)
        return amount_out


class SimulatedTokenMessenger:
    """CCTP TokenMessenger that burns the deposit and assigns nonces.

    The next nonce lives in chain storage so a reverted deposit does not consume one.
    """

    def __init__(self, state: ChainState, address: HexAddress | str, local_domain: int, first_nonce: int = 1):
        self.state = state
        self._address = Web3.to_checksum_address(address)
        self.local_domain = local_domain
        state.storage[(self._address, "next_nonce")] = first_nonce
        state.register_contract(self._address, self)

    @property
    def address(self) -> ChecksumAddress:
        return self._address

    @property
    def next_nonce(self) -> int:
        return self.state.storage[(self._address, "next_nonce")]

    def deposit_for_burn(
        self,
        caller: HexAddress | str,
        amount: int,
        destination_domain: int,
        mint_recipient: CanonicalAddress,
        burn_token: HexAddress | str,
    ) -> int:
        if amount <= 0:
            raise ValueError("Amount must be nonzero")

        mint_recipient = as_canonical(mint_recipient)
        if mint_recipient == HexBytes(b"\x00" * 32):
            raise ValueError("Mint recipient must be nonzero")

        token: LedgerToken = self.state.get_contract(burn_token)
        token.transfer_from(self.address, caller, self.address, amount)
        token.burn(self.address, amount)

        nonce = self.next_nonce
        self.state.storage[(self._address, "next_nonce")] = nonce + 1

        self.state.emit(
            self.address,
            DepositForBurn(
                nonce=nonce,
                burn_token=token.address,
                amount=amount,
                depositor=Web3.to_checksum_address(caller),
                mint_recipient=mint_recipient,
                destination_domain=destination_domain,
                destination_token_messenger=to_canonical(EvmAddress(self.address)),
                destination_caller=HexBytes(b"\x00" * 32),
            ),
        )
        logger.info("Burnt %d %s towards domain %d, nonce %d", amount, token.symbol, destination_domain, nonce)
        return nonce


@dataclass
class SimulatedBridgeEnvironment:
    """Everything :py:func:`deploy_simulated_bridge` deployed."""

    state: ChainState
    deployment: BridgeDeployment
    bridge: CrossChainBridge
    usdc: LedgerToken
    weth: WrappedNativeToken
    router: SimulatedSwapRouter
    messenger: SimulatedTokenMessenger


def deploy_simulated_bridge(
    state: ChainState,
    deployer: HexAddress | str,
    cctp_domain: int = CCTP_DOMAIN_ETHEREUM,
    destination_domains: tuple[int, ...] = (),
    destination_chain_types: tuple[ChainType, ...] = (),
    destination_token_domains: tuple[int, ...] = (),
    destination_tokens: tuple[CanonicalAddress, ...] = (),
    weth_usdc_swap_fee: int = WETH_USDC_SWAP_FEE,
) -> SimulatedBridgeEnvironment:
    """Deploy a bridge with simulated USDC, WETH, Uniswap router and CCTP messenger."""
    usdc = LedgerToken(state, make_address("usdc"), "USDC", 6, name="USD Coin")
    weth = WrappedNativeToken(state, make_address("weth"), "WETH", 18, name="Wrapped Ether")
    router = SimulatedSwapRouter(state, make_address("swap-router"))
    messenger = SimulatedTokenMessenger(state, make_address("token-messenger"), cctp_domain)

    deployment = BridgeDeployment(
        swap_router=router.address,
        usdc_token=usdc.address,
        token_messenger=messenger.address,
        message_transmitter=make_address("message-transmitter"),
        uniswap_factory=make_address("uniswap-factory"),
        weth_token=weth.address,
        cctp_domain=cctp_domain,
        weth_usdc_swap_fee=weth_usdc_swap_fee,
        destination_domains=destination_domains,
        destination_chain_types=destination_chain_types,
        destination_token_domains=destination_token_domains,
        destination_tokens=destination_tokens,
    )

    bridge = CrossChainBridge(state, make_address("cross-chain-bridge"), deployer, deployment)

    return SimulatedBridgeEnvironment(
        state=state,
        deployment=deployment,
        bridge=bridge,
        usdc=usdc,
        weth=weth,
        router=router,
        messenger=messenger,
    )
