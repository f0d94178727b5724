"""Shared fixtures: a bridge on Ethereum with simulated Uniswap and CCTP."""

from fractions import Fraction

import pytest
from eth_typing import HexAddress

from cctp_bridge.address import CanonicalAddress, canonicalise
from cctp_bridge.bridge import CrossChainBridge
from cctp_bridge.constants import CCTP_DOMAIN_AVALANCHE, CCTP_DOMAIN_ETHEREUM, CCTP_DOMAIN_SOLANA, WETH_USDC_SWAP_FEE, ChainType
from cctp_bridge.deployment import get_token_info
from cctp_bridge.state import ChainState
from cctp_bridge.testing import SimulatedBridgeEnvironment, SimulatedSwapRouter, SimulatedTokenMessenger, deploy_simulated_bridge, make_address
from cctp_bridge.token import LedgerToken, WrappedNativeToken, create_token

#: USDC on Avalanche, whitelisted destination token
USDC_AVALANCHE = get_token_info("USDC-Avalanche").token

#: USDC on Solana, whitelisted destination token
USDC_SOLANA = get_token_info("USDC-Solana").token


@pytest.fixture()
def state() -> ChainState:
    return ChainState()


@pytest.fixture()
def deployer() -> HexAddress:
    """Deploys the bridge and owns it."""
    return make_address("deployer")


@pytest.fixture()
def user_1() -> HexAddress:
    """Depositor."""
    return make_address("user-1")


@pytest.fixture()
def user_2() -> HexAddress:
    """Receiver on the destination chain."""
    return make_address("user-2")


@pytest.fixture()
def env(state: ChainState, deployer) -> SimulatedBridgeEnvironment:
    """Bridge on Ethereum that can burn towards Avalanche and Solana."""
    return deploy_simulated_bridge(
        state,
        deployer,
        cctp_domain=CCTP_DOMAIN_ETHEREUM,
        destination_domains=(CCTP_DOMAIN_AVALANCHE, CCTP_DOMAIN_SOLANA),
        destination_chain_types=(ChainType.EVM, ChainType.ACCOUNT_MODEL),
        destination_token_domains=(CCTP_DOMAIN_AVALANCHE, CCTP_DOMAIN_SOLANA),
        destination_tokens=(USDC_AVALANCHE, USDC_SOLANA),
    )


@pytest.fixture()
def bridge(env) -> CrossChainBridge:
    return env.bridge


@pytest.fixture()
def usdc(env) -> LedgerToken:
    return env.usdc


@pytest.fixture()
def weth(env) -> WrappedNativeToken:
    return env.weth


@pytest.fixture()
def messenger(env) -> SimulatedTokenMessenger:
    return env.messenger


@pytest.fixture()
def dai(state: ChainState) -> LedgerToken:
    return create_token(state, make_address("dai"), "DAI", 18)


@pytest.fixture()
def router(env, usdc, weth, dai) -> SimulatedSwapRouter:
    """Router with 1M USDC liquidity.

    - DAI/USDC 1:1 at 30 BPS and 5 BPS
    - WETH/USDC 1:2000 at 30 BPS
    """
    router = env.router
    usdc.mint(router.address, 1_000_000 * 10**6)
    router.set_rate(dai.address, usdc.address, WETH_USDC_SWAP_FEE, Fraction(1, 10**12))
    router.set_rate(dai.address, usdc.address, 500, Fraction(1, 10**12))
    router.set_rate(weth.address, usdc.address, WETH_USDC_SWAP_FEE, Fraction(2000, 10**12))
    return router


@pytest.fixture()
def recipient(user_2) -> CanonicalAddress:
    return canonicalise(user_2, ChainType.EVM)


@pytest.fixture()
def destination_contract() -> CanonicalAddress:
    """Bridge deployment on Avalanche that CCTP mints to."""
    return canonicalise(make_address("avalanche-bridge"), ChainType.EVM)
