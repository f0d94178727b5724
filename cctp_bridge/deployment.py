"""Bridge deployment parameters.

Construction parameters of :py:class:`cctp_bridge.bridge.CrossChainBridge`
and the per-network presets used to deploy it.

Every network whitelists all known CCTP chains and tokens except its own domain.

Example::

    from cctp_bridge.deployment import get_deployment_for_network

    deployment = get_deployment_for_network("arbitrum")
    assert deployment.cctp_domain == CCTP_DOMAIN_ARBITRUM
    assert CCTP_DOMAIN_ARBITRUM not in deployment.destination_domains
"""

import logging
import os
from dataclasses import dataclass, field

from eth_typing import HexAddress

from cctp_bridge.address import CanonicalAddress, canonicalise
from cctp_bridge.constants import (
    CCTP_DOMAIN_ARBITRUM,
    CCTP_DOMAIN_AVALANCHE,
    CCTP_DOMAIN_BASE,
    CCTP_DOMAIN_CHAIN_TYPES,
    CCTP_DOMAIN_ETHEREUM,
    CCTP_DOMAIN_NAMES,
    CCTP_DOMAIN_SOLANA,
    UNISWAP_V3_FACTORY,
    UNISWAP_V3_FACTORY_BASE,
    UNISWAP_V3_SWAP_ROUTER,
    UNISWAP_V3_SWAP_ROUTER_02,
    WETH_USDC_SWAP_FEE,
    ChainType,
)

logger = logging.getLogger(__name__)

#: Environment variable selecting the network preset when no name is given
NETWORK_ENV_VAR = "BRIDGE_NETWORK"


@dataclass(slots=True, frozen=True)
class SupportedChain:
    """A CCTP destination chain."""

    domain_id: int
    chain_type: ChainType
    chain_name: str


@dataclass(slots=True, frozen=True)
class SupportedToken:
    """A token that can be requested on a destination chain."""

    domain_id: int

    #: Canonical 32-byte token address
    token: CanonicalAddress

    #: Human readable id like ``USDC-Avalanche``
    token_identifier: str


@dataclass(slots=True, frozen=True)
class BridgeDeployment:
    """Immutable construction parameters of a bridge."""

    #: Uniswap v3 SwapRouter
    swap_router: HexAddress

    #: USDC, the reference asset burnt through CCTP
    usdc_token: HexAddress

    #: CCTP TokenMessenger
    token_messenger: HexAddress

    #: CCTP MessageTransmitter. Stored only.
    message_transmitter: HexAddress

    #: Uniswap v3 factory. Stored only.
    uniswap_factory: HexAddress

    #: Wrapped native token used to swap native deposits
    weth_token: HexAddress

    #: CCTP domain of the chain the bridge is deployed on
    cctp_domain: int

    #: Uniswap v3 fee tier used when a deposit passes zero
    weth_usdc_swap_fee: int = WETH_USDC_SWAP_FEE

    #: Initially supported destination domains
    destination_domains: tuple[int, ...] = field(default_factory=tuple)

    #: Chain types of ``destination_domains``, by position
    destination_chain_types: tuple[ChainType, ...] = field(default_factory=tuple)

    #: Domains of ``destination_tokens``, by position
    destination_token_domains: tuple[int, ...] = field(default_factory=tuple)

    #: Initially supported canonical destination tokens
    destination_tokens: tuple[CanonicalAddress, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if len(self.destination_domains) != len(self.destination_chain_types):
            raise ValueError("destination_domains and destination_chain_types differ in length")
        if len(self.destination_token_domains) != len(self.destination_tokens):
            raise ValueError("destination_token_domains and destination_tokens differ in length")
        if self.weth_usdc_swap_fee <= 0:
            raise ValueError(f"Bad swap fee: {self.weth_usdc_swap_fee}")


def _chain(domain_id: int) -> SupportedChain:
    return SupportedChain(domain_id, CCTP_DOMAIN_CHAIN_TYPES[domain_id], CCTP_DOMAIN_NAMES[domain_id])


def _token(domain_id: int, address: str, identifier: str) -> SupportedToken:
    return SupportedToken(domain_id, canonicalise(address, CCTP_DOMAIN_CHAIN_TYPES[domain_id]), identifier)


#: All chains the bridge can burn towards
ALL_SUPPORTED_CHAINS: list[SupportedChain] = [_chain(domain_id) for domain_id in sorted(CCTP_DOMAIN_NAMES)]

#: All tokens that can be requested on destination chains
ALL_SUPPORTED_TOKENS: list[SupportedToken] = [
    _token(CCTP_DOMAIN_ETHEREUM, "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48", "USDC-Ethereum"),
    _token(CCTP_DOMAIN_ETHEREUM, "0x6B175474E89094C44Da98b954EedeAC495271d0F", "DAI-Ethereum"),
    _token(CCTP_DOMAIN_ETHEREUM, "0xdAC17F958D2ee523a2206206994597C13D831ec7", "USDT-Ethereum"),
    _token(CCTP_DOMAIN_ETHEREUM, "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2", "WETH-Ethereum"),
    _token(CCTP_DOMAIN_AVALANCHE, "0xB97EF9Ef8734C71904D8002F8b6Bc66Dd9c48a6E", "USDC-Avalanche"),
    _token(CCTP_DOMAIN_AVALANCHE, "0xd586E7F844cEa2F87f50152665BCbc2C279D8d70", "DAI-Avalanche"),
    _token(CCTP_DOMAIN_AVALANCHE, "0x9702230A8Ea53601f5cD2dc00fDBc13d4dF4A8c7", "USDT-Avalanche"),
    _token(CCTP_DOMAIN_AVALANCHE, "0x49D5c2BdFfac6CE2BFdB6640F4F80f226bc10bAB", "WETH-Avalanche"),
    _token(CCTP_DOMAIN_ARBITRUM, "0xaf88d065e77c8cC2239327C5EDb3A432268e5831", "USDC-Arbitrum"),
    _token(CCTP_DOMAIN_ARBITRUM, "0x82aF49447D8a07e3bd95BD0d56f35241523fBab1", "WETH-Arbitrum"),
    _token(CCTP_DOMAIN_ARBITRUM, "0xDA10009cBd5D07dd0CeCc66161FC93D7c9000da1", "DAI-Arbitrum"),
    _token(CCTP_DOMAIN_ARBITRUM, "0xFd086bC7CD5C481DCC9C85ebE478A1C0b69FCbb9", "USDT-Arbitrum"),
    _token(CCTP_DOMAIN_BASE, "0x50c5725949A6F0c72E6C4a641F24049A917DB0Cb", "DAI-Base"),
    _token(CCTP_DOMAIN_BASE, "0x4200000000000000000000000000000000000006", "WETH-Base"),
    _token(CCTP_DOMAIN_BASE, "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913", "USDC-Base"),
    _token(CCTP_DOMAIN_SOLANA, "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v", "USDC-Solana"),
]


def get_supported_destination_chains(own_domain: int) -> list[SupportedChain]:
    """All chains except the one the bridge lives on."""
    return [c for c in ALL_SUPPORTED_CHAINS if c.domain_id != own_domain]


def get_supported_destination_tokens(own_domain: int) -> list[SupportedToken]:
    """All tokens except the ones on the chain the bridge lives on."""
    return [t for t in ALL_SUPPORTED_TOKENS if t.domain_id != own_domain]


def get_token_info(token_identifier: str) -> SupportedToken | None:
    """Look up a token by its identifier, e.g. ``USDC-Avalanche``."""
    for token in ALL_SUPPORTED_TOKENS:
        if token.token_identifier == token_identifier:
            return token
    return None


def get_destination_chain_type(domain_id: int, deployment: BridgeDeployment) -> ChainType | None:
    """Chain type of a destination domain in a deployment, ``None`` if not whitelisted."""
    for destination, chain_type in zip(deployment.destination_domains, deployment.destination_chain_types):
        if destination == domain_id:
            return chain_type
    return None


def create_deployment(
    *,
    swap_router: HexAddress | str,
    usdc_token: HexAddress | str,
    token_messenger: HexAddress | str,
    message_transmitter: HexAddress | str,
    uniswap_factory: HexAddress | str,
    weth_token: HexAddress | str,
    cctp_domain: int,
    weth_usdc_swap_fee: int = WETH_USDC_SWAP_FEE,
) -> BridgeDeployment:
    """Build a deployment that whitelists every known chain and token except its own."""
    chains = get_supported_destination_chains(cctp_domain)
    tokens = get_supported_destination_tokens(cctp_domain)
    return BridgeDeployment(
        swap_router=HexAddress(swap_router),
        usdc_token=HexAddress(usdc_token),
        token_messenger=HexAddress(token_messenger),
        message_transmitter=HexAddress(message_transmitter),
        uniswap_factory=HexAddress(uniswap_factory),
        weth_token=HexAddress(weth_token),
        cctp_domain=cctp_domain,
        weth_usdc_swap_fee=weth_usdc_swap_fee,
        destination_domains=tuple(c.domain_id for c in chains),
        destination_chain_types=tuple(c.chain_type for c in chains),
        destination_token_domains=tuple(t.domain_id for t in tokens),
        destination_tokens=tuple(t.token for t in tokens),
    )


#: Mainnet presets by network name
MAINNET_DEPLOYMENTS: dict[str, BridgeDeployment] = {
    "eth": create_deployment(
        swap_router=UNISWAP_V3_SWAP_ROUTER,
        usdc_token="0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
        weth_token="0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
        token_messenger="0xBd3fa81B58Ba92a82136038B25aDec7066af3155",
        message_transmitter="0x0a992d191DEeC32aFe36203Ad87D7d289a738F81",
        uniswap_factory=UNISWAP_V3_FACTORY,
        cctp_domain=CCTP_DOMAIN_ETHEREUM,
    ),
    "arbitrum": create_deployment(
        swap_router=UNISWAP_V3_SWAP_ROUTER,
        usdc_token="0xaf88d065e77c8cC2239327C5EDb3A432268e5831",
        weth_token="0x82aF49447D8a07e3bd95BD0d56f35241523fBab1",
        token_messenger="0x19330d10D9Cc8751218eaf51E8885D058642E08A",
        message_transmitter="0xC30362313FBBA5cf9163F0bb16a0e01f01A896ca",
        uniswap_factory=UNISWAP_V3_FACTORY,
        cctp_domain=CCTP_DOMAIN_ARBITRUM,
    ),
    "avalanche": create_deployment(
        swap_router=UNISWAP_V3_SWAP_ROUTER_02,
        usdc_token="0xB97EF9Ef8734C71904D8002F8b6Bc66Dd9c48a6E",
        weth_token="0x49D5c2BdFfac6CE2BFdB6640F4F80f226bc10bAB",
        token_messenger="0x6B25532e1060CE10cc3B0A99e5683b91BFDe6982",
        message_transmitter="0x8186359aF5F57FbB40c6b14A588d2A59C0C29880",
        uniswap_factory=UNISWAP_V3_FACTORY,
        cctp_domain=CCTP_DOMAIN_AVALANCHE,
    ),
    "base": create_deployment(
        swap_router=UNISWAP_V3_SWAP_ROUTER_02,
        usdc_token="0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
        weth_token="0x4200000000000000000000000000000000000006",
        token_messenger="0x1682Ae6375C4E4A97e4B583BC394c861A46D8962",
        message_transmitter="0xAD09780d193884d503182aD4588450C416D6F9D4",
        uniswap_factory=UNISWAP_V3_FACTORY_BASE,
        cctp_domain=CCTP_DOMAIN_BASE,
    ),
}

#: Testnet presets by network name
TESTNET_DEPLOYMENTS: dict[str, BridgeDeployment] = {
    "goerli": create_deployment(
        swap_router=UNISWAP_V3_SWAP_ROUTER,
        usdc_token="0x07865c6E87B9F70255377e024ace6630C1Eaa37F",
        weth_token="0xB4FBF271143F4FBf7B91A5ded31805e42b2208d6",
        token_messenger="0xd0c3da58f55358142b8d3e06c1c30c5c6114efe8",
        message_transmitter="0x26413e8157cd32011e726065a5462e97dd4d03d9",
        uniswap_factory=UNISWAP_V3_FACTORY,
        cctp_domain=CCTP_DOMAIN_ETHEREUM,
    ),
    "arbitrumTestnet": create_deployment(
        swap_router=UNISWAP_V3_SWAP_ROUTER,
        usdc_token="0xfd064A18f3BF249cf1f87FC203E90D8f650f2d63",
        weth_token="0x0000000000000000000000000000000000000000",
        token_messenger="0x12dcfd3fe2e9eac2859fd1ed86d2ab8c5a2f9352",
        message_transmitter="0x109bc137cb64eab7c0b1dddd1edf341467dc2d35",
        uniswap_factory=UNISWAP_V3_FACTORY,
        cctp_domain=CCTP_DOMAIN_ARBITRUM,
    ),
    "avalancheTestnet": create_deployment(
        swap_router=UNISWAP_V3_SWAP_ROUTER,
        usdc_token="0x5425890298aed601595a70AB815c96711a31Bc65",
        weth_token="0x0000000000000000000000000000000000000000",
        token_messenger="0xeb08f243e5d3fcff26a9e38ae5520a669f4019d0",
        message_transmitter="0xa9fb1b3009dcb79e2fe346c16a604b8fa8ae0a79",
        uniswap_factory=UNISWAP_V3_FACTORY,
        cctp_domain=CCTP_DOMAIN_AVALANCHE,
    ),
}

#: Network name aliases, e.g. the local hardhat fork is an Ethereum mainnet fork
NETWORK_ALIASES: dict[str, str] = {
    "hardhat": "eth",
    "ethereum": "eth",
    "anvil": "eth",
}


def get_deployment_for_network(network: str | None = None) -> BridgeDeployment:
    """Get the deployment preset of a network.

    :param network:
        Network name like ``eth``, ``arbitrum`` or ``avalancheTestnet``.
        If not given, read from the ``BRIDGE_NETWORK`` environment variable.

    :return:
        The preset. Unknown networks fall back to Ethereum mainnet.
    """
    if network is None:
        network = os.environ.get(NETWORK_ENV_VAR, "eth")

    name = NETWORK_ALIASES.get(network, network)
    deployment = MAINNET_DEPLOYMENTS.get(name) or TESTNET_DEPLOYMENTS.get(name)
    if deployment is None:
        logger.warning("Unknown network %s, using Ethereum mainnet deployment", network)
        deployment = MAINNET_DEPLOYMENTS["eth"]
    return deployment
