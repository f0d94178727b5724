"""Circle CCTP bridge constants.

CCTP domain ids, destination chain types and the well-known
source and destination tokens of the bridge.

CCTP enables burn-and-mint USDC transfers across chains:

1. Source chain: the bridge swaps the deposit to USDC and calls
   ``depositForBurn()`` on the TokenMessenger
2. Circle's attestation service signs the burn event
3. Destination chain: a relayer calls ``receiveMessage()`` on the
   MessageTransmitter to mint USDC

CCTP uses its own domain identifiers, not EVM chain ids.

- `CCTP documentation <https://developers.circle.com/cctp>`_
"""

import enum

from eth_typing import HexAddress


class ChainType(enum.IntEnum):
    """How a destination chain represents addresses.

    Stored as ``uint8`` in the deployed contract.
    """

    #: 20-byte account addresses, zero-extended to 32 bytes
    EVM = 0

    #: 32-byte account keys, e.g. Solana public keys
    ACCOUNT_MODEL = 1


#: Ethereum 0x0000000000000000000000000000000000000000 address.
#:
#: Used as the ``sourceToken`` of a deposit when bridging the native gas asset.
ZERO_ADDRESS = HexAddress("0x0000000000000000000000000000000000000000")

#: Native asset sentinel of :py:meth:`cctp_bridge.bridge.CrossChainBridge.deposit`
NATIVE_TOKEN = ZERO_ADDRESS

#: CCTP domain ID for Ethereum mainnet
CCTP_DOMAIN_ETHEREUM = 0

#: CCTP domain ID for Avalanche C-chain
CCTP_DOMAIN_AVALANCHE = 1

#: CCTP domain ID for Optimism
CCTP_DOMAIN_OPTIMISM = 2

#: CCTP domain ID for Arbitrum One
CCTP_DOMAIN_ARBITRUM = 3

#: CCTP domain ID for Solana
CCTP_DOMAIN_SOLANA = 5

#: CCTP domain ID for Base
CCTP_DOMAIN_BASE = 6

#: CCTP domain ID for Polygon PoS
CCTP_DOMAIN_POLYGON = 7

#: Mapping from CCTP domain ID to human-readable chain name.
CCTP_DOMAIN_NAMES: dict[int, str] = {
    CCTP_DOMAIN_ETHEREUM: "Ethereum",
    CCTP_DOMAIN_AVALANCHE: "Avalanche",
    CCTP_DOMAIN_OPTIMISM: "Optimism",
    CCTP_DOMAIN_ARBITRUM: "Arbitrum",
    CCTP_DOMAIN_SOLANA: "Solana",
    CCTP_DOMAIN_BASE: "Base",
    CCTP_DOMAIN_POLYGON: "Polygon-POS",
}

#: Address format of each known CCTP domain.
CCTP_DOMAIN_CHAIN_TYPES: dict[int, ChainType] = {
    CCTP_DOMAIN_ETHEREUM: ChainType.EVM,
    CCTP_DOMAIN_AVALANCHE: ChainType.EVM,
    CCTP_DOMAIN_OPTIMISM: ChainType.EVM,
    CCTP_DOMAIN_ARBITRUM: ChainType.EVM,
    CCTP_DOMAIN_SOLANA: ChainType.ACCOUNT_MODEL,
    CCTP_DOMAIN_BASE: ChainType.EVM,
    CCTP_DOMAIN_POLYGON: ChainType.EVM,
}

#: Uniswap v3 fee tier used for WETH/USDC swaps, in 1/1,000,000 units.
#:
#: 3000 = 30 BPS.
WETH_USDC_SWAP_FEE = 3000

#: Uniswap v3 SwapRouter, same address on most chains
UNISWAP_V3_SWAP_ROUTER: HexAddress = HexAddress("0xE592427A0AEce92De3Edee1F18E0157C05861564")

#: Uniswap v3 SwapRouter02 as deployed on Avalanche and Base
UNISWAP_V3_SWAP_ROUTER_02: HexAddress = HexAddress("0xbb00FF08d01D300023C629E8fFfFcb65A5a578cE")

#: Uniswap v3 factory, same address on most chains
UNISWAP_V3_FACTORY: HexAddress = HexAddress("0x1F98431c8aD98523631AE4a59f267346ea31F984")

#: Uniswap v3 factory on Base
UNISWAP_V3_FACTORY_BASE: HexAddress = HexAddress("0x33128a8fC17869897dcE68Ed026d694621f6FDfD")
