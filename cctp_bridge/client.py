"""Web3 client of a deployed ``CrossChainBridge`` contract.

Build bound contract calls for the bridge and read its state and events.

Example of bridging 100 USDC from Ethereum to a Solana wallet::

    from web3 import Web3
    from cctp_bridge.client import get_cross_chain_bridge, prepare_bridge_deposit
    from cctp_bridge.deployment import get_token_info

    web3 = Web3(Web3.HTTPProvider(os.environ["JSON_RPC_ETHEREUM"]))
    bridge = get_cross_chain_bridge(web3, bridge_address)

    # USDC must be approved to the bridge first
    deposit_fn = prepare_bridge_deposit(
        bridge,
        amount=100 * 10**6,
        source_token=usdc_address,
        destination_domain=CCTP_DOMAIN_SOLANA,
        recipient="9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM",
        destination_contract=solana_bridge_program,
        destination_token="EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
    )
    tx_hash = deposit_fn.transact({"from": sender})
    receipt = web3.eth.wait_for_transaction_receipt(tx_hash)
    events = decode_bridge_deposits(bridge, receipt)

For native deposits pass :py:data:`cctp_bridge.constants.NATIVE_TOKEN` as the source token
and the same amount as ``value`` when transacting.
"""

import logging

from eth_typing import HexAddress
from hexbytes import HexBytes
from web3 import Web3
from web3.contract import Contract
from web3.contract.contract import ContractFunction

from cctp_bridge.abi import get_deployed_contract
from cctp_bridge.address import as_canonical, canonicalise
from cctp_bridge.constants import CCTP_DOMAIN_CHAIN_TYPES, ChainType
from cctp_bridge.event import BRIDGE_DEPOSIT_RECEIVED_TOPIC, BridgeDepositReceived, decode_bridge_deposit_log
from cctp_bridge.registry import DestinationChain

logger = logging.getLogger(__name__)


def get_cross_chain_bridge(web3: Web3, address: HexAddress | str) -> Contract:
    """Load the bridge contract proxy.

    :param web3:
        Web3 connection

    :param address:
        Deployed bridge address

    :return:
        Contract proxy for CrossChainBridge
    """
    return get_deployed_contract(web3, "CrossChainBridge.json", address)


def _resolve_chain_type(destination_domain: int, chain_type: ChainType | int | None) -> ChainType:
    if chain_type is not None:
        return ChainType(chain_type)
    known = CCTP_DOMAIN_CHAIN_TYPES.get(destination_domain)
    if known is None:
        raise ValueError(f"Unknown chain type for CCTP domain {destination_domain}, pass destination_chain_type explicitly")
    return known


def prepare_bridge_deposit(
    bridge: Contract,
    amount: int,
    source_token: HexAddress | str,
    destination_domain: int,
    recipient: str,
    destination_contract: str,
    destination_token: str,
    destination_chain_type: ChainType | int | None = None,
    swap_fee_tier: int = 0,
) -> ContractFunction:
    """Build a bound ``deposit()`` call.

    Destination addresses are given in their native text form and
    canonicalised with the chain type of the destination domain.

    :param amount:
        Raw amount of the source token

    :param source_token:
        ERC-20 to deposit, or the zero address for the native asset

    :param destination_domain:
        CCTP domain to bridge to

    :param recipient:
        Final receiver on the destination chain, ``0x`` hex or base58

    :param destination_contract:
        Contract CCTP mints USDC to on the destination chain

    :param destination_token:
        Token the recipient wants to receive

    :param destination_chain_type:
        Address format of the destination chain.
        If not given, looked up from the known CCTP domains.

    :param swap_fee_tier:
        Uniswap v3 fee tier, zero for the bridge default

    :return:
        Bound contract function ready to be transacted or encoded.

    :raise ValueError:
        Zero amount, unknown chain type or malformed address
    """
    if amount <= 0:
        raise ValueError(f"Deposit amount must be positive, got {amount}")

    chain_type = _resolve_chain_type(destination_domain, destination_chain_type)

    logger.info(
        "Preparing bridge deposit: amount=%s, source_token=%s, destination_domain=%s, recipient=%s",
        amount,
        source_token,
        destination_domain,
        recipient,
    )

    return bridge.functions.deposit(
        amount,
        Web3.to_checksum_address(source_token),
        swap_fee_tier,
        bytes(canonicalise(destination_token, chain_type)),
        destination_domain,
        bytes(canonicalise(recipient, chain_type)),
        bytes(canonicalise(destination_contract, chain_type)),
    )


def prepare_add_destination_chain(bridge: Contract, domain_id: int, chain_type: ChainType | int) -> ContractFunction:
    """Build an owner-only ``addDestinationChain()`` call."""
    return bridge.functions.addDestinationChain(domain_id, int(ChainType(chain_type)))


def prepare_remove_destination_chain(bridge: Contract, domain_id: int) -> ContractFunction:
    """Build an owner-only ``removeDestinationChain()`` call."""
    return bridge.functions.removeDestinationChain(domain_id)


def prepare_add_destination_token(bridge: Contract, domain_id: int, token: str, chain_type: ChainType | int | None = None) -> ContractFunction:
    """Build an owner-only ``addDestinationToken()`` call.

    :param token:
        Token address in its native text form
    """
    canonical = canonicalise(token, _resolve_chain_type(domain_id, chain_type))
    return bridge.functions.addDestinationToken(domain_id, bytes(canonical))


def prepare_remove_destination_token(bridge: Contract, domain_id: int, token: str, chain_type: ChainType | int | None = None) -> ContractFunction:
    """Build an owner-only ``removeDestinationToken()`` call."""
    canonical = canonicalise(token, _resolve_chain_type(domain_id, chain_type))
    return bridge.functions.removeDestinationToken(domain_id, bytes(canonical))


def fetch_destination_chain(bridge: Contract, domain_id: int) -> DestinationChain:
    """Read the whitelist entry of a domain.

    Domains never added read as an unsupported EVM entry, as Solidity mappings do.
    """
    is_supported, chain_type = bridge.functions.supportedDestinationChains(domain_id).call()
    return DestinationChain(chain_type=ChainType(chain_type), is_supported=is_supported)


def fetch_destination_token_supported(bridge: Contract, domain_id: int, token: bytes | str) -> bool:
    """Check whether a canonical token is whitelisted for a domain."""
    return bridge.functions.supportedDestinationTokens(domain_id, bytes(as_canonical(token))).call()


def decode_bridge_deposits(bridge: Contract, receipt: dict) -> list[BridgeDepositReceived]:
    """Get the ``BridgeDepositReceived`` events of a transaction.

    Logs of other contracts and other events are skipped.

    :param receipt:
        Transaction receipt
    """
    events = []
    for log in receipt["logs"]:
        if Web3.to_checksum_address(log["address"]) != bridge.address:
            continue
        topics = log["topics"]
        if not topics or HexBytes(topics[0]) != BRIDGE_DEPOSIT_RECEIVED_TOPIC:
            continue
        events.append(decode_bridge_deposit_log(log))
    return events
