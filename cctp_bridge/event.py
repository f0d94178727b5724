"""``BridgeDepositReceived`` event and its EVM log encoding.

The event is the only durable link between a source chain deposit and
the destination chain mint. Off-chain relayers read it from logs,
so it has the same layout as the deployed contract's event:

.. code-block:: solidity

    event BridgeDepositReceived(
        address indexed from,
        bytes32 recipient,
        uint32 sourceChain,
        uint32 indexed destinationChain,
        uint64 nonce,
        uint256 amount,
        address sourceToken,
        bytes32 destinationToken
    );
"""

from dataclasses import dataclass

import eth_abi
from eth_abi.exceptions import DecodingError
from eth_typing import ChecksumAddress, HexAddress
from hexbytes import HexBytes
from web3 import Web3

from cctp_bridge.address import CanonicalAddress, as_canonical

#: Solidity signature of the event
BRIDGE_DEPOSIT_RECEIVED_SIGNATURE = "BridgeDepositReceived(address,bytes32,uint32,uint32,uint64,uint256,address,bytes32)"

#: ``topics[0]`` of the event logs
BRIDGE_DEPOSIT_RECEIVED_TOPIC = HexBytes(Web3.keccak(text=BRIDGE_DEPOSIT_RECEIVED_SIGNATURE))

#: ABI types of the non-indexed fields, in log data order
_DATA_TYPES = ["bytes32", "uint32", "uint64", "uint256", "address", "bytes32"]


class BadEventLog(Exception):
    """Log is not a well-formed ``BridgeDepositReceived``."""


@dataclass(slots=True, frozen=True)
class BridgeDepositReceived:
    """A deposit accepted and burnt by the bridge."""

    #: Depositor on the source chain
    sender: ChecksumAddress

    #: Final receiver on the destination chain, canonical
    recipient: CanonicalAddress

    #: CCTP domain of the bridge
    source_domain: int

    #: CCTP domain the value was burnt towards
    destination_domain: int

    #: CCTP message nonce assigned by the TokenMessenger
    nonce: int

    #: Burnt reference asset amount, after any swap
    amount: int

    #: Deposited token, or the zero address for native deposits
    source_token: ChecksumAddress

    #: Token the recipient wants on the destination chain, canonical
    destination_token: CanonicalAddress


def encode_bridge_deposit_log(
    event: BridgeDepositReceived,
    address: HexAddress | str,
    block_number: int = 0,
    transaction_hash: bytes | None = None,
    log_index: int = 0,
) -> dict:
    """Encode an event as a JSON-RPC style log entry.

    :param address:
        Bridge contract address

    :return:
        Log dict with ``topics`` and ``data`` as in ``eth_getLogs`` results
    """
    topics = [
        BRIDGE_DEPOSIT_RECEIVED_TOPIC,
        HexBytes(eth_abi.encode(["address"], [event.sender])),
        HexBytes(eth_abi.encode(["uint32"], [event.destination_domain])),
    ]
    data = eth_abi.encode(
        _DATA_TYPES,
        [
            bytes(event.recipient),
            event.source_domain,
            event.nonce,
            event.amount,
            event.source_token,
            bytes(event.destination_token),
        ],
    )
    return {
        "address": Web3.to_checksum_address(address),
        "topics": topics,
        "data": HexBytes(data),
        "blockNumber": block_number,
        "blockHash": HexBytes(b"\x00" * 32),
        "transactionHash": HexBytes(transaction_hash or b"\x00" * 32),
        "transactionIndex": 0,
        "logIndex": log_index,
        "removed": False,
    }


def decode_bridge_deposit_log(log: dict) -> BridgeDepositReceived:
    """Decode a raw ``BridgeDepositReceived`` log.

    Accepts both ``bytes`` and hex string topics and data.

    :raise BadEventLog:
        Wrong topic count or signature, or truncated topics and data
    """
    topics = [HexBytes(t) for t in log["topics"]]
    if len(topics) != 3 or topics[0] != BRIDGE_DEPOSIT_RECEIVED_TOPIC:
        raise BadEventLog(f"Not a BridgeDepositReceived log: {[t.hex() for t in topics]}")

    try:
        (sender,) = eth_abi.decode(["address"], topics[1])
        (destination_domain,) = eth_abi.decode(["uint32"], topics[2])
        recipient, source_domain, nonce, amount, source_token, destination_token = eth_abi.decode(_DATA_TYPES, HexBytes(log["data"]))
    except DecodingError as e:
        raise BadEventLog(f"Cannot decode BridgeDepositReceived log: {e}") from e

    return BridgeDepositReceived(
        sender=Web3.to_checksum_address(sender),
        recipient=as_canonical(recipient),
        source_domain=source_domain,
        destination_domain=destination_domain,
        nonce=nonce,
        amount=amount,
        source_token=Web3.to_checksum_address(source_token),
        destination_token=as_canonical(destination_token),
    )
