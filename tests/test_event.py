"""BridgeDepositReceived log encoding."""

import pytest
from hexbytes import HexBytes
from web3 import Web3

from cctp_bridge.address import canonicalise
from cctp_bridge.client import get_cross_chain_bridge
from cctp_bridge.constants import CCTP_DOMAIN_ARBITRUM, CCTP_DOMAIN_SOLANA, ChainType
from cctp_bridge.event import (
    BRIDGE_DEPOSIT_RECEIVED_TOPIC,
    BadEventLog,
    BridgeDepositReceived,
    decode_bridge_deposit_log,
    encode_bridge_deposit_log,
)
from cctp_bridge.testing import make_address


@pytest.fixture()
def event() -> BridgeDepositReceived:
    return BridgeDepositReceived(
        sender=make_address("user-1"),
        recipient=canonicalise("9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM", ChainType.ACCOUNT_MODEL),
        source_domain=CCTP_DOMAIN_ARBITRUM,
        destination_domain=CCTP_DOMAIN_SOLANA,
        nonce=2**64 - 1,
        amount=1_234_567,
        source_token="0xaf88d065e77c8cC2239327C5EDb3A432268e5831",
        destination_token=canonicalise("EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v", ChainType.ACCOUNT_MODEL),
    )


def test_topic():
    assert BRIDGE_DEPOSIT_RECEIVED_TOPIC == Web3.keccak(text="BridgeDepositReceived(address,bytes32,uint32,uint32,uint64,uint256,address,bytes32)")


def test_encode_decode(event):
    log = encode_bridge_deposit_log(event, make_address("bridge"))
    assert len(log["topics"]) == 3
    assert log["topics"][1][12:] == HexBytes(event.sender)
    assert int.from_bytes(log["topics"][2], "big") == CCTP_DOMAIN_SOLANA
    assert len(log["data"]) == 6 * 32

    assert decode_bridge_deposit_log(log) == event


def test_decode_hex_strings(event):
    """JSON-RPC results carry hex strings."""
    log = encode_bridge_deposit_log(event, make_address("bridge"))
    log["topics"] = ["0x" + bytes(t).hex() for t in log["topics"]]
    log["data"] = "0x" + bytes(log["data"]).hex()
    assert decode_bridge_deposit_log(log) == event


def test_decode_with_web3(event):
    """web3.py decodes our logs with the bundled ABI."""
    address = make_address("bridge")
    bridge = get_cross_chain_bridge(Web3(), address)
    log = encode_bridge_deposit_log(event, address, block_number=10, log_index=3)

    decoded = bridge.events.BridgeDepositReceived().process_log(log)

    assert decoded["event"] == "BridgeDepositReceived"
    assert decoded["logIndex"] == 3
    args = decoded["args"]
    assert args["from"] == event.sender
    assert bytes(args["recipient"]) == bytes(event.recipient)
    assert args["sourceChain"] == CCTP_DOMAIN_ARBITRUM
    assert args["destinationChain"] == CCTP_DOMAIN_SOLANA
    assert args["nonce"] == 2**64 - 1
    assert args["amount"] == 1_234_567
    assert args["sourceToken"] == event.source_token
    assert bytes(args["destinationToken"]) == bytes(event.destination_token)


def test_decode_wrong_event(event):
    log = encode_bridge_deposit_log(event, make_address("bridge"))
    log["topics"][0] = Web3.keccak(text="Transfer(address,address,uint256)")
    with pytest.raises(BadEventLog):
        decode_bridge_deposit_log(log)

    log["topics"] = log["topics"][:2]
    with pytest.raises(BadEventLog):
        decode_bridge_deposit_log(log)


def test_decode_truncated_data(event):
    log = encode_bridge_deposit_log(event, make_address("bridge"))
    log["data"] = log["data"][:10]
    with pytest.raises(BadEventLog):
        decode_bridge_deposit_log(log)


def test_decode_short_topic(event):
    log = encode_bridge_deposit_log(event, make_address("bridge"))
    log["topics"][2] = HexBytes(b"\x05")
    with pytest.raises(BadEventLog):
        decode_bridge_deposit_log(log)
