"""Canonical 32-byte address conversions."""

import pytest
from hexbytes import HexBytes
from web3 import Web3

from cctp_bridge.address import (
    AccountKey,
    EvmAddress,
    as_canonical,
    canonicalise,
    from_canonical,
    from_canonical_account_key,
    from_canonical_evm,
    parse_chain_address,
    to_canonical,
)
from cctp_bridge.constants import ChainType

#: Solana USDC mint
USDC_SOLANA_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"


@pytest.mark.parametrize(
    "address",
    [
        "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
        "0x0000000000000000000000000000000000000001",
        Web3.to_checksum_address("0x" + "ff" * 20),
    ],
)
def test_evm_round_trip(address):
    canonical = to_canonical(EvmAddress(address))
    assert len(canonical) == 32
    assert canonical[:12] == b"\x00" * 12
    assert from_canonical_evm(canonical) == address


def test_evm_lowercase_input():
    """Any checksum case is accepted, checksummed output comes back."""
    canonical = canonicalise("0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48", ChainType.EVM)
    assert from_canonical_evm(canonical) == "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
    assert canonical == HexBytes("0x000000000000000000000000a0b86991c6218b36c1d19d4a2e9eb0ce3606eb48")


@pytest.mark.parametrize("bad", ["0x1234", "not an address", "0xZZb86991c6218b36c1d19D4a2e9Eb0cE3606eB48"])
def test_bad_evm_address(bad):
    with pytest.raises(ValueError):
        EvmAddress(bad)


def test_account_key_round_trip():
    canonical = canonicalise(USDC_SOLANA_MINT, ChainType.ACCOUNT_MODEL)
    assert len(canonical) == 32
    assert from_canonical_account_key(canonical) == USDC_SOLANA_MINT
    assert from_canonical(canonical, ChainType.ACCOUNT_MODEL) == AccountKey.from_base58(USDC_SOLANA_MINT)


def test_short_account_key_is_padded():
    canonical = to_canonical(AccountKey(b"\x01\x02"))
    assert canonical == HexBytes(b"\x00" * 30 + b"\x01\x02")


def test_account_key_too_long():
    with pytest.raises(ValueError):
        AccountKey(b"\x01" * 33)


def test_bad_base58():
    # 0, O, I and l are not in the base58 alphabet
    with pytest.raises(ValueError):
        AccountKey.from_base58("0OIl")


@pytest.mark.parametrize("short", ["", "2", "12"])
def test_short_base58_rejected(short):
    """Base58 text must decode to a full key, so "2" and "12" cannot both map to 0x..01."""
    with pytest.raises(ValueError):
        canonicalise(short, ChainType.ACCOUNT_MODEL)


def test_empty_account_key():
    with pytest.raises(ValueError):
        AccountKey(b"")


def test_parse_by_chain_type():
    assert isinstance(parse_chain_address("0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48", ChainType.EVM), EvmAddress)
    assert isinstance(parse_chain_address(USDC_SOLANA_MINT, 1), AccountKey)

    # A Solana key is not read as hex even though the chain type says EVM
    with pytest.raises(ValueError):
        parse_chain_address(USDC_SOLANA_MINT, ChainType.EVM)


def test_from_canonical_evm_ignores_padding():
    """Decoding an account key as EVM keeps the low 20 bytes."""
    canonical = canonicalise(USDC_SOLANA_MINT, ChainType.ACCOUNT_MODEL)
    address = from_canonical(canonical, ChainType.EVM)
    assert isinstance(address, EvmAddress)
    assert HexBytes(address.address) == canonical[12:]


def test_as_canonical():
    value = "0x" + "11" * 32
    assert as_canonical(value) == HexBytes(value)
    assert as_canonical(bytes(32)) == HexBytes(bytes(32))

    with pytest.raises(ValueError):
        as_canonical("0x" + "11" * 20)


def test_unknown_address_type():
    with pytest.raises(TypeError):
        to_canonical("0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48")
