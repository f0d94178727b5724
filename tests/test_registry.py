"""Destination whitelist and ownership."""

import copy

import pytest

from cctp_bridge.address import canonicalise
from cctp_bridge.constants import CCTP_DOMAIN_AVALANCHE, CCTP_DOMAIN_BASE, CCTP_DOMAIN_SOLANA, ChainType
from cctp_bridge.registry import DestinationRegistry
from cctp_bridge.revert import Unauthorized
from cctp_bridge.testing import make_address

#: WETH on Base
WETH_BASE = canonicalise("0x4200000000000000000000000000000000000006", ChainType.EVM)


@pytest.fixture()
def registry(deployer) -> DestinationRegistry:
    return DestinationRegistry.create(
        owner=deployer,
        destination_domains=[CCTP_DOMAIN_AVALANCHE],
        chain_types=[ChainType.EVM],
        token_domains=[CCTP_DOMAIN_AVALANCHE],
        tokens=[canonicalise("0xB97EF9Ef8734C71904D8002F8b6Bc66Dd9c48a6E", ChainType.EVM)],
    )


def test_seeded(registry, deployer):
    assert registry.owner == deployer
    assert registry.is_destination_supported(CCTP_DOMAIN_AVALANCHE)
    assert registry.chain_type_of(CCTP_DOMAIN_AVALANCHE) == ChainType.EVM
    assert registry.is_token_supported(CCTP_DOMAIN_AVALANCHE, "0x000000000000000000000000B97EF9Ef8734C71904D8002F8b6Bc66Dd9c48a6E")
    assert registry.get_supported_destination_chains() == {CCTP_DOMAIN_AVALANCHE: ChainType.EVM}


def test_create_length_mismatch(deployer):
    with pytest.raises(ValueError):
        DestinationRegistry.create(deployer, destination_domains=[1, 2], chain_types=[ChainType.EVM])

    with pytest.raises(ValueError):
        DestinationRegistry.create(deployer, token_domains=[1], tokens=[])


@pytest.mark.parametrize("domain_id", [0, 2, 5, 99, 2**32 - 1])
def test_never_added_domain(registry, domain_id):
    assert not registry.is_destination_supported(domain_id)
    assert registry.chain_type_of(domain_id) is None


def test_add_remove_chain(registry, deployer):
    registry.add_destination_chain(deployer, CCTP_DOMAIN_SOLANA, ChainType.ACCOUNT_MODEL)
    assert registry.is_destination_supported(CCTP_DOMAIN_SOLANA)
    assert registry.chain_type_of(CCTP_DOMAIN_SOLANA) == ChainType.ACCOUNT_MODEL

    registry.remove_destination_chain(deployer, CCTP_DOMAIN_SOLANA)
    assert not registry.is_destination_supported(CCTP_DOMAIN_SOLANA)
    # Type survives the removal
    assert registry.chain_type_of(CCTP_DOMAIN_SOLANA) == ChainType.ACCOUNT_MODEL
    assert CCTP_DOMAIN_SOLANA not in registry.get_supported_destination_chains()


def test_remove_unknown_chain(registry, deployer):
    registry.remove_destination_chain(deployer, CCTP_DOMAIN_BASE)
    assert registry.chain_type_of(CCTP_DOMAIN_BASE) is None


def test_add_chain_updates_type(registry, deployer):
    registry.remove_destination_chain(deployer, CCTP_DOMAIN_AVALANCHE)
    registry.add_destination_chain(deployer, CCTP_DOMAIN_AVALANCHE, 1)
    assert registry.is_destination_supported(CCTP_DOMAIN_AVALANCHE)
    assert registry.chain_type_of(CCTP_DOMAIN_AVALANCHE) == ChainType.ACCOUNT_MODEL


def test_add_chain_idempotent(registry, deployer):
    registry.add_destination_chain(deployer, CCTP_DOMAIN_BASE, ChainType.EVM)
    once = copy.deepcopy(registry)

    registry.add_destination_chain(deployer, CCTP_DOMAIN_BASE, ChainType.EVM)
    assert registry == once


def test_remove_chain_keeps_tokens(registry, deployer):
    token = canonicalise("0xB97EF9Ef8734C71904D8002F8b6Bc66Dd9c48a6E", ChainType.EVM)
    registry.remove_destination_chain(deployer, CCTP_DOMAIN_AVALANCHE)
    assert registry.is_token_supported(CCTP_DOMAIN_AVALANCHE, token)


def test_add_remove_token(registry, deployer):
    assert not registry.is_token_supported(CCTP_DOMAIN_BASE, WETH_BASE)

    # Token entries do not need a supported chain
    registry.add_destination_token(deployer, CCTP_DOMAIN_BASE, WETH_BASE)
    assert registry.is_token_supported(CCTP_DOMAIN_BASE, WETH_BASE)
    assert not registry.is_token_supported(CCTP_DOMAIN_AVALANCHE, WETH_BASE)

    registry.remove_destination_token(deployer, CCTP_DOMAIN_BASE, WETH_BASE)
    assert not registry.is_token_supported(CCTP_DOMAIN_BASE, WETH_BASE)


def test_token_must_be_canonical(registry, deployer):
    with pytest.raises(ValueError):
        registry.add_destination_token(deployer, CCTP_DOMAIN_BASE, "0x4200000000000000000000000000000000000006")


def test_non_owner_rejected(registry, user_1):
    before = copy.deepcopy(registry)

    with pytest.raises(Unauthorized):
        registry.add_destination_token(user_1, CCTP_DOMAIN_BASE, WETH_BASE)

    with pytest.raises(Unauthorized):
        registry.add_destination_chain(user_1, CCTP_DOMAIN_BASE, ChainType.EVM)

    with pytest.raises(Unauthorized):
        registry.remove_destination_chain(user_1, CCTP_DOMAIN_AVALANCHE)

    with pytest.raises(Unauthorized):
        registry.remove_destination_token(user_1, CCTP_DOMAIN_AVALANCHE, canonicalise("0xB97EF9Ef8734C71904D8002F8b6Bc66Dd9c48a6E", ChainType.EVM))

    with pytest.raises(Unauthorized):
        registry.transfer_ownership(user_1, user_1)

    assert registry == before


def test_transfer_ownership(registry, deployer, user_1):
    registry.transfer_ownership(deployer, user_1.lower())
    assert registry.owner == user_1

    registry.add_destination_chain(user_1, CCTP_DOMAIN_BASE, ChainType.EVM)

    with pytest.raises(Unauthorized):
        registry.add_destination_chain(deployer, CCTP_DOMAIN_SOLANA, ChainType.ACCOUNT_MODEL)


def test_transfer_ownership_to_zero(registry, deployer):
    with pytest.raises(ValueError):
        registry.transfer_ownership(deployer, "0x0000000000000000000000000000000000000000")
    assert registry.owner == deployer


def test_bridge_registry_owner(bridge, deployer):
    """Deployer owns the registry of a deployed bridge."""
    assert bridge.owner == deployer

    new_owner = make_address("multisig")
    bridge.transfer_ownership(deployer, new_owner)
    assert bridge.owner == new_owner

    with pytest.raises(Unauthorized):
        bridge.add_destination_token(deployer, CCTP_DOMAIN_BASE, WETH_BASE)
    assert not bridge.is_token_supported(CCTP_DOMAIN_BASE, WETH_BASE)
