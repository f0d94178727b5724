"""Canonical 32-byte addresses.

CCTP passes every foreign address as ``bytes32``, so that EVM chains and
account-key chains like Solana share one representation:

- EVM: the 20-byte address left-padded with 12 zero bytes
- Account model: the raw 32-byte account key

The canonical form carries no chain type tag. The chain type must come from
the caller or from the :py:class:`cctp_bridge.registry.DestinationRegistry`.

Example::

    from cctp_bridge.address import EvmAddress, AccountKey, to_canonical, from_canonical_evm

    canonical = to_canonical(EvmAddress("0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"))
    assert from_canonical_evm(canonical) == "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"

    canonical = canonicalise("EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v", ChainType.ACCOUNT_MODEL)
"""

from dataclasses import dataclass
from typing import TypeAlias

from base58 import b58decode, b58encode
from eth_typing import ChecksumAddress, HexAddress
from eth_utils import is_hex_address
from hexbytes import HexBytes
from web3 import Web3

from cctp_bridge.constants import ChainType

#: 32-byte address as passed to CCTP
CanonicalAddress: TypeAlias = HexBytes

#: Length of :py:data:`CanonicalAddress`
CANONICAL_ADDRESS_LENGTH = 32

#: Length of an EVM address
EVM_ADDRESS_LENGTH = 20


@dataclass(frozen=True, slots=True)
class EvmAddress:
    """A 20-byte address on an EVM chain."""

    #: 0x prefixed hex address, any checksum case
    address: HexAddress | str

    def __post_init__(self):
        if not is_hex_address(self.address):
            raise ValueError(f"Not a 20-byte hex address: {self.address}")


@dataclass(frozen=True, slots=True)
class AccountKey:
    """A 32-byte account key on an account-model chain like Solana."""

    #: Raw key bytes, at most 32
    key: bytes

    def __post_init__(self):
        if not self.key:
            raise ValueError("Empty account key")
        if len(self.key) > CANONICAL_ADDRESS_LENGTH:
            raise ValueError(f"Account key longer than {CANONICAL_ADDRESS_LENGTH} bytes: {len(self.key)}")

    @classmethod
    def from_base58(cls, text: str) -> "AccountKey":
        """Decode a base58 account key, e.g. a Solana public key.

        :raise ValueError:
            Not base58, or does not decode to exactly 32 bytes
        """
        try:
            raw = b58decode(text)
        except ValueError as e:
            raise ValueError(f"Not a base58 account key: {text}") from e
        if len(raw) != CANONICAL_ADDRESS_LENGTH:
            raise ValueError(f"Base58 account key must decode to {CANONICAL_ADDRESS_LENGTH} bytes, got {len(raw)}: {text}")
        return cls(key=raw)

    def to_base58(self) -> str:
        return b58encode(self.key).decode("ascii")


#: Address on any supported destination chain
ChainAddress: TypeAlias = EvmAddress | AccountKey


def to_canonical(address: ChainAddress) -> CanonicalAddress:
    """Convert a chain address to its 32-byte canonical form.

    :param address:
        Either :py:class:`EvmAddress` or :py:class:`AccountKey`

    :return:
        32 bytes, zero-extended in the high-order bytes
    """
    match address:
        case EvmAddress():
            raw = bytes(HexBytes(address.address))
        case AccountKey():
            raw = address.key
        case _:
            raise TypeError(f"Unknown chain address type: {type(address)}")
    return HexBytes(raw.rjust(CANONICAL_ADDRESS_LENGTH, b"\x00"))


def parse_chain_address(text: str, chain_type: ChainType) -> ChainAddress:
    """Parse the native text form of an address.

    :param text:
        ``0x`` hex for EVM chains, base58 for account-model chains

    :param chain_type:
        Address space the text belongs to
    """
    chain_type = ChainType(chain_type)
    if chain_type == ChainType.EVM:
        return EvmAddress(text)
    return AccountKey.from_base58(text)


def canonicalise(text: str, chain_type: ChainType) -> CanonicalAddress:
    """Parse a native address text and convert it to the canonical form."""
    return to_canonical(parse_chain_address(text, chain_type))


def as_canonical(value: bytes | str) -> CanonicalAddress:
    """Coerce already canonical ``bytes32`` data from bytes or hex text.

    :raise ValueError:
        If the value is not exactly 32 bytes
    """
    value = HexBytes(value)
    if len(value) != CANONICAL_ADDRESS_LENGTH:
        raise ValueError(f"Canonical address must be {CANONICAL_ADDRESS_LENGTH} bytes, got {len(value)}: {value.hex()}")
    return value


def from_canonical_evm(canonical: bytes | str) -> ChecksumAddress:
    """Strip the 12 leading bytes and return the EVM address.

    Only meaningful when the value was produced from an EVM address.
    The padding bytes are not checked.
    """
    canonical = as_canonical(canonical)
    return Web3.to_checksum_address(canonical[CANONICAL_ADDRESS_LENGTH - EVM_ADDRESS_LENGTH :])


def from_canonical_account_key(canonical: bytes | str) -> str:
    """Return the base58 text of a canonical account key.

    All 32 bytes are encoded, so keys with leading zero bytes survive the round trip.
    """
    canonical = as_canonical(canonical)
    return AccountKey(bytes(canonical)).to_base58()


def from_canonical(canonical: bytes | str, chain_type: ChainType) -> ChainAddress:
    """Decode a canonical address using an externally known chain type."""
    chain_type = ChainType(chain_type)
    if chain_type == ChainType.EVM:
        return EvmAddress(from_canonical_evm(canonical))
    return AccountKey(bytes(as_canonical(canonical)))
