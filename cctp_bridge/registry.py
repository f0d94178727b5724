"""Destination whitelist.

The registry holds which CCTP destination domains the bridge may burn towards,
what address format each uses, and which destination tokens may be
requested on each domain.

The registry is an explicit object handed to the bridge, not module state.
Chain and token entries are independent: removing a chain leaves
its token entries in place, and a token can be whitelisted for a domain
that is not a supported chain.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable

from eth_typing import HexAddress

from cctp_bridge.access import Ownable, only_owner
from cctp_bridge.address import CanonicalAddress, as_canonical
from cctp_bridge.constants import CCTP_DOMAIN_NAMES, ChainType

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DestinationChain:
    """Whitelist entry of a destination domain."""

    #: Address format of the domain
    chain_type: ChainType

    #: False after removal
    is_supported: bool


@dataclass
class DestinationRegistry(Ownable):
    """Owner managed whitelist of destination domains and tokens.

    Example::

        registry = DestinationRegistry.create(
            owner=deployer,
            destination_domains=[CCTP_DOMAIN_AVALANCHE, CCTP_DOMAIN_SOLANA],
            chain_types=[ChainType.EVM, ChainType.ACCOUNT_MODEL],
            token_domains=[CCTP_DOMAIN_AVALANCHE],
            tokens=[canonicalise(USDC_AVALANCHE, ChainType.EVM)],
        )
        assert registry.is_destination_supported(CCTP_DOMAIN_SOLANA)
    """

    #: domain id -> chain entry
    chains: dict[int, DestinationChain] = field(default_factory=dict)

    #: (domain id, canonical token) -> supported
    tokens: dict[tuple[int, CanonicalAddress], bool] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        owner: HexAddress | str,
        destination_domains: Iterable[int] = (),
        chain_types: Iterable[ChainType | int] = (),
        token_domains: Iterable[int] = (),
        tokens: Iterable[bytes | str] = (),
    ) -> "DestinationRegistry":
        """Create a registry seeded with initial whitelists.

        :param destination_domains:
            Domains to support, matched by position with ``chain_types``

        :param token_domains:
            Domains of the initial tokens, matched by position with ``tokens``

        :raise ValueError:
            If the paired lists differ in length
        """
        destination_domains = list(destination_domains)
        chain_types = list(chain_types)
        token_domains = list(token_domains)
        tokens = list(tokens)

        if len(destination_domains) != len(chain_types):
            raise ValueError(f"Got {len(destination_domains)} destination domains but {len(chain_types)} chain types")

        if len(token_domains) != len(tokens):
            raise ValueError(f"Got {len(token_domains)} token domains but {len(tokens)} tokens")

        registry = cls(owner=owner)
        for domain_id, chain_type in zip(destination_domains, chain_types):
            registry._set_chain(domain_id, ChainType(chain_type))
        for domain_id, token in zip(token_domains, tokens):
            registry.tokens[(domain_id, as_canonical(token))] = True

        logger.info(
            "Destination registry seeded with %d chains and %d tokens, owner %s",
            len(registry.chains),
            len(registry.tokens),
            registry.owner,
        )
        return registry

    def _set_chain(self, domain_id: int, chain_type: ChainType):
        assert type(domain_id) == int and domain_id >= 0, f"Bad domain id: {domain_id}"
        self.chains[domain_id] = DestinationChain(chain_type=chain_type, is_supported=True)

    @only_owner
    def add_destination_chain(self, caller: HexAddress | str, domain_id: int, chain_type: ChainType | int):
        """Support a destination domain, or update its chain type."""
        chain_type = ChainType(chain_type)
        self._set_chain(domain_id, chain_type)
        logger.info("Added destination chain %d (%s), type %s", domain_id, CCTP_DOMAIN_NAMES.get(domain_id, "unknown"), chain_type.name)

    @only_owner
    def remove_destination_chain(self, caller: HexAddress | str, domain_id: int):
        """Stop supporting a destination domain.

        The chain type and token entries of the domain are kept.
        """
        entry = self.chains.get(domain_id)
        if entry is not None:
            entry.is_supported = False
        logger.info("Removed destination chain %d", domain_id)

    @only_owner
    def add_destination_token(self, caller: HexAddress | str, domain_id: int, token: bytes | str):
        """Whitelist a canonical token for a domain."""
        token = as_canonical(token)
        self.tokens[(domain_id, token)] = True
        logger.info("Added destination token %s on domain %d", token.hex(), domain_id)

    @only_owner
    def remove_destination_token(self, caller: HexAddress | str, domain_id: int, token: bytes | str):
        token = as_canonical(token)
        self.tokens[(domain_id, token)] = False
        logger.info("Removed destination token %s on domain %d", token.hex(), domain_id)

    def is_destination_supported(self, domain_id: int) -> bool:
        entry = self.chains.get(domain_id)
        return entry is not None and entry.is_supported

    def chain_type_of(self, domain_id: int) -> ChainType | None:
        """Chain type of a known domain, supported or not.

        :return:
            ``None`` if the domain was never added
        """
        entry = self.chains.get(domain_id)
        if entry is None:
            return None
        return entry.chain_type

    def is_token_supported(self, domain_id: int, token: bytes | str) -> bool:
        return self.tokens.get((domain_id, as_canonical(token)), False)

    def get_supported_destination_chains(self) -> dict[int, ChainType]:
        """All currently supported domains and their chain types."""
        return {domain_id: entry.chain_type for domain_id, entry in sorted(self.chains.items()) if entry.is_supported}
