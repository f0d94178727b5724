"""ABI loading from the bundled ABI files.

Provides functions to load ABI files and construct :py:class:`web3.contract.Contract` types.
The results are cached for the speedup.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Type

from eth_typing import HexAddress
from web3 import Web3
from web3.contract.contract import Contract

# How big are our ABI and contract caches
_CACHE_SIZE = 64


@lru_cache(maxsize=_CACHE_SIZE)
def get_abi_by_filename(fname: str) -> dict | list:
    """Reads a embedded ABI file and returns it.

    Example::

        abi = get_abi_by_filename("CrossChainBridge.json")

    :param fname:
        JSON filename under ``cctp_bridge/abi``

    :return:
        Either a solc artifact with an ``abi`` key or a bare ABI list
    """
    here = Path(__file__).resolve().parent
    abi_path = here / "abi" / Path(fname)
    with open(abi_path, "rt", encoding="utf-8") as f:
        abi = json.load(f)
    return abi


@lru_cache(maxsize=_CACHE_SIZE)
def get_contract(web3: Web3, fname: str) -> Type[Contract]:
    """Get Contract proxy class from ABI JSON file.

    Any results are cached. Web3 connection is part of the cache key.

    :param web3:
        Web3 instance

    :param fname:
        JSON filename under ``cctp_bridge/abi``

    :return:
        Contract proxy class
    """
    contract_interface = get_abi_by_filename(fname)

    if type(contract_interface) == list:
        # Etherscan
        abi = contract_interface
        bytecode = None
    else:
        # Solc output
        abi = contract_interface["abi"]
        bytecode = contract_interface.get("bytecode")
        if type(bytecode) == dict:
            bytecode = bytecode["object"]

    return web3.eth.contract(abi=abi, bytecode=bytecode or None)


def get_deployed_contract(web3: Web3, fname: str, address: HexAddress | str) -> Contract:
    """Get a Contract proxy object for a contract deployed at a specific address.

    :param web3:
        Web3 instance

    :param fname:
        JSON filename under ``cctp_bridge/abi``

    :param address:
        Ethereum address of the deployed contract

    :return:
        `web3.contract.Contract` proxy
    """
    assert isinstance(web3, Web3), f"Got {type(web3)} instead of Web3"
    assert address, f"get_deployed_contract() address was None"

    address = Web3.to_checksum_address(address)
    Contract = get_contract(web3, fname)
    return Contract(address)
