"""cctp_bridge package root.

Cross-chain USDC bridging: swap any deposited asset to USDC and burn it
through Circle CCTP towards EVM and Solana-style destination chains.
"""

import sys


#: Minimum required Python version to run this package
MIN_PYTHON_VERSION = (3, 10)


def _check_python_version():
    """Try early abort if the Python version is too old."""
    if sys.version_info < MIN_PYTHON_VERSION:
        raise RuntimeError(f"web3-cctp-bridge needs Python {MIN_PYTHON_VERSION[0]}.{MIN_PYTHON_VERSION[1]} or later")


_check_python_version()
