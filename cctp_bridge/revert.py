"""Bridge revert reasons.

Every failing bridge entrypoint raises one of these exceptions. When raised,
the surrounding :py:meth:`cctp_bridge.state.ChainState.transaction` has already
rolled back all balance, allowance and log changes of the call.
"""


class BridgeRevert(Exception):
    """Base class for all bridge reverts.

    The first argument is the Solidity style revert reason.
    """


class Unauthorized(BridgeRevert):
    """A non-owner called an owner-only entrypoint."""


class UnsupportedDestination(BridgeRevert):
    """Destination domain is not whitelisted."""


class UnsupportedDestinationToken(BridgeRevert):
    """Destination token is not whitelisted for the destination domain."""


class InvalidAmount(BridgeRevert):
    """Zero amount, or attached native value does not match the amount."""


class InsufficientAllowance(BridgeRevert):
    """ERC-20 ``transferFrom()`` without enough allowance."""


class InsufficientBalance(BridgeRevert):
    """ERC-20 transfer or native value larger than the holder balance."""


class ExternalCallFailure(BridgeRevert):
    """Swap router or token messenger call failed.

    The original exception is available as ``__cause__``.
    """


class ReentrantCall(BridgeRevert):
    """A collaborator tried to re-enter the bridge during a deposit."""
