"""Safe transfer wrapper for asset tokens.

Tokens differ in what a successful transfer returns. Some return True, some
return nothing at all, and raw callers may hand back an ABI-encoded bool.
safe_transfer / safe_transfer_from accept all of these and turn every
rejection into TransferFailed so the surrounding operation aborts.
"""

from __future__ import annotations

import structlog
from eth_abi import decode  # type: ignore[attr-defined]
from eth_abi.exceptions import DecodingError

from pairpool.errors import PairError, TransferFailed
from pairpool.interfaces import AssetToken, TransferResult

logger = structlog.get_logger()


def _check_result(result: TransferResult, token: AssetToken, action: str) -> None:
    """Validate a token's transfer return value.

    Raises:
        TransferFailed: If the token reported failure or returned garbage
    """
    # Empty payload: minimal tokens that do not return a value
    if result is None or result == b"":
        return

    if isinstance(result, bool):
        success = result
    elif isinstance(result, bytes):
        try:
            (success,) = decode(["bool"], result)
        except (DecodingError, ValueError) as err:
            raise TransferFailed(
                f"{action} on {token.address} returned undecodable payload 0x{result.hex()}"
            ) from err
    else:
        raise TransferFailed(
            f"{action} on {token.address} returned unexpected {type(result).__name__}"
        )

    if not success:
        raise TransferFailed(f"{action} on {token.address} returned false")


def safe_transfer(token: AssetToken, sender: str, to: str, amount: int) -> None:
    """Transfer `amount` of `token` from `sender` (the pair) to `to`.

    Raises:
        TransferFailed: If the token rejects or reports failure
    """
    try:
        result = token.transfer(sender, to, amount)
    except PairError:
        raise
    except Exception as err:
        logger.debug("token_transfer_rejected", token=token.address, to=to, amount=amount)
        raise TransferFailed(f"transfer on {token.address} failed: {err}") from err
    _check_result(result, token, "transfer")


def safe_transfer_from(
    token: AssetToken, spender: str, owner: str, to: str, amount: int
) -> None:
    """Pull `amount` of `token` from `owner` to `to`, spending `spender`'s allowance.

    Raises:
        TransferFailed: If the token rejects or reports failure
    """
    try:
        result = token.transfer_from(spender, owner, to, amount)
    except PairError:
        raise
    except Exception as err:
        logger.debug(
            "token_transfer_from_rejected",
            token=token.address,
            owner=owner,
            to=to,
            amount=amount,
        )
        raise TransferFailed(f"transferFrom on {token.address} failed: {err}") from err
    _check_result(result, token, "transferFrom")
