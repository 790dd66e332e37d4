from __future__ import annotations

import base64
import binascii
import struct
from dataclasses import dataclass

import base58
from solders.pubkey import Pubkey

from .errors import AccountVerificationError
from .project_constants import MINTED_AMOUNT, TOKEN_2022_PROGRAM_ID, TOKEN_PROGRAM_ID
from .rpc import RpcClient

TOKEN_ACCOUNT_MIN_SIZE = 72


@dataclass(frozen=True)
class TokenAccountState:
    mint: str
    owner: str
    amount: int


def parse_token_account(account_data: bytes) -> TokenAccountState | None:
    """
    Standard token account layout (Token-2022 keeps these offsets too).
    Mint(0-32) | Owner(32-64) | Amount(64-72)
    """
    if len(account_data) < TOKEN_ACCOUNT_MIN_SIZE:
        return None

    mint = base58.b58encode(account_data[0:32]).decode("ascii")
    owner = base58.b58encode(account_data[32:64]).decode("ascii")
    amount = struct.unpack("<Q", account_data[64:72])[0]
    return TokenAccountState(mint=mint, owner=owner, amount=amount)


def fetch_token_account(
    rpc: RpcClient,
    address: Pubkey,
    commitment: str = "finalized",
) -> TokenAccountState | None:
    info = rpc.get_account_info_base64(str(address), commitment=commitment)
    if info is None:
        return None

    if info["owner"] not in (str(TOKEN_PROGRAM_ID), str(TOKEN_2022_PROGRAM_ID)):
        raise AccountVerificationError(
            f"Account {address} is owned by {info['owner']}, not a token program."
        )
    try:
        raw = base64.b64decode(info["data"])
    except binascii.Error as e:
        raise AccountVerificationError(f"Account {address} data is not base64: {e}") from e
    return parse_token_account(raw)


def verify_minted_account(
    rpc: RpcClient,
    token_account: Pubkey,
    mint: Pubkey,
    owner: Pubkey,
    commitment: str = "finalized",
) -> TokenAccountState:
    """
    Checks that the token account exists, holds the new mint for `owner`,
    and carries exactly the minted amount.
    """
    state = fetch_token_account(rpc, token_account, commitment=commitment)
    if state is None:
        raise AccountVerificationError(f"Token account {token_account} not found.")

    if state.mint != str(mint):
        raise AccountVerificationError(
            f"Token account mint mismatch: chain={state.mint} expected={mint}"
        )
    if state.owner != str(owner):
        raise AccountVerificationError(
            f"Token account owner mismatch: chain={state.owner} expected={owner}"
        )
    if state.amount != MINTED_AMOUNT:
        raise AccountVerificationError(
            f"Token account amount mismatch: chain={state.amount} expected={MINTED_AMOUNT}"
        )
    return state
