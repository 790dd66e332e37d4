from __future__ import annotations

from typing import List, Tuple

from solders.pubkey import Pubkey

from .errors import DerivationError
from .project_constants import ASSOCIATED_TOKEN_PROGRAM_ID, TOKEN_PROGRAM_ID


def _ata_seeds(owner: Pubkey, mint: Pubkey, token_program_id: Pubkey) -> List[bytes]:
    # Order is fixed by the associated-token program: owner, token program, mint.
    return [bytes(owner), bytes(token_program_id), bytes(mint)]


def derive_associated_token_address(
    owner: Pubkey,
    mint: Pubkey,
    token_program_id: Pubkey = TOKEN_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    """
    Returns (address, bump) of the associated token account for owner/mint.
    Pure: no network access, same inputs always give the same output.
    """
    address, bump = Pubkey.find_program_address(
        _ata_seeds(owner, mint, token_program_id), ASSOCIATED_TOKEN_PROGRAM_ID
    )
    if address.is_on_curve():
        raise DerivationError(f"Derived address {address} has a private key; refusing it.")
    return address, bump


def get_associated_token_address(
    owner: Pubkey,
    mint: Pubkey,
    token_program_id: Pubkey = TOKEN_PROGRAM_ID,
) -> Pubkey:
    return derive_associated_token_address(owner, mint, token_program_id)[0]


def verify_associated_token_address(
    owner: Pubkey,
    mint: Pubkey,
    candidate: Pubkey,
    bump: int,
    token_program_id: Pubkey = TOKEN_PROGRAM_ID,
) -> bool:
    """
    Rebuilds the address from the seeds plus the given bump and compares.
    A seed set that lands on the curve has no program address and counts as a mismatch.
    """
    if not 0 <= bump <= 255:
        return False
    seeds = _ata_seeds(owner, mint, token_program_id) + [bytes([bump])]
    try:
        rebuilt = Pubkey.create_program_address(seeds, ASSOCIATED_TOKEN_PROGRAM_ID)
    except ValueError:
        return False
    return rebuilt == candidate
