"""
Instruction for the mint program.

The program reads its accounts positionally and takes no instruction data,
so the seven-slot layout below is the whole call contract. A wrong order or
flag is not detectable locally; the program simply rejects or misreads it.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Mapping, Tuple, Union

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from .project_constants import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    SYSTEM_PROGRAM_ID,
    SYSVAR_RENT_ID,
    TOKEN_PROGRAM_ID,
)


class AccountSlot(Enum):
    # value: (position, is_signer, is_writable)
    MINT = (0, True, True)
    TOKEN_ACCOUNT = (1, False, True)
    MINT_AUTHORITY = (2, True, False)
    RENT_SYSVAR = (3, False, False)
    SYSTEM_PROGRAM = (4, False, False)
    TOKEN_PROGRAM = (5, False, False)
    ASSOCIATED_TOKEN_PROGRAM = (6, False, False)

    @property
    def position(self) -> int:
        return self.value[0]

    @property
    def is_signer(self) -> bool:
        return self.value[1]

    @property
    def is_writable(self) -> bool:
        return self.value[2]


MINT_ACCOUNT_SCHEMA: Tuple[AccountSlot, ...] = tuple(
    sorted(AccountSlot, key=lambda s: s.position)
)

SlotInputs = Union[Mapping[AccountSlot, Pubkey], Iterable[Tuple[AccountSlot, Pubkey]]]


def build_instruction(program_id: Pubkey, accounts: SlotInputs) -> Instruction:
    """
    Accounts may arrive in any order; the output always follows MINT_ACCOUNT_SCHEMA.
    Every slot must be given exactly once.
    """
    pairs = list(accounts.items()) if isinstance(accounts, Mapping) else list(accounts)

    by_slot: dict = {}
    for slot, pubkey in pairs:
        if not isinstance(slot, AccountSlot):
            raise ValueError(f"Unknown account slot: {slot!r}")
        if slot in by_slot:
            raise ValueError(f"Account slot {slot.name} given more than once.")
        by_slot[slot] = pubkey

    missing = [s.name for s in MINT_ACCOUNT_SCHEMA if s not in by_slot]
    if missing:
        raise ValueError(f"Missing account slots: {', '.join(missing)}")

    metas = [AccountMeta(by_slot[s], s.is_signer, s.is_writable) for s in MINT_ACCOUNT_SCHEMA]
    return Instruction(program_id, b"", metas)


def mint_accounts(
    mint: Pubkey,
    token_account: Pubkey,
    authority: Pubkey,
) -> List[Tuple[AccountSlot, Pubkey]]:
    return [
        (AccountSlot.MINT, mint),
        (AccountSlot.TOKEN_ACCOUNT, token_account),
        (AccountSlot.MINT_AUTHORITY, authority),
        (AccountSlot.RENT_SYSVAR, SYSVAR_RENT_ID),
        (AccountSlot.SYSTEM_PROGRAM, SYSTEM_PROGRAM_ID),
        (AccountSlot.TOKEN_PROGRAM, TOKEN_PROGRAM_ID),
        (AccountSlot.ASSOCIATED_TOKEN_PROGRAM, ASSOCIATED_TOKEN_PROGRAM_ID),
    ]


def build_mint_instruction(
    program_id: Pubkey,
    mint: Pubkey,
    token_account: Pubkey,
    authority: Pubkey,
) -> Instruction:
    return build_instruction(program_id, mint_accounts(mint, token_account, authority))


def describe_accounts(
    instruction: Instruction,
) -> List[Tuple[AccountSlot, Pubkey, bool, bool]]:
    if len(instruction.accounts) != len(MINT_ACCOUNT_SCHEMA):
        raise ValueError(
            f"Expected {len(MINT_ACCOUNT_SCHEMA)} accounts, got {len(instruction.accounts)}."
        )
    return [
        (slot, meta.pubkey, meta.is_signer, meta.is_writable)
        for slot, meta in zip(MINT_ACCOUNT_SCHEMA, instruction.accounts)
    ]
