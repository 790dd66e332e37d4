from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from solders.instruction import Instruction
from solders.pubkey import Pubkey

from .confirm import ConfirmationPolicy, ConfirmationResult, ConfirmationStatus, TransactionSubmitter
from .derive import derive_associated_token_address
from .errors import ConfirmationTimeout, SubmissionError
from .instruction import build_mint_instruction, describe_accounts
from .keys import Signer
from .rpc import RpcClient
from .token_accounts import TokenAccountState, verify_minted_account
from .transaction import build_signed_transaction

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class MintResult:
    mint: Pubkey
    token_account: Pubkey
    signature: str
    instruction: Instruction
    confirmation: ConfirmationResult


def mint_token(
    rpc: RpcClient,
    authority: Signer,
    program_id: Pubkey,
    mint_signer: Optional[Signer] = None,
    policy: Optional[ConfirmationPolicy] = None,
    submitter: Optional[TransactionSubmitter] = None,
) -> MintResult:
    """
    One pipeline run: derive -> assemble -> build/sign -> submit/confirm.

    Raises the specific MintClientError for whichever stage failed.
    A ConfirmationTimeout means the outcome is unknown, not that it failed.
    """
    mint_signer = mint_signer or Signer.generate()
    submitter = submitter or TransactionSubmitter(rpc, policy)

    # 1. Derive the associated token account for the authority's new mint
    token_account, bump = derive_associated_token_address(authority.pubkey, mint_signer.pubkey)
    log.info("New mint       : %s", mint_signer.pubkey)
    log.info("Token account  : %s (bump %d)", token_account, bump)

    # 2. Assemble the program call; account order is the program's contract
    instruction = build_mint_instruction(
        program_id=program_id,
        mint=mint_signer.pubkey,
        token_account=token_account,
        authority=authority.pubkey,
    )
    for slot, pubkey, is_signer, is_writable in describe_accounts(instruction):
        log.debug("  %-24s %s signer=%s writable=%s", slot.name, pubkey, is_signer, is_writable)

    # 3. Fresh blockhash, then sign locally with both authorities
    blockhash, last_valid_block_height = rpc.get_latest_blockhash(commitment="finalized")
    log.debug("Blockhash %s valid through height %d", blockhash, last_valid_block_height)
    tx = build_signed_transaction(
        [instruction],
        payer=authority.pubkey,
        signers=[authority, mint_signer],
        recent_blockhash=blockhash,
        last_valid_block_height=last_valid_block_height,
    )

    # 4. Send once and wait
    confirmation = submitter.submit_and_confirm(tx)

    if confirmation.status is ConfirmationStatus.FAILED:
        if confirmation.error is not None:
            raise confirmation.error
        raise SubmissionError(f"Transaction {confirmation.signature} failed.")
    if confirmation.timed_out:
        raise ConfirmationTimeout(
            f"Transaction {confirmation.signature} {confirmation.reason}. "
            "Its effect is unknown; check the signature before building a new one.",
            signature=confirmation.signature,
        )

    return MintResult(
        mint=mint_signer.pubkey,
        token_account=token_account,
        signature=confirmation.signature,
        instruction=instruction,
        confirmation=confirmation,
    )


def verify_mint_result(
    rpc: RpcClient,
    result: MintResult,
    owner: Pubkey,
    commitment: str = "finalized",
) -> TokenAccountState:
    state = verify_minted_account(
        rpc,
        token_account=result.token_account,
        mint=result.mint,
        owner=owner,
        commitment=commitment,
    )
    log.info("Verified token account %s holds %d of %s", result.token_account, state.amount, state.mint)
    return state
