from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from solders.errors import SignerError
from solders.hash import Hash, ParseHashError
from solders.instruction import Instruction
from solders.message import Message
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from .errors import SigningError
from .keys import Signer

log = logging.getLogger(__name__)

# Max serialized transaction size accepted by validators
PACKET_DATA_SIZE = 1232


@dataclass(frozen=True)
class SignedTransaction:
    """
    A legacy transaction with one signature per required signer, plus the
    block height after which its blockhash is no longer accepted.
    """

    transaction: Transaction
    last_valid_block_height: Optional[int] = None

    @property
    def message(self) -> Message:
        return self.transaction.message

    @property
    def signatures(self) -> Tuple[bytes, ...]:
        return tuple(bytes(s) for s in self.transaction.signatures)

    @property
    def signature(self) -> str:
        """Transaction id: base58 of the fee payer's signature."""
        return str(self.transaction.signatures[0])

    @property
    def recent_blockhash(self) -> str:
        return str(self.message.recent_blockhash)

    def serialize(self) -> bytes:
        return bytes(self.transaction)

    def to_base64(self) -> str:
        return base64.b64encode(self.serialize()).decode("ascii")

    def verify(self) -> bool:
        return all(self.transaction.verify_with_results())


def parse_blockhash(blockhash: str) -> Hash:
    try:
        return Hash.from_string(blockhash)
    except (ParseHashError, ValueError) as e:
        raise ValueError(f"Blockhash is not a base58 32-byte hash: {blockhash!r}") from e


def build_signed_transaction(
    instructions: Sequence[Instruction],
    payer: Pubkey,
    signers: Sequence[Signer],
    recent_blockhash: str,
    last_valid_block_height: Optional[int] = None,
) -> SignedTransaction:
    """
    Compile the instructions and sign for every required signer.

    Raises SigningError if any signer the message needs is not in `signers`;
    nothing is returned in that case. Signing is local, no network.
    """
    if not instructions:
        raise ValueError("A transaction needs at least one instruction.")
    blockhash = parse_blockhash(recent_blockhash)
    message = Message.new_with_blockhash(list(instructions), payer, blockhash)

    required = message.signer_keys()
    available = {s.pubkey: s for s in signers}

    missing = [str(k) for k in required if k not in available]
    if missing:
        raise SigningError(f"Missing signature for required signer(s): {', '.join(missing)}")

    unused = [str(k) for k in available if k not in required]
    if unused:
        log.debug("Ignoring signer(s) not required by the message: %s", ", ".join(unused))

    try:
        tx = Transaction([available[k].keypair for k in required], message, blockhash)
    except SignerError as e:
        raise SigningError(f"Signing failed: {e}") from e

    signed = SignedTransaction(transaction=tx, last_valid_block_height=last_valid_block_height)
    size = len(signed.serialize())
    if size > PACKET_DATA_SIZE:
        raise ValueError(f"Transaction too large: {size} > {PACKET_DATA_SIZE} bytes")

    log.debug(
        "Built transaction %s: %d accounts, %d signer(s), %d bytes",
        signed.signature,
        len(message.account_keys),
        len(required),
        size,
    )
    return signed
