"""
Submit a signed transaction once, then poll its status until it reaches the
required commitment, fails, or the wait runs out.

The client never resubmits. Once the signed bytes have been sent they may
land at any time until the blockhash expires, so a second send could have
an ambiguous effect. A timeout therefore means "unknown", not "failed".
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from .errors import BlockhashExpiredError, MintClientError, classify_transaction_error
from .project_constants import DEFAULT_COMMITMENT, DEFAULT_CONFIRM_TIMEOUT_S, SUCCESS_COMMITMENTS
from .rpc import RpcClient
from .transaction import SignedTransaction

log = logging.getLogger(__name__)


class ConfirmationStatus(Enum):
    UNSENT = "unsent"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    FINALIZED = "finalized"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ConfirmationStatus.FINALIZED, ConfirmationStatus.FAILED)


_RANK = {
    ConfirmationStatus.UNSENT: 0,
    ConfirmationStatus.SUBMITTED: 1,
    ConfirmationStatus.CONFIRMED: 2,
    ConfirmationStatus.FINALIZED: 3,
}

# "processed" is visible to one node only; treat it as still in flight.
_STATUS_BY_COMMITMENT = {
    "processed": ConfirmationStatus.SUBMITTED,
    "confirmed": ConfirmationStatus.CONFIRMED,
    "finalized": ConfirmationStatus.FINALIZED,
}


@dataclass(frozen=True)
class ConfirmationPolicy:
    commitment: str = DEFAULT_COMMITMENT
    timeout_s: float = DEFAULT_CONFIRM_TIMEOUT_S
    initial_delay_s: float = 0.5
    backoff: float = 2.0
    max_delay_s: float = 4.0
    max_polls: int = 100

    def __post_init__(self) -> None:
        if self.commitment not in SUCCESS_COMMITMENTS:
            raise ValueError(f"commitment must be one of {SUCCESS_COMMITMENTS}")
        if self.timeout_s <= 0 or self.max_polls < 1:
            raise ValueError("timeout_s and max_polls must be positive")
        if self.initial_delay_s < 0 or self.backoff < 1 or self.max_delay_s < 0:
            raise ValueError("invalid backoff settings")

    @property
    def required_status(self) -> ConfirmationStatus:
        return _STATUS_BY_COMMITMENT[self.commitment]


@dataclass(frozen=True)
class ConfirmationResult:
    signature: str
    status: ConfirmationStatus
    slot: Optional[int] = None
    error: Optional[MintClientError] = None
    timed_out: bool = False
    polls: int = 0

    @property
    def succeeded(self) -> bool:
        return not self.timed_out and self.status in (
            ConfirmationStatus.CONFIRMED,
            ConfirmationStatus.FINALIZED,
        )

    @property
    def reason(self) -> str:
        if self.error is not None:
            return str(self.error)
        if self.timed_out:
            return f"not confirmed in time (last status: {self.status.value})"
        return ""


class TransactionSubmitter:
    def __init__(
        self,
        rpc: RpcClient,
        policy: ConfirmationPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.rpc = rpc
        self.policy = policy or ConfirmationPolicy()
        self._sleep = sleep
        self._clock = clock
        self.status = ConfirmationStatus.UNSENT

    def submit(self, tx: SignedTransaction) -> str:
        signature = self.rpc.send_transaction(
            tx.to_base64(),
            preflight_commitment="confirmed",
        )
        if signature != tx.signature:
            log.warning("Node returned signature %s, expected %s", signature, tx.signature)
        self.status = ConfirmationStatus.SUBMITTED
        log.info("Submitted transaction %s", signature)
        return signature

    def _fetch(self, signature: str) -> Optional[Dict[str, Any]]:
        return self.rpc.get_signature_statuses([signature])[0]

    def _blockhash_expired(self, last_valid_block_height: Optional[int]) -> bool:
        if last_valid_block_height is None:
            return False
        height = self.rpc.get_block_height(commitment="confirmed")
        return height > last_valid_block_height

    def _result(self, signature: str, slot: Optional[int], polls: int, **kw: Any) -> ConfirmationResult:
        return ConfirmationResult(signature=signature, status=self.status, slot=slot, polls=polls, **kw)

    def wait_for_confirmation(
        self,
        signature: str,
        last_valid_block_height: Optional[int] = None,
    ) -> ConfirmationResult:
        """
        Poll getSignatureStatuses with exponential backoff.

        Ends on the first of: required commitment reached (success), on-chain
        error (FAILED), blockhash expired while still unconfirmed (FAILED),
        or max_polls / timeout_s exhausted (timed_out=True).
        """
        policy = self.policy
        required = policy.required_status
        deadline = self._clock() + policy.timeout_s
        delay = policy.initial_delay_s
        slot: Optional[int] = None
        polls = 0
        # a signature only exists once the transaction has been sent
        self.status = ConfirmationStatus.SUBMITTED

        while polls < policy.max_polls:
            polls += 1
            entry = self._fetch(signature)

            if entry is not None:
                slot = entry.get("slot", slot)
                if entry.get("err") is not None:
                    self.status = ConfirmationStatus.FAILED
                    error = classify_transaction_error(entry["err"])
                    log.error("Transaction %s failed: %s", signature, error)
                    return self._result(signature, slot, polls, error=error)

                observed = _STATUS_BY_COMMITMENT.get(
                    entry.get("confirmationStatus"), ConfirmationStatus.SUBMITTED
                )
                if _RANK[observed] > _RANK[self.status]:
                    log.info("Transaction %s is %s (slot %s)", signature, observed.value, slot)
                    self.status = observed
                if _RANK[self.status] >= _RANK[required]:
                    return self._result(signature, slot, polls)

            if self.status is ConfirmationStatus.SUBMITTED and self._blockhash_expired(
                last_valid_block_height
            ):
                # one last look: it may have landed just before expiry
                if self._fetch(signature) is None:
                    self.status = ConfirmationStatus.FAILED
                    error = BlockhashExpiredError(
                        f"Blockhash expired before {signature} was confirmed."
                    )
                    log.error("%s", error)
                    return self._result(signature, slot, polls, error=error)

            remaining = deadline - self._clock()
            if remaining <= 0:
                break
            wait = min(delay, remaining)
            log.debug("Poll %d: %s, sleeping %.2fs", polls, self.status.value, wait)
            self._sleep(wait)
            delay = min(delay * policy.backoff, policy.max_delay_s)

        log.warning(
            "Gave up waiting for %s after %d poll(s); last status %s. It may still land.",
            signature,
            polls,
            self.status.value,
        )
        return self._result(signature, slot, polls, timed_out=True)

    def submit_and_confirm(self, tx: SignedTransaction) -> ConfirmationResult:
        signature = self.submit(tx)
        return self.wait_for_confirmation(signature, tx.last_valid_block_height)
