"""
Shared fixtures: signers, a scripted in-memory RPC and a fake clock so the
confirmation loop runs without sleeping.
"""

from __future__ import annotations

import base64
from typing import Any, Dict, List, Optional

import base58
import pytest

from solana_mint.keys import Signer

BLOCKHASH = base58.b58encode(bytes([7] * 32)).decode("ascii")
LAST_VALID_BLOCK_HEIGHT = 1_000


def status_entry(confirmation_status: Optional[str], err: Any = None, slot: int = 42) -> Dict[str, Any]:
    return {
        "slot": slot,
        "confirmations": None,
        "err": err,
        "confirmationStatus": confirmation_status,
    }


def signature_of(tx_base64: str) -> str:
    raw = base64.b64decode(tx_base64)
    # one-byte signature count, then the fee payer's 64-byte signature
    return base58.b58encode(raw[1:65]).decode("ascii")


class ScriptedRpc:
    """
    Stands in for RpcClient. `statuses` is replayed one entry per poll;
    the last entry repeats once the script runs out.
    """

    def __init__(
        self,
        statuses: List[Optional[Dict[str, Any]]],
        block_height: int = 0,
        account_info: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.statuses = list(statuses)
        self.block_height = block_height
        self.account_info = account_info
        self.sent: List[str] = []
        self.status_calls = 0

    def get_latest_blockhash(self, commitment: str = "finalized"):
        return BLOCKHASH, LAST_VALID_BLOCK_HEIGHT

    def send_transaction(self, tx_base64, preflight_commitment="confirmed", skip_preflight=False):
        self.sent.append(tx_base64)
        return signature_of(tx_base64)

    def get_signature_statuses(self, signatures, search_history=False):
        entry = self.statuses[min(self.status_calls, len(self.statuses) - 1)]
        self.status_calls += 1
        return [entry]

    def get_block_height(self, commitment="confirmed"):
        return self.block_height

    def get_account_info_base64(self, address, commitment="confirmed"):
        return self.account_info


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def authority() -> Signer:
    return Signer.generate()


@pytest.fixture
def mint_signer() -> Signer:
    return Signer.generate()


@pytest.fixture
def program_id():
    return Signer.generate().pubkey


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
