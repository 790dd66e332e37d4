from __future__ import annotations

from typing import Any, Dict, List, Optional


class MintClientError(RuntimeError):
    """Base for every failure surfaced by the mint pipeline."""

    stage = "pipeline"


class ConfigurationError(MintClientError):
    stage = "config"


class DerivationError(MintClientError):
    stage = "derive"


class SigningError(MintClientError):
    stage = "sign"


class SubmissionError(MintClientError):
    """
    Network or RPC failure while submitting or polling.

    Retry only by building a new transaction with a fresh blockhash,
    never by resending the same signed bytes.
    """

    stage = "submit"


class BlockhashExpiredError(SubmissionError):
    pass


class InsufficientFundsError(SubmissionError):
    pass


class ProgramRejection(SubmissionError):
    """The on-chain program returned an error. The payload is kept verbatim."""

    stage = "program"

    def __init__(
        self,
        message: str,
        raw: Any = None,
        instruction_index: Optional[int] = None,
        code: Optional[int] = None,
        logs: Optional[List[str]] = None,
    ) -> None:
        super().__init__(message)
        self.raw = raw
        self.instruction_index = instruction_index
        self.code = code
        self.logs = list(logs or [])


class ConfirmationTimeout(MintClientError):
    """The wait ran out. The transaction may still land later."""

    stage = "confirm"

    def __init__(self, message: str, signature: str) -> None:
        super().__init__(message)
        self.signature = signature


class AccountVerificationError(MintClientError):
    """Finalized, but the on-chain token account does not look as expected."""

    stage = "verify"


def classify_transaction_error(err: Any, logs: Optional[List[str]] = None) -> SubmissionError:
    """
    Map a transaction `err` value (as returned by sendTransaction preflight
    or getSignatureStatuses) to the matching exception.

    Examples of `err`:
      "BlockhashNotFound"
      "InsufficientFundsForFee"
      {"InstructionError": [0, {"Custom": 6}]}
      {"InstructionError": [0, "InvalidAccountData"]}
    """
    if err == "BlockhashNotFound":
        return BlockhashExpiredError("Blockhash expired or not found; rebuild the transaction.")
    if err in ("InsufficientFundsForFee", "InsufficientFundsForRent"):
        return InsufficientFundsError(f"Insufficient funds: {err}")

    if isinstance(err, dict) and "InstructionError" in err:
        detail = err["InstructionError"]
        index: Optional[int] = None
        code: Optional[int] = None
        if isinstance(detail, list) and len(detail) == 2:
            index = int(detail[0])
            inner = detail[1]
            if isinstance(inner, dict) and "Custom" in inner:
                code = int(inner["Custom"])
        return ProgramRejection(
            f"Program rejected instruction {index}: {detail}",
            raw=err,
            instruction_index=index,
            code=code,
            logs=logs,
        )

    return SubmissionError(f"Transaction failed: {err}")


def classify_rpc_error(error: Dict[str, Any]) -> SubmissionError:
    """
    Map a JSON-RPC `error` object. Preflight failures (-32002) carry the
    transaction error under data.err and the program logs under data.logs.
    """
    code = error.get("code")
    message = error.get("message", "")
    data = error.get("data")
    if isinstance(data, dict) and data.get("err") is not None:
        return classify_transaction_error(data["err"], logs=data.get("logs"))
    if "blockhash not found" in str(message).lower():
        return BlockhashExpiredError(f"RPC error {code}: {message}")
    return SubmissionError(f"RPC error {code}: {message}")
