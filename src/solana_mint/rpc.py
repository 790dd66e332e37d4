from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import httpx

from .errors import SubmissionError, classify_rpc_error


class RpcClient:
    def __init__(
        self,
        rpc_url: str,
        timeout_s: float = 60.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.client = httpx.Client(timeout=timeout_s, transport=transport)

    def close(self) -> None:
        self.client.close()

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            resp = self.client.post(self.rpc_url, json=payload)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as e:
            raise SubmissionError(f"RPC request {payload['method']} failed: {e}") from e
        except ValueError as e:
            raise SubmissionError(f"RPC response for {payload['method']} is not JSON: {e}") from e
        if "error" in data:
            raise classify_rpc_error(data["error"])
        return data

    def _call(self, method: str, params: List[Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": method,
            "params": params,
        }
        return self._post(payload).get("result")

    def get_latest_blockhash(self, commitment: str = "finalized") -> Tuple[str, int]:
        """Returns (blockhash, lastValidBlockHeight)."""
        result = self._call("getLatestBlockhash", [{"commitment": commitment}])
        try:
            value = result["value"]
            return value["blockhash"], int(value["lastValidBlockHeight"])
        except (TypeError, KeyError) as e:
            raise SubmissionError(f"getLatestBlockhash returned no blockhash: {result}") from e

    def get_block_height(self, commitment: str = "confirmed") -> int:
        result = self._call("getBlockHeight", [{"commitment": commitment}])
        if result is None:
            raise SubmissionError("getBlockHeight returned no result")
        return int(result)

    def send_transaction(
        self,
        tx_base64: str,
        preflight_commitment: str = "confirmed",
        skip_preflight: bool = False,
    ) -> str:
        """
        Submits wire bytes (base64) and returns the signature. maxRetries=0
        keeps the node from rebroadcasting on our behalf.
        """
        result = self._call(
            "sendTransaction",
            [
                tx_base64,
                {
                    "encoding": "base64",
                    "skipPreflight": skip_preflight,
                    "preflightCommitment": preflight_commitment,
                    "maxRetries": 0,
                },
            ],
        )
        if not isinstance(result, str):
            raise SubmissionError(f"sendTransaction returned no signature: {result}")
        return result

    def get_signature_statuses(
        self,
        signatures: List[str],
        search_history: bool = False,
    ) -> List[Optional[Dict[str, Any]]]:
        """
        One entry per signature, None when the node has not seen it.
        Each entry has slot, confirmations, err, confirmationStatus.
        """
        result = self._call(
            "getSignatureStatuses",
            [signatures, {"searchTransactionHistory": search_history}],
        )
        if not result or "value" not in result:
            raise SubmissionError(f"getSignatureStatuses returned no value: {result}")
        return list(result["value"])

    def get_account_info_base64(
        self,
        address: str,
        commitment: str = "confirmed",
    ) -> Optional[Dict[str, Any]]:
        """
        Returns {"data": base64_str, "owner": str, "lamports": int} or None if absent.
        """
        result = self._call(
            "getAccountInfo",
            [address, {"encoding": "base64", "commitment": commitment}],
        )
        value = (result or {}).get("value")
        if value is None:
            return None
        # value['data'] is [base64_str, "base64"]
        return {
            "data": value["data"][0],
            "owner": value["owner"],
            "lamports": int(value["lamports"]),
        }

    def get_balance(self, address: str, commitment: str = "confirmed") -> int:
        """Lamports held by address."""
        result = self._call("getBalance", [address, {"commitment": commitment}])
        if not result or result.get("value") is None:
            raise SubmissionError(f"getBalance returned no value: {result}")
        return int(result["value"])
