"""Gemini ``generateContent`` HTTP client"""

import logging

import httpx

from waterdesk.exceptions import OracleConfigError, OracleRequestError, OracleSafetyBlocked
from waterdesk.oracle.base import TextOracle

logger = logging.getLogger(__name__)

SAFETY_FINISH_REASON = "SAFETY"


class GeminiOracle(TextOracle):
    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def _payload(self, prompt: str, response_schema: dict | None) -> dict:
        payload: dict = {"contents": [{"parts": [{"text": prompt}]}]}
        if response_schema is not None:
            payload["generationConfig"] = {
                "responseMimeType": "application/json",
                "responseSchema": response_schema,
            }
        return payload

    def generate(self, prompt: str, *, response_schema: dict | None = None) -> str:
        if not self.api_key:
            raise OracleConfigError("Oracle API key is not configured (set WATERDESK_ORACLE_API_KEY)")

        logger.debug("Calling %s (prompt=%d chars, structured=%s)", self.model, len(prompt), response_schema is not None)
        with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = client.post(
                    self.endpoint,
                    headers={"x-goog-api-key": self.api_key},
                    json=self._payload(prompt, response_schema),
                )
                response.raise_for_status()
                data = response.json()
            except httpx.TimeoutException as e:
                raise OracleRequestError(f"Oracle request timed out after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise OracleRequestError(
                    f"Oracle request failed: {e.response.status_code} {_error_message(e.response)}"
                ) from e
            except httpx.RequestError as e:
                raise OracleRequestError(f"Oracle request failed: {e}") from e
            except ValueError as e:
                raise OracleRequestError("Oracle returned a non-JSON body") from e

        return _extract_text(data)


def _error_message(response: httpx.Response) -> str:
    try:
        return response.json().get("error", {}).get("message", "") or response.reason_phrase
    except ValueError:
        return response.reason_phrase


def _extract_text(data: dict) -> str:
    if not isinstance(data, dict):
        raise OracleRequestError("Oracle response is not a JSON object")
    block_reason = (data.get("promptFeedback") or {}).get("blockReason")
    if block_reason:
        raise OracleSafetyBlocked(f"Prompt blocked: {block_reason}")

    candidates = data.get("candidates") or []
    if not candidates:
        raise OracleRequestError("Oracle response has no candidates")
    candidate = candidates[0]
    if candidate.get("finishReason") == SAFETY_FINISH_REASON:
        raise OracleSafetyBlocked("Reply withheld for safety reasons")

    try:
        text = candidate["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise OracleRequestError("Failed to extract text from oracle response") from e
    if not isinstance(text, str):
        raise OracleRequestError("Failed to extract text from oracle response")
    return text
