"""HTTP client for the disfluency classifier collaborator.

WHY: The classifier detector needs an external model to label indexed
tokens. This module puts an OpenAI-compatible chat completions endpoint
behind the DisfluencyClassifier interface so the detector never deals
with HTTP, auth, or response envelopes.

HOW: Uses httpx.Client for a blocking request per sentence. The client is
a context manager: enter it to open an authenticated connection pool,
exit to close it. classify() renders the tokens, posts one completion
request, validates the envelope and the JSON answer, and returns the
``disfluencies`` mapping.

RULES:
- classify() never raises on transport, HTTP, or parse failures; it logs
  them and returns {}
- temperature is 0 and the response format is a JSON object
- An injected httpx.Client is used as-is and never closed by this class
- Outside the context manager, classify() opens a short-lived client
- Retries and timeouts beyond the per-request timeout are the caller's job
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx

from disfluency_analyzer.api.models import (
    DISFLUENCY_ANALYSIS_PROMPT,
    ChatCompletion,
    ClassifierResponseError,
    parse_classification,
    render_indexed_sentence,
)
from disfluency_analyzer.config import (
    CLASSIFIER_TIMEOUT_S,
    OPENAI_BASE_URL,
    OPENAI_CHAT_MODEL,
    load_api_key,
)
from disfluency_analyzer.core.ir import Token

logger = logging.getLogger(__name__)


class ClassifierAPIError(Exception):
    """Raised when the completions endpoint returns an error response.

    RULES:
    - Always include status_code and message
    - message is the API's error message or the response body text
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Classifier API error {status_code}: {message}")


class OpenAIClassifierClient:
    """Disfluency classifier backed by a chat completions endpoint.

    RULES:
    - Use as: with OpenAIClassifierClient() as client: ...
    - api_key defaults to load_api_key() from .env
    - base_url / model / timeout default to the values in config
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key or load_api_key()
        self._base_url = (base_url or OPENAI_BASE_URL).rstrip("/")
        self._model = model or OPENAI_CHAT_MODEL
        self._timeout = timeout if timeout is not None else CLASSIFIER_TIMEOUT_S
        self._client = http_client
        self._owns_client = False

    @property
    def model(self) -> str:
        return self._model

    def _build_client(self) -> httpx.Client:
        return httpx.Client(timeout=httpx.Timeout(self._timeout, connect=10.0))

    def __enter__(self) -> OpenAIClassifierClient:
        if self._client is None:
            self._client = self._build_client()
            self._owns_client = True
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        self.close()

    def close(self) -> None:
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None
            self._owns_client = False

    def _request_body(self, tokens: Sequence[Token]) -> dict[str, Any]:
        return {
            "model": self._model,
            "temperature": 0,
            "response_format": {"type": "json_object"},
            "messages": [
                {"role": "system", "content": DISFLUENCY_ANALYSIS_PROMPT},
                {"role": "user", "content": render_indexed_sentence(tokens)},
            ],
        }

    def _post_completion(self, client: httpx.Client, body: dict[str, Any]) -> ChatCompletion:
        headers = {"Authorization": f"Bearer {self._api_key}"}
        resp = client.post(
            f"{self._base_url}/chat/completions", json=body, headers=headers
        )
        if resp.status_code != 200:
            raise ClassifierAPIError(resp.status_code, _error_message(resp))

        data = resp.json()
        if isinstance(data, dict) and data.get("error"):
            raise ClassifierAPIError(resp.status_code, _error_message(resp))
        return ChatCompletion.from_dict(data)

    def complete(self, tokens: Sequence[Token]) -> ChatCompletion:
        """Send one classification request and return the parsed envelope.

        Raises:
            ClassifierAPIError: On non-200 responses or an error body.
            ClassifierResponseError: If the envelope is malformed.
            httpx.HTTPError: On transport failures.
        """
        body = self._request_body(tokens)
        logger.info("Classifying %d tokens with model=%s", len(tokens), self._model)
        logger.debug("Indexed sentence: %s", body["messages"][1]["content"])

        if self._client is not None:
            return self._post_completion(self._client, body)
        with self._build_client() as client:
            return self._post_completion(client, body)

    def classify(self, tokens: Sequence[Token]) -> dict[str, Any]:
        """Classify an indexed token sequence.

        Returns:
            ``category → {text → [{"start", "end"}]}``, or {} when the
            request fails or the answer cannot be parsed.
        """
        try:
            completion = self.complete(tokens)
            result = parse_classification(completion.content)
        except (httpx.HTTPError, ClassifierAPIError, ClassifierResponseError, ValueError) as e:
            logger.error("Disfluency classification failed: %s", e)
            return {}

        logger.debug("Classification result: %r", result)
        return result


def _error_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if error:
            return str(error)
    return resp.text

