"""HTTP client for OpenAI-compatible chat-completions servers."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Dict, List, Optional

import requests
from requests import Response
from requests.exceptions import ConnectionError, RequestException, Timeout

LOGGER = logging.getLogger(__name__)


class AgentClientError(Exception):
    """Raised when the chat server rejects or fails a request."""


@dataclass
class AgentResponse:
    """Container for agent responses."""

    message: Dict
    raw: Dict

    @property
    def content(self) -> str:
        return self.message.get("content") or ""


class AgentClient:
    """Small wrapper around the `/v1/chat/completions` HTTP API."""

    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: int = 60,
        max_retries: int = 3,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.max_retries = max_retries
        self._session = session or requests.Session()
        if api_key:
            self._session.headers["Authorization"] = f"Bearer {api_key}"

    def chat(
        self,
        messages: List[Dict],
        temperature: float = 0.4,
        max_tokens: int = 1024,
        model: Optional[str] = None,
        tools: Optional[List[Dict]] = None,
    ) -> AgentResponse:
        """Call `/v1/chat/completions` and return the first choice."""

        payload: Dict[str, object] = {
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if model or self.model:
            payload["model"] = model or self.model
        if tools:
            payload["tools"] = tools
            payload["tool_choice"] = "auto"

        data = self._request_with_retry("POST", "/v1/chat/completions", json=payload)
        try:
            message = data["choices"][0]["message"]
        except (KeyError, IndexError, TypeError) as exc:
            raise AgentClientError(f"Malformed response: {exc}")

        return AgentResponse(message=message, raw=data)

    def health_check(self) -> bool:
        """Return True if the server lists its models with HTTP 200."""

        try:
            resp = self._session.get(f"{self.base_url}/v1/models", timeout=5)
            return resp.ok
        except RequestException:
            return False

    def _request_with_retry(self, method: str, endpoint: str, **kwargs) -> Dict:
        url = f"{self.base_url}{endpoint}"

        for attempt in range(self.max_retries):
            try:
                response: Response = self._session.request(
                    method,
                    url,
                    timeout=self.timeout,
                    **kwargs,
                )
                if response.status_code >= 500:
                    if attempt < self.max_retries - 1:
                        LOGGER.warning(
                            "Server error %d, retrying (attempt %d)",
                            response.status_code,
                            attempt + 1,
                        )
                        time.sleep(2 ** attempt)
                        continue
                    raise AgentClientError(f"Server error: {response.text}")
                if response.status_code >= 400:
                    raise AgentClientError(f"Request error ({response.status_code}): {response.text}")

                return response.json()
            except Timeout:
                if attempt < self.max_retries - 1:
                    time.sleep(2 ** attempt)
                    continue
                raise AgentClientError("Request timed out")
            except ConnectionError:
                raise AgentClientError(f"Cannot connect to {self.base_url}")
            except ValueError as exc:
                raise AgentClientError(f"Invalid JSON response: {exc}")
            except RequestException as exc:
                if attempt < self.max_retries - 1:
                    time.sleep(2 ** attempt)
                    continue
                raise AgentClientError(f"Request failed: {exc}")

        raise AgentClientError("Exceeded retry budget")
