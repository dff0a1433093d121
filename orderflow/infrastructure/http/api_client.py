from __future__ import annotations

import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from orderflow.application.dto.api_payloads import ApiEnvelope
from orderflow.application.exceptions import StateConflict, TransientFailure
from orderflow.application.ports.credentials import CredentialProviderPort

ModelT = TypeVar("ModelT", bound=BaseModel)


class ApiClient:
    """
    Thin async wrapper over the backend's `{success, data|message}` envelope.

    Transport problems, 5xx and unreadable bodies raise TransientFailure;
    a well-formed `success: false` raises StateConflict with the server's message.
    """

    def __init__(
        self,
        base_url: str,
        credentials: CredentialProviderPort,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._credentials = credentials
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)
        self._logger = logging.getLogger(__name__)

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self._credentials.access_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> ApiEnvelope:
        try:
            resp = await self._client.request(method, path, params=params, json=json, headers=self._headers())
        except httpx.HTTPError as e:
            self._logger.warning("API request failed", extra={"reason": f"{method} {path}", "error": str(e)})
            raise TransientFailure("Network error, please try again") from e

        if resp.status_code >= 500:
            self._logger.warning(
                "API server error",
                extra={"reason": f"{method} {path}", "status": resp.status_code},
            )
            raise TransientFailure(f"Server error ({resp.status_code}), please try again")

        try:
            envelope = ApiEnvelope.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            self._logger.warning(
                "Unreadable API response",
                extra={"reason": f"{method} {path}", "status": resp.status_code},
            )
            raise TransientFailure("Unexpected response from server") from e

        if not envelope.success:
            raise StateConflict(envelope.message or f"Request failed ({resp.status_code})")
        return envelope

    @property
    def closed(self) -> bool:
        return self._client.is_closed

    async def aclose(self) -> None:
        await self._client.aclose()


def parse_data(model: type[ModelT], data: Any) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise TransientFailure("Unexpected response from server") from e
