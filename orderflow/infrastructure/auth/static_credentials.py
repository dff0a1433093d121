from __future__ import annotations

from orderflow.application.ports.credentials import CredentialProviderPort


class StaticCredentialProvider(CredentialProviderPort):
    def __init__(self, token: str | None = None) -> None:
        self._token = token

    def access_token(self) -> str | None:
        return self._token

    def set_token(self, token: str | None) -> None:
        self._token = token
