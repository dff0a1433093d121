from abc import ABC, abstractmethod


class CredentialProviderPort(ABC):
    @abstractmethod
    def access_token(self) -> str | None:
        """Current bearer token, or None when signed out."""
        raise NotImplementedError
