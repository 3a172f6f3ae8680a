"""Credentials for the external packer API."""

from __future__ import annotations

from typing import Protocol

from pydantic import SecretStr

from box_estimator.config import Settings
from box_estimator.errors import CredentialsMissingError


class Credentials(Protocol):
    def get_username(self) -> str: ...

    def get_api_key(self) -> SecretStr: ...


class StaticCredentials:
    """Fixed username/API key pair. A missing value fails on first use."""

    def __init__(self, username: str | None, api_key: SecretStr | str | None) -> None:
        if isinstance(api_key, str):
            api_key = SecretStr(api_key)
        self._username = username
        self._api_key = api_key

    def get_username(self) -> str:
        if not self._username:
            raise CredentialsMissingError("Packer username is not configured")
        return self._username

    def get_api_key(self) -> SecretStr:
        if self._api_key is None or not self._api_key.get_secret_value():
            raise CredentialsMissingError("Packer API key is not configured")
        return self._api_key


class EnvCredentials(StaticCredentials):
    """CREDENTIALS_USERNAME / CREDENTIALS_API_KEY, as loaded into Settings."""

    def __init__(self, settings: Settings) -> None:
        super().__init__(settings.credentials_username, settings.credentials_api_key)
