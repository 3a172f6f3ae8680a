"""Errors that reach the API boundary as a JSON `{"message": ...}` body."""

from __future__ import annotations


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInputError(ServiceError):
    """Unreadable body, invalid JSON, schema mismatch or an empty cart."""

    status_code = 400


class CatalogUnavailableError(ServiceError):
    """The box catalog could not be fetched. Fatal for the request."""

    status_code = 500


class CredentialsMissingError(Exception):
    """A credential value is absent. Only ever seen inside the packer client."""


class ClientGoneError(ServiceError):
    """The caller disconnected before a decision was made."""

    # nginx's "client closed request"
    status_code = 499
