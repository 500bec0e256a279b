"""Errors raised by signing identities."""


class IdentityError(Exception):
    """Base class for all signing identity failures."""


class KeyStorageError(IdentityError):
    """A key file could not be read or written."""

    def __init__(self, message: str, path: str):
        super().__init__(message)
        self.path = path


class KeyDecodeError(IdentityError, ValueError):
    """A key file held malformed PEM/DER or a key of the wrong type."""


class KeyMismatchError(IdentityError):
    """The loaded public key does not belong to the loaded private key."""


class SigningError(IdentityError):
    """The crypto backend failed to generate a key or produce a signature."""


class KeyNotReadyError(IdentityError):
    """Key material was used before generate_key() populated it."""
