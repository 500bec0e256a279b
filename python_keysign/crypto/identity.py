"""Signing identity contract."""

from typing import Protocol, Tuple, runtime_checkable

PUBKEY_EXTENSION = ".pub"


@runtime_checkable
class SigningIdentity(Protocol):
    """A keypair that can be generated or loaded, encoded, saved and used to sign.

    Implementations choose the algorithm; callers only rely on these methods.
    """

    def key_exists(self) -> bool:
        """Return True when both key files are present."""
        ...

    def generate_key(self) -> None:
        """Load the saved keypair, or create a new one in memory."""
        ...

    def encode(self) -> Tuple[bytes, bytes]:
        """Return (private_pem, public_pem)."""
        ...

    def save(self, private_key_data: bytes, public_key_data: bytes) -> None:
        """Write encoded key data to the identity's key files."""
        ...

    def sign(self, data: bytes) -> bytes:
        ...
