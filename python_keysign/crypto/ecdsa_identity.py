"""ECDSA signing identity backed by a pair of PEM key files."""

import os
from enum import Enum
from typing import Callable, Optional, Tuple, Union

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed

from python_keysign.crypto.errors import (
    KeyDecodeError, KeyMismatchError, KeyNotReadyError, KeyStorageError, SigningError
)
from python_keysign.crypto.identity import PUBKEY_EXTENSION
from python_keysign.crypto.pem import decode_block, encode_block
from python_keysign.util.log import log_event

PRIVATE_KEY_BLOCK = "PRIVATE KEY"
KEY_FILE_MODE = 0o600

HASH_ALGORITHMS = {
    "sha224": hashes.SHA224,
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
}

CURVES = {
    "p-256": ec.SECP256R1,
    "secp256r1": ec.SECP256R1,
    "prime256v1": ec.SECP256R1,
    "p-384": ec.SECP384R1,
    "secp384r1": ec.SECP384R1,
    "p-521": ec.SECP521R1,
    "secp521r1": ec.SECP521R1,
}

# Group orders, keyed by cryptography's curve name.
CURVE_ORDERS = {
    "secp256r1": 0xFFFFFFFF00000000FFFFFFFFFFFFFFFFBCE6FAADA7179E84F3B9CAC2FC632551,
    "secp384r1": 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFC7634D81F4372DDF581A0DB248B0A77AECEC196ACCC52973,
    "secp521r1": 0x01FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFA51868783BF2F966B7FCC0148F709A5D03BB5C9B8899C47AEBB6FB71E91386409,
}

PRIVATE_KEY_FORMATS = {
    "sec1": serialization.PrivateFormat.TraditionalOpenSSL,
    "pkcs8": serialization.PrivateFormat.PKCS8,
}


class IdentityState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADED = "loaded"
    GENERATED = "generated"


def resolve_hash(algorithm: Union[str, hashes.HashAlgorithm]) -> hashes.HashAlgorithm:
    """Return a hash algorithm instance for a name like "sha256"."""
    if isinstance(algorithm, hashes.HashAlgorithm):
        return algorithm
    try:
        return HASH_ALGORITHMS[algorithm.lower()]()
    except KeyError:
        raise ValueError(f"unsupported hash algorithm: {algorithm}")


def resolve_curve(curve: Union[str, ec.EllipticCurve]) -> ec.EllipticCurve:
    """Return a curve instance for a name like "P-256"."""
    if isinstance(curve, ec.EllipticCurve):
        if curve.name not in CURVE_ORDERS:
            raise ValueError(f"unsupported curve: {curve.name}")
        return curve
    try:
        return CURVES[curve.lower()]()
    except KeyError:
        raise ValueError(f"unsupported curve: {curve}")


class ECDSAIdentity:
    """SigningIdentity using ECDSA over a NIST curve.

    The private key is stored at ``save_path/filename`` and the public key
    next to it with a ``.pub`` suffix. Key material is set once by
    generate_key() and never replaced afterwards.
    """

    def __init__(
        self,
        algorithm: Union[str, hashes.HashAlgorithm],
        save_path: str,
        filename: str,
        curve: Union[str, ec.EllipticCurve] = "P-256",
        random_source: Callable[[int], bytes] = os.urandom,
        private_key_format: str = "sec1",
    ):
        if private_key_format not in PRIVATE_KEY_FORMATS:
            raise ValueError(f"unsupported private key format: {private_key_format}")

        self.algorithm = resolve_hash(algorithm)
        self.curve = resolve_curve(curve)
        self.random_source = random_source
        self.private_key_format = private_key_format
        self.private_key_path = os.path.join(save_path, filename)
        self.public_key_path = os.path.join(save_path, filename + PUBKEY_EXTENSION)

        self.private_key: Optional[ec.EllipticCurvePrivateKey] = None
        self.public_key: Optional[ec.EllipticCurvePublicKey] = None
        self.state = IdentityState.UNINITIALIZED

    @property
    def ready(self) -> bool:
        return self.state is not IdentityState.UNINITIALIZED

    def key_exists(self) -> bool:
        """Check that both the private and public key files exist."""
        return os.path.exists(self.private_key_path) and os.path.exists(self.public_key_path)

    def generate_key(self) -> None:
        """Load the keypair from disk if present, otherwise generate one in memory."""
        if self.ready:
            return

        if self.key_exists():
            self._load_key()
            return

        key_size = (self.curve.key_size + 7) // 8
        order = CURVE_ORDERS[self.curve.name]

        # FIPS 186-4 B.4.1: 64 extra bits, scalar lands in [1, n-1]
        seed = self.random_source(key_size + 8)
        if len(seed) < key_size + 8:
            raise SigningError(f"random source returned {len(seed)} bytes, need {key_size + 8}")
        scalar = int.from_bytes(seed, "big") % (order - 1) + 1

        try:
            private_key = ec.derive_private_key(scalar, self.curve)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise SigningError(f"error generating ECDSA keypair on {self.curve.name}: {e}") from e

        self.private_key = private_key
        self.public_key = private_key.public_key()
        self.state = IdentityState.GENERATED
        log_event("key_generated", level="debug", curve=self.curve.name)

    def _read_file(self, path: str, kind: str) -> bytes:
        try:
            with open(path, "rb") as f:
                return f.read()
        except OSError as e:
            raise KeyStorageError(f"error reading {kind} key file from path {path}: {e}", path) from e

    def _load_key(self) -> None:
        block_type, der = self._decode_file(self.private_key_path, "private")
        if block_type not in (PRIVATE_KEY_BLOCK, "EC PRIVATE KEY"):
            raise KeyDecodeError(f"unexpected PEM block {block_type!r} in {self.private_key_path}")
        try:
            private_key = serialization.load_der_private_key(der, password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise KeyDecodeError(f"error decoding private key file {self.private_key_path}: {e}") from e

        public_data = self._read_file(self.public_key_path, "public")
        try:
            public_key = serialization.load_pem_public_key(public_data)
        except (ValueError, UnsupportedAlgorithm) as e:
            raise KeyDecodeError(f"error decoding public key file {self.public_key_path}: {e}") from e

        if not isinstance(private_key, ec.EllipticCurvePrivateKey):
            raise KeyDecodeError(f"private key in {self.private_key_path} is not an EC key")
        if not isinstance(public_key, ec.EllipticCurvePublicKey):
            raise KeyDecodeError(f"public key in {self.public_key_path} is not an EC key")
        for path, key in ((self.private_key_path, private_key), (self.public_key_path, public_key)):
            if key.curve.name != self.curve.name:
                raise KeyDecodeError(f"key in {path} uses curve {key.curve.name}, expected {self.curve.name}")

        if private_key.public_key().public_numbers() != public_key.public_numbers():
            raise KeyMismatchError(
                f"mismatching public keys: {self.public_key_path} does not match {self.private_key_path}"
            )

        self.private_key = private_key
        self.public_key = public_key
        self.state = IdentityState.LOADED
        log_event("key_loaded", level="debug", path=self.private_key_path)

    def _decode_file(self, path: str, kind: str) -> Tuple[str, bytes]:
        data = self._read_file(path, kind)
        try:
            return decode_block(data)
        except KeyDecodeError as e:
            raise KeyDecodeError(f"error decoding {kind} key file {path}: {e}") from e

    def _require_key(self) -> None:
        if not self.ready:
            raise KeyNotReadyError("no key material: call generate_key() first")

    def encode(self) -> Tuple[bytes, bytes]:
        """Encode the keypair as PEM: SEC1 (or PKCS#8) private key, SubjectPublicKeyInfo public key."""
        self._require_key()

        # PKCS#8 PEM is already labelled PRIVATE KEY; SEC1 PEM would say EC PRIVATE KEY
        encoding = serialization.Encoding.PEM if self.private_key_format == "pkcs8" else serialization.Encoding.DER
        try:
            private_pem = self.private_key.private_bytes(
                encoding=encoding,
                format=PRIVATE_KEY_FORMATS[self.private_key_format],
                encryption_algorithm=serialization.NoEncryption()
            )
        except ValueError as e:
            raise SigningError(f"error marshaling EC private key: {e}") from e
        if encoding is serialization.Encoding.DER:
            private_pem = encode_block(PRIVATE_KEY_BLOCK, private_pem)

        try:
            public_pem = self.public_key.public_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PublicFormat.SubjectPublicKeyInfo
            )
        except ValueError as e:
            raise SigningError(f"error marshaling public key: {e}") from e

        return private_pem, public_pem

    def _write_file(self, path: str, data: bytes, kind: str) -> None:
        try:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, KEY_FILE_MODE)
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            # O_CREAT mode does not apply to files that already existed
            os.chmod(path, KEY_FILE_MODE)
        except OSError as e:
            raise KeyStorageError(f"error writing {kind} key to path {path}: {e}", path) from e

    def save(self, private_key_data: bytes, public_key_data: bytes) -> None:
        """Write the key data to disk, readable by the owner only.

        A failure writing the public key leaves the private key file in place.
        """
        self._write_file(self.private_key_path, private_key_data, "private")
        self._write_file(self.public_key_path, public_key_data, "public")
        log_event("key_saved", level="debug", path=self.private_key_path)

    def digest(self, data: bytes) -> bytes:
        h = hashes.Hash(self.algorithm)
        h.update(data)
        return h.finalize()

    def sign(self, data: bytes) -> bytes:
        """Sign the digest of data, returning a DER encoded (r, s) signature."""
        self._require_key()

        try:
            return self.private_key.sign(self.digest(data), ec.ECDSA(Prehashed(self.algorithm)))
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise SigningError(f"error signing data with {self.algorithm.name}: {e}") from e

    def verify(self, data: bytes, signature: bytes) -> bool:
        """Verify a DER signature over data with the public key."""
        self._require_key()

        try:
            self.public_key.verify(signature, self.digest(data), ec.ECDSA(Prehashed(self.algorithm)))
            return True
        except InvalidSignature:
            return False
