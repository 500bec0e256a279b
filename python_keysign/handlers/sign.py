"""Sign a message with a signing identity and build the output record."""

import base64
import json
import os

from pydantic import BaseModel

from python_keysign.crypto.errors import SigningError
from python_keysign.crypto.identity import SigningIdentity
from python_keysign.util.log import log_event


class SignedIdentifier(BaseModel):
    message: str
    signature: str
    pubkey: str

    def to_json(self) -> str:
        """Tab indented JSON, fields in declaration order."""
        return json.dumps(self.model_dump(), indent="\t", ensure_ascii=False)


def sign_message(identity: SigningIdentity, message: str) -> SignedIdentifier:
    """Generate or load the keypair, sign message, save the keys and return the record.

    The record carries the message as UTF-8 text; undecodable bytes become
    U+FFFD there but are signed as given. Errors from the identity propagate
    unchanged.
    """
    # undecodable argv bytes arrive as surrogates
    data = os.fsencode(message)

    identity.generate_key()
    signature = identity.sign(data)

    verify = getattr(identity, "verify", None)
    if verify is not None and not verify(data, signature):
        raise SigningError("signature failed verification against the public key")

    private_pem, public_pem = identity.encode()
    identity.save(private_pem, public_pem)

    log_event("message_signed", bytes=len(data), sig_bytes=len(signature))

    return SignedIdentifier(
        message=data.decode('utf-8', 'replace'),
        signature=base64.b64encode(signature).decode('utf-8'),
        pubkey=public_pem.decode('utf-8'),
    )
