#!/usr/bin/env python3
"""Generate and save an ECDSA keypair without signing anything."""

import sys
import os

import yaml

# Add the current directory to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from python_keysign.config.config import Config
from python_keysign.crypto.errors import IdentityError


def main():
    """Create the configured keypair (or reuse it) and print the public key."""
    try:
        config = Config.load()
        identity = config.new_identity()

        reused = identity.key_exists()
        identity.generate_key()
        private_pem, public_pem = identity.encode()
        identity.save(private_pem, public_pem)
    except (IdentityError, ValueError, yaml.YAMLError) as e:
        print(f"Error generating keys: {e}", file=sys.stderr)
        sys.exit(1)

    if reused:
        print(f"Reusing existing keypair at {identity.private_key_path}")
    else:
        print(f"Wrote new {identity.curve.name} keypair to {identity.private_key_path}")
    print(f"Public key ({identity.public_key_path}):")
    print(public_pem.decode('utf-8'))


if __name__ == "__main__":
    main()
