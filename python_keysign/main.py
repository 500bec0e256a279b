"""Command line entry point for keysign."""

import os
import sys
from typing import List, Optional

import yaml

from python_keysign.config.config import Config
from python_keysign.crypto.errors import IdentityError
from python_keysign.handlers.sign import sign_message
from python_keysign.util.log import log_event, set_level


def main(argv: Optional[List[str]] = None) -> int:
    """Sign argv[1] and print the JSON record. Returns the exit code."""
    if argv is None:
        argv = sys.argv

    if len(argv[1:]) < 1:
        print(f"need at least one command line argument for {os.path.basename(argv[0])}")
        return 1

    message = argv[1]

    try:
        config = Config.load()
        set_level(config.log_level)
        identity = config.new_identity()
        record = sign_message(identity, message)
    except (IdentityError, ValueError, yaml.YAMLError) as e:
        log_event("sign_failed", level="error", error=type(e).__name__)
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(record.to_json())
    return 0


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
