#!/usr/bin/env python3
"""Install keysign for development and check where its keys will live."""

import os
import subprocess
import sys

import yaml

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, ROOT)

from python_keysign.config.config import Config


def check_python_version():
    """Exit unless running on Python 3.9+."""
    if sys.version_info < (3, 9):
        print(f"Error: Python 3.9 or higher is required, found {sys.version.split()[0]}")
        sys.exit(1)


def install_package(extras: str = "test"):
    """pip install the project in editable mode from pyproject.toml."""
    target = f".[{extras}]" if extras else "."
    print(f"Installing {target} from {ROOT}...")

    try:
        subprocess.check_call([sys.executable, "-m", "pip", "install", "-e", target], cwd=ROOT)
    except subprocess.CalledProcessError as e:
        print(f"Error installing keysign: {e}")
        sys.exit(1)


def check_key_directory(config: Config) -> bool:
    """Report whether the configured key directory exists and is writable."""
    path = config.save_path
    if not os.path.isdir(path):
        print(f"Key directory {path} does not exist; create it or set KEYSIGN_SAVE_PATH")
        return False
    if not os.access(path, os.W_OK):
        print(f"Key directory {path} is not writable; set KEYSIGN_SAVE_PATH")
        return False

    identity = config.new_identity()
    if identity.key_exists():
        print(f"Existing keypair found at {identity.private_key_path}")
    else:
        print(f"A new keypair will be written to {identity.private_key_path}")
    return True


def main():
    check_python_version()
    install_package()

    try:
        ok = check_key_directory(Config.load())
    except (ValueError, yaml.YAMLError) as e:
        print(f"Error loading config: {e}")
        sys.exit(1)

    if not ok:
        sys.exit(1)

    print('Ready: keysign "this is a test"')


if __name__ == "__main__":
    main()
