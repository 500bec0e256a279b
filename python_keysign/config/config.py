"""Configuration management for keysign."""

import os
from pathlib import Path

import yaml

from python_keysign.crypto.ecdsa_identity import ECDSAIdentity


class Config:
    """Configuration for key storage, algorithms and logging."""

    def __init__(self):
        self.save_path: str = "/tmp"
        self.key_filename: str = "id_ecdsa"
        self.hash_algorithm: str = "sha256"
        self.curve: str = "P-256"
        self.private_key_format: str = "sec1"
        self.log_level: str = "info"

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from YAML file and environment variables."""
        config = cls()

        config_paths = [
            "keysign.yaml",
            "configs/keysign.yaml",
            "/etc/keysign/keysign.yaml"
        ]

        for path in config_paths:
            if Path(path).exists():
                try:
                    with open(path, 'r') as f:
                        yaml_config = yaml.safe_load(f)
                except OSError as e:
                    raise ValueError(f"error reading config {path}: {e}") from e
                if yaml_config:
                    if not isinstance(yaml_config, dict):
                        raise ValueError(f"error reading config {path}: expected a mapping at top level")
                    config._load_from_dict(yaml_config)
                break

        config._load_from_env()

        return config

    def _load_from_dict(self, data: dict):
        """Load configuration from dictionary."""
        keys_config = _section(data, "keys")
        self.save_path = keys_config.get("save_path", self.save_path)
        self.key_filename = keys_config.get("filename", self.key_filename)
        self.private_key_format = keys_config.get("private_key_format", self.private_key_format)

        signing_config = _section(data, "signing")
        self.hash_algorithm = signing_config.get("hash", self.hash_algorithm)
        self.curve = signing_config.get("curve", self.curve)

        log_config = _section(data, "log")
        self.log_level = log_config.get("level", self.log_level)

    def _load_from_env(self):
        """Load configuration from environment variables."""
        self.save_path = os.getenv("KEYSIGN_SAVE_PATH", self.save_path)
        self.key_filename = os.getenv("KEYSIGN_KEY_FILENAME", self.key_filename)
        self.private_key_format = os.getenv("KEYSIGN_PRIVATE_KEY_FORMAT", self.private_key_format)
        self.hash_algorithm = os.getenv("KEYSIGN_HASH", self.hash_algorithm)
        self.curve = os.getenv("KEYSIGN_CURVE", self.curve)
        self.log_level = os.getenv("KEYSIGN_LOG_LEVEL", self.log_level)

    def new_identity(self) -> ECDSAIdentity:
        """Build the signing identity described by this configuration."""
        return ECDSAIdentity(
            self.hash_algorithm,
            self.save_path,
            self.key_filename,
            curve=self.curve,
            private_key_format=self.private_key_format,
        )


def _section(data: dict, name: str) -> dict:
    """Return a top-level config section; an empty section counts as {}."""
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"config section {name!r} must be a mapping")
    return section
