"""
Config system - Layered typed configuration for the identity engine.

Merge order (later overrides earlier):
1. ``AuthConfig`` defaults
2. ``.env`` file (keys carrying the prefix)
3. Environment variables (``AUTHKIT_*``)
4. Manual overrides
"""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from dotenv import dotenv_values

from .faults import Fault, FaultDomain

DEFAULT_EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"

PASSWORD_HASHING_SCHEMES = ("plain", "argon2")


class ConfigError(Fault):
    """Raised when configuration validation fails."""
    code = "config-invalid"
    message = "Invalid configuration"
    domain = FaultDomain.CONFIG


@dataclass(frozen=True)
class AuthConfig:
    """
    Tunables of the reference engine.

    Attributes:
        reset_cooldown_seconds: Minimum time between reset requests per email
        reset_token_ttl_seconds: Lifetime of a password reset token
        token_bytes: Entropy of minted token values
        password_hashing: ``"plain"`` (reference) or ``"argon2"``
        token_signing_key: When set, token values are HMAC-signed
        email_pattern: Regex used for email syntax checks
    """
    reset_cooldown_seconds: float = 60
    reset_token_ttl_seconds: float = 3600
    token_bytes: int = 32
    password_hashing: str = "plain"
    token_signing_key: Optional[str] = None
    email_pattern: str = DEFAULT_EMAIL_PATTERN

    def __post_init__(self):
        for name in ("reset_cooldown_seconds", "reset_token_ttl_seconds"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigError(message=f"{name} must be a number, got {value!r}")
        if isinstance(self.token_bytes, bool) or not isinstance(self.token_bytes, int):
            raise ConfigError(message=f"token_bytes must be an integer, got {self.token_bytes!r}")
        if self.reset_cooldown_seconds < 0:
            raise ConfigError(message="reset_cooldown_seconds must be >= 0")
        if self.reset_token_ttl_seconds <= 0:
            raise ConfigError(message="reset_token_ttl_seconds must be > 0")
        if self.token_bytes < 16:
            raise ConfigError(message="token_bytes must be at least 16")
        if self.password_hashing not in PASSWORD_HASHING_SCHEMES:
            raise ConfigError(
                message=f"Unknown password_hashing scheme: {self.password_hashing!r}",
                allowed=list(PASSWORD_HASHING_SCHEMES),
            )
        if self.token_signing_key is not None and not isinstance(self.token_signing_key, str):
            # env parsing turns numeric keys into ints
            object.__setattr__(self, "token_signing_key", str(self.token_signing_key))
        try:
            re.compile(self.email_pattern)
        except re.error as exc:
            raise ConfigError(message=f"Invalid email_pattern: {exc}") from exc

    def to_dict(self) -> dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        if data["token_signing_key"]:
            data["token_signing_key"] = "***"
        return data


class ConfigLoader:
    """
    Loads and merges ``AuthConfig`` values from multiple sources with precedence:
    overrides > environment variables > .env file > defaults
    """

    def __init__(self, env_prefix: str = "AUTHKIT_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        env_prefix: str = "AUTHKIT_",
        env_file: Optional[str] = None,
        overrides: Optional[Mapping[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> AuthConfig:
        """
        Build a validated ``AuthConfig``.

        Args:
            env_prefix: Prefix for environment variables
            env_file: Path to .env file
            overrides: Manual overrides (highest precedence)
            environ: Environment mapping (defaults to ``os.environ``)

        Returns:
            Validated AuthConfig
        """
        loader = cls(env_prefix=env_prefix)

        if env_file:
            loader._load_env_file(env_file)

        loader._load_from_env(os.environ if environ is None else environ)

        if overrides:
            loader.config_data.update(overrides)

        return loader.build()

    def build(self) -> AuthConfig:
        known = {f.name for f in fields(AuthConfig)}
        unknown = sorted(set(self.config_data) - known)
        if unknown:
            raise ConfigError(message=f"Unknown config keys: {', '.join(unknown)}")
        try:
            return AuthConfig(**self.config_data)
        except TypeError as exc:
            raise ConfigError(message=str(exc)) from exc

    def _load_env_file(self, path: str):
        """Load prefixed keys from a .env file."""
        env_path = Path(path)
        if not env_path.exists():
            return

        for key, value in dotenv_values(env_path).items():
            if value is not None and key.startswith(self.env_prefix):
                self._set(key, value)

    def _load_from_env(self, environ: Mapping[str, str]):
        for key, value in environ.items():
            if key.startswith(self.env_prefix):
                self._set(key, value)

    def _set(self, key: str, value: str):
        """Convert AUTHKIT_RESET_COOLDOWN_SECONDS to reset_cooldown_seconds."""
        name = key[len(self.env_prefix):].lower()
        self.config_data[name] = self._parse_value(value)

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value
