"""Registry of IMAP accounts to synchronize."""

from __future__ import annotations

import json
import os
from typing import Any, Iterable, Mapping, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator, model_validator

from onebox.infrastructure.settings import Settings

DEFAULT_IMAP_PORT = 993


class AccountConfigError(ValueError):
    """Raised when account configuration is missing or malformed."""


class AccountDescriptor(BaseModel):
    """Connection details for one mailbox."""

    model_config = ConfigDict(frozen=True)

    host: str
    port: int = Field(default=DEFAULT_IMAP_PORT, gt=0, lt=65536)
    tls: bool = True
    user: str
    secret: SecretStr
    folder: str = "INBOX"
    name: Optional[str] = None

    @field_validator("host", "user", "folder")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("secret")
    @classmethod
    def _secret_not_blank(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value():
            raise ValueError("must not be empty")
        return value

    @field_validator("port", mode="before")
    @classmethod
    def _default_port(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_IMAP_PORT
        return value

    @model_validator(mode="before")
    @classmethod
    def _default_name(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("name"):
            data = {**data, "name": data.get("user")}
        return data

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.user.lower(), self.host.lower(), self.folder)


def _parse_bool(value: Optional[str], default: bool = True) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class AccountRegistry:
    """Immutable, ordered list of account descriptors."""

    def __init__(self, accounts: Iterable[AccountDescriptor]) -> None:
        accounts = tuple(accounts)
        seen: set[tuple[str, str, str]] = set()
        for acc in accounts:
            if acc.key in seen:
                raise AccountConfigError(
                    f"Duplicate account {acc.user}@{acc.host} folder {acc.folder}"
                )
            seen.add(acc.key)
        self._accounts = accounts

    def list(self) -> tuple[AccountDescriptor, ...]:
        return self._accounts

    def get(self, name: str) -> AccountDescriptor:
        for acc in self._accounts:
            if name in (acc.name, acc.user):
                return acc
        raise KeyError(name)

    def __len__(self) -> int:
        return len(self._accounts)

    @staticmethod
    def _build(entry: Mapping[str, Any], label: str, default_folder: str) -> AccountDescriptor:
        data = dict(entry)
        # Accept the usual spellings for the password field
        if "secret" not in data:
            data["secret"] = data.pop("pass", None) or data.pop("password", None) or ""
        data.setdefault("folder", default_folder)
        try:
            return AccountDescriptor(**data)
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
            raise AccountConfigError(f"Invalid account {label}: {fields}") from e

    @classmethod
    def from_json(cls, raw: str, default_folder: str = "INBOX") -> AccountRegistry:
        """Load from a JSON array of account objects."""
        try:
            entries = json.loads(raw)
        except json.JSONDecodeError as e:
            raise AccountConfigError(f"IMAP_ACCOUNTS is not valid JSON: {e}") from e
        if not isinstance(entries, list):
            raise AccountConfigError("IMAP_ACCOUNTS must be a JSON array")

        accounts = []
        for i, entry in enumerate(entries):
            if not isinstance(entry, dict):
                raise AccountConfigError(f"Invalid account #{i}: expected an object")
            accounts.append(cls._build(entry, f"#{i}", default_folder))
        return cls(accounts)

    @classmethod
    def from_env_prefixes(
        cls,
        names: str,
        environ: Optional[Mapping[str, str]] = None,
        default_folder: str = "INBOX",
    ) -> AccountRegistry:
        """
        Load mailboxes declared as ``IMAP_MAILBOXES=sales,support`` with
        ``IMAP_SALES_HOST``, ``IMAP_SALES_PORT``, ``IMAP_SALES_TLS``,
        ``IMAP_SALES_USER``, ``IMAP_SALES_PASSWORD`` and ``IMAP_SALES_FOLDER``.
        """
        env = os.environ if environ is None else environ
        accounts = []
        for name in names.split(","):
            name = name.strip()
            if not name:
                continue
            prefix = f"IMAP_{name.upper()}_"
            entry = {
                "name": name.lower(),
                "host": env.get(f"{prefix}HOST", ""),
                "port": env.get(f"{prefix}PORT"),
                "tls": _parse_bool(env.get(f"{prefix}TLS")),
                "user": env.get(f"{prefix}USER", ""),
                "secret": env.get(f"{prefix}PASSWORD", ""),
                "folder": env.get(f"{prefix}FOLDER") or default_folder,
            }
            accounts.append(cls._build(entry, name.lower(), default_folder))
        return cls(accounts)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        environ: Optional[Mapping[str, str]] = None,
    ) -> AccountRegistry:
        if settings.imap_accounts and settings.imap_accounts.strip():
            registry = cls.from_json(settings.imap_accounts, settings.imap_default_folder)
        elif settings.imap_mailboxes and settings.imap_mailboxes.strip():
            registry = cls.from_env_prefixes(
                settings.imap_mailboxes, environ, settings.imap_default_folder
            )
        else:
            registry = cls([])

        for acc in registry.list():
            logger.info(f"Configured mailbox: {acc.name} ({acc.user}@{acc.host}:{acc.port}/{acc.folder})")
        return registry
