"""Deterministic message fingerprints."""

from __future__ import annotations

import hashlib


def email_fingerprint(account: str, folder: str, uid: int | str) -> str:
    """Hex sha256 of ``account:folder:uid``, stable across runs."""
    return hashlib.sha256(f"{account}:{folder}:{uid}".encode("utf-8")).hexdigest()
