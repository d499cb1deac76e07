"""
Canonical hashing for commitments and registration integrity digests.

The encoding is deterministic: UTF-8 JSON with sorted keys and compact
separators, bytes rendered as lowercase hex. Any caller that reproduces
the same parameters reproduces the same digest; any change to this
encoding silently invalidates every outstanding commitment.
"""

import hashlib
import json
from typing import Any

from .models import CommitInfo


def canonical_bytes(payload: dict[str, Any]) -> bytes:
    """Encode a flat payload deterministically."""
    encoded = {key: value.hex() if isinstance(value, bytes) else value for key, value in payload.items()}
    return json.dumps(encoded, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def digest(payload: dict[str, Any]) -> str:
    """SHA-256 over the canonical encoding, as 64 lowercase hex characters."""
    return hashlib.sha256(canonical_bytes(payload)).hexdigest()


def commitment_hash(info: CommitInfo) -> str:
    """Hash binding a later registration to these exact parameters."""
    return digest(
        {
            "domain_name": info.domain_name,
            "domain_owner": info.domain_owner,
            "duration": info.duration,
            "secret": info.secret,
            "resolver": info.resolver,
        }
    )


def integrity_digest(domain_name: str, domain_owner: str, expiry_time: int) -> str:
    """Digest the directory recomputes to check a record handed over by the registrar."""
    return digest(
        {
            "domain_name": domain_name,
            "domain_owner": domain_owner,
            "domain_expiry_time": expiry_time,
        }
    )
