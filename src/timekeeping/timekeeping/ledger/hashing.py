"""Hash-chain contract shared with the external ledger writer.

Each row carries `hash_chain = sha256((hash_previous or "") + canonical_payload)` as a
lowercase hex digest. The payload is canonicalized as compact JSON with sorted keys so
that the database's own JSON formatting does not change the digest.
"""

from __future__ import annotations

import hashlib
import hmac
import json
from typing import Any, Optional

from .model import LedgerRecord


def canonical_payload(raw_payload: Any) -> str:
    if raw_payload is None:
        return ""
    if isinstance(raw_payload, (bytes, bytearray)):
        raw_payload = raw_payload.decode("utf-8")
    if isinstance(raw_payload, str):
        try:
            raw_payload = json.loads(raw_payload)
        except ValueError:
            # Not JSON: hash the text as stored.
            return raw_payload
    return json.dumps(raw_payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def compute_chain_hash(hash_previous: Optional[str], raw_payload: Any) -> str:
    material = (hash_previous or "") + canonical_payload(raw_payload)
    return hashlib.sha256(material.encode("utf-8")).hexdigest()


def verify_record_hash(record: LedgerRecord) -> bool:
    expected = compute_chain_hash(record.hash_previous, record.raw_payload)
    return hmac.compare_digest(expected, (record.hash_chain or "").lower())
