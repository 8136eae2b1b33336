from __future__ import annotations

import hashlib
import json
from typing import Any


def canonical_json_bytes(obj: object) -> bytes:
    """Encode JSON deterministically.

    - UTF-8
    - stable key ordering
    - no insignificant whitespace
    """

    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode(
        "utf-8"
    )


def canonical_json_text(obj: object) -> str:
    return canonical_json_bytes(obj).decode("utf-8")


def sha256_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def document_sha256(document: object) -> str:
    """Fingerprint of a document, independent of key order and whitespace."""

    return sha256_bytes(canonical_json_bytes(document))


def roundtrip(document: Any) -> Any:
    """Serialize and parse a document again through the canonical encoding."""

    return json.loads(canonical_json_bytes(document).decode("utf-8"))
