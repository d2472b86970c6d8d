# app/core/hashing.py
from __future__ import annotations

import hashlib
import json
from typing import Any, Dict

GENESIS_HASH = "0" * 64


def canonical_json(obj: Dict[str, Any]) -> str:
    # sorted keys, no whitespace; indexers must be able to recompute it byte for byte
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def build_entry(seq: int, event_type: str, block_time: int, args: Dict[str, Any]) -> Dict[str, Any]:
    return {"seq": seq, "event": event_type, "block_time": block_time, "args": args}


def entry_hash(prev_hash: str, entry: Dict[str, Any]) -> str:
    """
    SHA256(prev_hash + canonical_json(entry)), hex encoded.
    The first entry links to GENESIS_HASH.
    """
    return hashlib.sha256((prev_hash + canonical_json(entry)).encode("utf-8")).hexdigest()
