# app/db/types.py
from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.types import TypeDecorator


class Uint256(TypeDecorator):
    """
    Exact unsigned integer of arbitrary size.

    Stored as a decimal string so wei amounts above 2**63 survive SQLite.
    Only equality is meaningful in SQL; arithmetic happens in Python.
    """

    impl = String(78)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = int(value)
        if value < 0:
            raise ValueError(f"Uint256 cannot hold negative value {value}.")
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return int(value)
