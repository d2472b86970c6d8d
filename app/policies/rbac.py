#app/policies/rbac.py
from __future__ import annotations
from dataclasses import dataclass
from typing import FrozenSet, Set

from app.core.errors import Unauthorized
from app.models.enums import Role


@dataclass(frozen=True)
class Principal:
    address: str
    roles: FrozenSet[Role]
    is_owner: bool


# --- Core action constants ---
ACTION_CREATE_EDITION = "CREATE_EDITION"
ACTION_UPDATE_EDITION = "UPDATE_EDITION"
ACTION_MINT = "MINT"
ACTION_BURN = "BURN"
ACTION_SET_TOKEN_URI = "SET_TOKEN_URI"


def allowed_actions(role: Role) -> Set[str]:
    """
    Pure RBAC: which actions a role may attempt.
    """

    if role == Role.CREATOR:
        return {
            ACTION_CREATE_EDITION,
            ACTION_UPDATE_EDITION,
            ACTION_MINT,
            ACTION_BURN,
            ACTION_SET_TOKEN_URI,
        }

    if role == Role.MINTER:
        return {ACTION_MINT}

    return set()


def is_permitted(principal: Principal, action: str) -> bool:
    if principal.is_owner and action == ACTION_MINT:
        return True
    return any(action in allowed_actions(r) for r in principal.roles)


def require_action(principal: Principal, action: str) -> None:
    if not is_permitted(principal, action):
        raise Unauthorized(
            f"Address {principal.address} not permitted for action {action}."
        )


def require_owner(principal: Principal) -> None:
    if not principal.is_owner:
        raise Unauthorized("Only the owner may perform this operation.")
