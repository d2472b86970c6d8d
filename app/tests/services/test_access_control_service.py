import pytest

from app.core.errors import InvalidArgument, NotFound, Unauthorized
from app.models.enums import Role
from app.services.access_control_service import AccessControlService
from app.services.event_service import EventService
from app.tests.factories import ARTIST, OWNER, STRANGER, ZERO


def test_bootstrap_grants_owner_both_roles(db, clock):
    svc = AccessControlService(clock)

    assert svc.owner(db) == OWNER
    assert svc.roles_of(db, OWNER) == [Role.CREATOR, Role.MINTER]
    assert svc.principal_for(db, OWNER).is_owner is True


def test_owner_grants_and_revokes_role(db, clock):
    svc = AccessControlService(clock)

    svc.add_address_to_access_control(db, caller=OWNER, address=ARTIST, role=Role.MINTER)
    assert svc.has_role(db, ARTIST, Role.MINTER)
    assert not svc.has_role(db, ARTIST, Role.CREATOR)

    svc.remove_address_from_access_control(db, caller=OWNER, address=ARTIST, role=Role.MINTER)
    assert svc.roles_of(db, ARTIST) == []

    names = [e.event_type for e in EventService().list_events(db)]
    assert names == ["RoleAdded", "RoleRemoved"]


def test_granting_twice_is_idempotent(db, clock):
    svc = AccessControlService(clock)

    svc.add_address_to_access_control(db, caller=OWNER, address=ARTIST, role=Role.MINTER)
    svc.add_address_to_access_control(db, caller=OWNER, address=ARTIST, role=Role.MINTER)

    assert svc.roles_of(db, ARTIST) == [Role.MINTER]
    assert len(EventService().list_events(db, event_type="RoleAdded")) == 1


def test_non_owner_cannot_grant(db, clock):
    svc = AccessControlService(clock)

    with pytest.raises(Unauthorized):
        svc.add_address_to_access_control(db, caller=STRANGER, address=ARTIST, role=Role.MINTER)


def test_revoking_missing_role_is_not_found(db, clock):
    svc = AccessControlService(clock)

    with pytest.raises(NotFound):
        svc.remove_address_from_access_control(db, caller=OWNER, address=ARTIST, role=Role.CREATOR)


def test_transfer_ownership(db, clock):
    svc = AccessControlService(clock)

    svc.transfer_ownership(db, caller=OWNER, new_owner=ARTIST)

    assert svc.owner(db) == ARTIST
    with pytest.raises(Unauthorized):
        svc.transfer_ownership(db, caller=OWNER, new_owner=OWNER)


def test_transfer_ownership_to_zero_rejected(db, clock):
    svc = AccessControlService(clock)

    with pytest.raises(InvalidArgument):
        svc.transfer_ownership(db, caller=OWNER, new_owner=ZERO)
