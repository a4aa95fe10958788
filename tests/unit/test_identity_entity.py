import pytest

from authcore.domain.entities import Identity
from authcore.domain.errors import InvalidStatusTransition


def test_email_is_normalized():
    identity = Identity(id="1", email="  Jane@Example.COM ")
    assert identity.email == "jane@example.com"
    assert identity.verified is False
    assert identity.role == "user"


def test_email_required():
    with pytest.raises(ValueError):
        Identity(id="1", email=None)
    with pytest.raises(ValueError):
        Identity(id="1", email="   ")


def test_unknown_role_rejected():
    with pytest.raises(ValueError):
        Identity(id="1", email="a@b.c", role="root")


def test_mark_verified_only_once():
    identity = Identity(id="1", email="a@b.c")
    identity.mark_verified()
    assert identity.verified is True
    with pytest.raises(InvalidStatusTransition):
        identity.mark_verified()


def test_has_role():
    admin = Identity(id="1", email="a@b.c", role="admin")
    assert admin.has_role("admin")
    assert admin.has_role("user", "admin")
    assert not Identity(id="2", email="b@b.c").has_role("admin")
