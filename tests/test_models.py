from datetime import timedelta

import pytest

from models import storage
from models.refresh_token import RefreshToken
from models.user import User
from utils.security import hash_password, utcnow, verify_password


def _user(**kwargs):
    data = {"email": "h@x.com", "password": "Abcd1234", "first_name": "Ha", "last_name": "Sh"}
    data.update(kwargs)
    return User(**data)


def test_password_is_hashed_once_on_insert(app_ctx):
    user = _user()
    storage.new(user)
    storage.save()

    assert user.password_hash != "Abcd1234"
    assert verify_password("Abcd1234", user.password_hash)


def test_saving_again_does_not_rehash(app_ctx):
    user = _user()
    storage.new(user)
    storage.save()
    digest = user.password_hash

    user.first_name = "Changed"
    storage.save()
    user.save()

    assert user.password_hash == digest
    assert verify_password("Abcd1234", user.password_hash)


def test_assigning_existing_digest_is_stored_as_is(app_ctx):
    user = _user()
    storage.new(user)
    storage.save()

    digest = hash_password("Other1234")
    user.password_hash = digest
    storage.save()

    assert user.password_hash == digest
    assert verify_password("Other1234", user.password_hash)


def test_new_password_is_hashed_on_update(app_ctx):
    user = _user()
    storage.new(user)
    storage.save()

    user.password = "Newpass99"
    storage.save()

    assert verify_password("Newpass99", user.password_hash)
    assert not verify_password("Abcd1234", user.password_hash)


def test_password_is_write_only():
    with pytest.raises(AttributeError):
        _user().password


def test_to_dict_hides_password_hash(app_ctx):
    user = _user()
    storage.new(user)
    storage.save()

    assert "password_hash" not in user.to_dict()
    assert user.to_dict()["__class__"] == "User"


def test_refresh_token_validity(app_ctx):
    user = _user()
    storage.new(user)
    row = RefreshToken(token="t-1", user_id=user.id, expires_at=utcnow() + timedelta(days=1), is_revoked=False)
    storage.new(row)
    storage.save()

    assert row.is_expired is False
    assert row.is_valid is True

    row.expires_at = utcnow() - timedelta(seconds=1)
    assert row.is_expired is True
    assert row.is_valid is False

    row.expires_at = utcnow() + timedelta(days=1)
    row.is_revoked = True
    assert row.is_valid is False


def test_deleting_user_cascades_to_refresh_tokens(app_ctx):
    user = _user()
    storage.new(user)
    storage.new(RefreshToken(token="t-2", user_id=user.id, expires_at=utcnow() + timedelta(days=1)))
    storage.save()

    storage.delete(user)
    storage.save()

    assert storage.count(RefreshToken) == 0
