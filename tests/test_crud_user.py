from uuid import uuid4

import pytest

from expense_tracker.crud import crud_user
from expense_tracker.db.core import ConflictError, Gender, NotFoundError
from expense_tracker.models.user import UserUpdate

PASSWORD = "s3cret-pass"


def test_password_is_stored_hashed(make_user) -> None:
    user = make_user()

    assert user.password_hash != PASSWORD
    assert PASSWORD not in user.password_hash
    assert crud_user.verify_password(PASSWORD, user.password_hash)


def test_same_password_hashes_differently() -> None:
    assert crud_user.hash_password(PASSWORD) != crud_user.hash_password(PASSWORD)


def test_email_and_username_are_normalized(make_user) -> None:
    user = make_user(username="Alice_1", email="Alice@Example.COM")

    assert user.username == "alice_1"
    assert user.email == "alice@example.com"


@pytest.mark.parametrize("gender, picture", [
    (Gender.MALE, "https://avatar.iran.liara.run/public/41"),
    (Gender.FEMALE, "https://avatar.iran.liara.run/public/54"),
    (Gender.OTHER, "https://avatar.iran.liara.run/public/46"),
])
def test_profile_picture_follows_gender(make_user, gender, picture) -> None:
    assert make_user(gender=gender).profile_picture == picture


def test_duplicate_email_conflicts(make_user) -> None:
    make_user(username="alice", email="shared@example.com")
    with pytest.raises(ConflictError):
        make_user(username="bob", email="shared@example.com")


def test_duplicate_username_conflicts(make_user) -> None:
    make_user(username="alice", email="one@example.com")
    with pytest.raises(ConflictError):
        make_user(username="alice", email="two@example.com")


def test_authenticate_user(db_session, make_user) -> None:
    user = make_user()

    assert crud_user.authenticate_user(db_session, "alice@example.com", "wrong") is None
    assert crud_user.authenticate_user(db_session, "nobody@example.com", PASSWORD) is None

    authenticated = crud_user.authenticate_user(db_session, "ALICE@example.com", PASSWORD)
    assert authenticated.db_id == user.db_id
    assert authenticated.last_login_at is not None


def test_update_changes_only_name_and_gender(db_session, make_user) -> None:
    user = make_user()
    picture = user.profile_picture

    updated = crud_user.update_db_user(db_session, user.id, UserUpdate(gender=Gender.MALE))

    assert updated.gender == Gender.MALE
    assert updated.name == "Alice"
    assert updated.profile_picture == picture


def test_update_missing_user(db_session) -> None:
    with pytest.raises(NotFoundError):
        crud_user.update_db_user(db_session, uuid4(), UserUpdate(name="Ghost"))


def test_change_password_requires_old_password(db_session, make_user) -> None:
    user = make_user()

    with pytest.raises(ValueError):
        crud_user.change_user_password(db_session, user, "wrong", "new-password")

    crud_user.change_user_password(db_session, user, PASSWORD, "new-password")
    assert crud_user.verify_password("new-password", user.password_hash)
    assert not crud_user.verify_password(PASSWORD, user.password_hash)


def test_unknown_email_still_runs_bcrypt(db_session, monkeypatch) -> None:
    checked = []
    real_verify = crud_user.verify_password

    def recording_verify(plain, hashed):
        checked.append(hashed)
        return real_verify(plain, hashed)

    monkeypatch.setattr(crud_user, "verify_password", recording_verify)

    assert crud_user.authenticate_user(db_session, "nobody@example.com", PASSWORD) is None
    assert len(checked) == 1
    assert checked[0].startswith("$2")
