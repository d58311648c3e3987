import pytest
from sqlalchemy.exc import OperationalError

from kindred.auth.passwords import verify_password
from kindred.auth.sessions import create_session, resolve_session
from kindred.core import config
from kindred.core.errors import (
    DuplicateEmail,
    Forbidden,
    InvalidCredentials,
    NotFound,
    SelfDeletion,
    Unexpected,
    ValidationError,
)
from kindred.models.session import UserSession
from kindred.models.user import Role, User
from kindred.services import user_directory


@pytest.mark.parametrize(
    ('first_email', 'second_email'),
    [
        ('volunteer@example.com', 'VOLUNTEER@example.com'),
        ('Volunteer@Example.com', 'volunteer@EXAMPLE.COM'),
        ('volunteer@example.com', '  volunteer@example.com  '),
    ],
)
def test_create_user_rejects_emails_differing_only_in_case(db, first_email: str, second_email: str) -> None:
    user_directory.create_user(db, 'First', first_email, 'pw-1', 'VOLUNTEER')

    with pytest.raises(DuplicateEmail) as exception_info:
        user_directory.create_user(db, 'Second', second_email, 'pw-2', 'PARTICIPANT')

    assert exception_info.value.status_code == 409
    assert exception_info.value.message == 'An account for volunteer@example.com already exists.'
    assert db.query(User).count() == 1


def test_create_user_normalizes_email_and_hashes_password(db) -> None:
    user = user_directory.create_user(db, '  Vic Volunteer ', ' Vic@Example.COM ', 'plain-text', 'volunteer')

    assert user.name == 'Vic Volunteer'
    assert user.email == 'vic@example.com'
    assert user.role is Role.VOLUNTEER
    assert user.password_hash != 'plain-text'
    assert verify_password('plain-text', user.password_hash)[0] is True
    assert user.date_added


@pytest.mark.parametrize(
    ('name', 'email', 'password', 'role'),
    [
        ('', 'a@example.com', 'pw', 'VOLUNTEER'),
        ('Name', '   ', 'pw', 'VOLUNTEER'),
        ('Name', 'a@example.com', '', 'VOLUNTEER'),
        ('Name', 'a@example.com', 'pw', ''),
    ],
)
def test_create_user_requires_every_field(db, name: str, email: str, password: str, role: str) -> None:
    with pytest.raises(ValidationError) as exception_info:
        user_directory.create_user(db, name, email, password, role)

    assert exception_info.value.message == 'All user fields are required.'


def test_create_user_rejects_unknown_role(db) -> None:
    with pytest.raises(ValidationError):
        user_directory.create_user(db, 'Name', 'a@example.com', 'pw', 'SUPERUSER')


def test_login_returns_user_and_usable_session(db, make_user) -> None:
    make_user('guardian@example.com', 'correct-horse', role=Role.PARTICIPANT, name='Gail Guardian')

    user, token = user_directory.login(db, ' Guardian@Example.com ', 'correct-horse')

    assert user.email == 'guardian@example.com'
    session = resolve_session(db, token)
    assert session is not None
    assert session.email == 'guardian@example.com'
    assert session.role is Role.PARTICIPANT


def test_login_wrong_password_and_unknown_email_share_message(db, make_user) -> None:
    make_user('known@example.com', 'right-password')

    with pytest.raises(InvalidCredentials) as wrong_password:
        user_directory.login(db, 'known@example.com', 'wrong-password')
    with pytest.raises(InvalidCredentials) as unknown_email:
        user_directory.login(db, 'nobody@example.com', 'right-password')

    assert wrong_password.value.status_code == unknown_email.value.status_code == 401
    assert wrong_password.value.message == unknown_email.value.message
    assert db.query(UserSession).count() == 0


def test_login_requires_email_and_password(db) -> None:
    with pytest.raises(ValidationError) as exception_info:
        user_directory.login(db, '  ', '')

    assert exception_info.value.message == 'Email and password are required.'


def test_list_users_returns_newest_first(db, make_user) -> None:
    make_user('first@example.com')
    make_user('second@example.com')

    users = user_directory.list_users(db)

    assert [user.email for user in users] == ['second@example.com', 'first@example.com']


def test_update_user_rejects_admin_target_even_when_demoting(db, make_user) -> None:
    make_user('boss@example.com', role=Role.ADMIN)

    with pytest.raises(Forbidden) as exception_info:
        user_directory.update_user(db, 'boss@example.com', 'Boss', 'boss@example.com', 'VOLUNTEER')

    assert exception_info.value.status_code == 403
    assert exception_info.value.message == 'Administrator accounts cannot be edited here.'
    assert db.query(User).filter(User.email == 'boss@example.com').one().role is Role.ADMIN


def test_update_user_returns_not_found_for_unknown_email(db) -> None:
    with pytest.raises(NotFound) as exception_info:
        user_directory.update_user(db, 'ghost@example.com', 'Ghost', 'ghost@example.com', 'VOLUNTEER')

    assert exception_info.value.message == 'User not found.'


def test_update_user_cannot_promote_to_admin(db, make_user) -> None:
    make_user('vol@example.com')

    with pytest.raises(ValidationError):
        user_directory.update_user(db, 'vol@example.com', 'Vol', 'vol@example.com', 'ADMIN')


def test_update_user_rejects_email_owned_by_another_account(db, make_user) -> None:
    make_user('vol@example.com')
    make_user('taken@example.com')

    with pytest.raises(DuplicateEmail):
        user_directory.update_user(db, 'vol@example.com', 'Vol', 'TAKEN@example.com', 'VOLUNTEER')


def test_update_user_keeps_password_when_blank(db, make_user) -> None:
    user = make_user('vol@example.com', 'original-pw')
    original_hash = user.password_hash

    updated = user_directory.update_user(db, 'VOL@example.com', 'Renamed', 'new@example.com', 'PARTICIPANT', '  ')

    assert updated.name == 'Renamed'
    assert updated.email == 'new@example.com'
    assert updated.role is Role.PARTICIPANT
    assert updated.password_hash == original_hash


def test_update_user_rehashes_new_password(db, make_user) -> None:
    make_user('vol@example.com', 'original-pw')

    updated = user_directory.update_user(db, 'vol@example.com', 'Vol', 'vol@example.com', 'VOLUNTEER', 'next-pw')

    assert verify_password('next-pw', updated.password_hash)[0] is True
    assert verify_password('original-pw', updated.password_hash)[0] is False


def test_update_user_revokes_open_sessions(db, make_user) -> None:
    user = make_user('vol@example.com')
    token = create_session(db, user)

    user_directory.update_user(db, 'vol@example.com', 'Vol', 'vol@example.com', 'PARTICIPANT')

    assert resolve_session(db, token) is None


@pytest.mark.parametrize('role', [Role.ADMIN, Role.VOLUNTEER])
def test_remove_user_refuses_self_deletion(db, make_user, role: Role) -> None:
    make_user('me@example.com', role=role)

    with pytest.raises(SelfDeletion) as exception_info:
        user_directory.remove_user(db, 'ME@example.com', acting_email='me@example.com')

    assert exception_info.value.status_code == 400
    assert db.query(User).count() == 1


def test_remove_user_returns_not_found_for_unknown_email(db) -> None:
    with pytest.raises(NotFound):
        user_directory.remove_user(db, 'ghost@example.com', acting_email='admin@example.com')


def test_remove_user_deletes_account_and_sessions(db, make_user) -> None:
    user = make_user('vol@example.com')
    token = create_session(db, user)

    user_directory.remove_user(db, 'vol@example.com', acting_email='admin@example.com')

    assert db.query(User).count() == 0
    assert resolve_session(db, token) is None


def test_ensure_admin_account_seeds_only_an_empty_store(db, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, 'ADMIN_EMAIL', ' Root@Kindred.Local ')
    monkeypatch.setattr(config, 'ADMIN_PASSWORD', 'seeded-pw')

    admin = user_directory.ensure_admin_account(db)

    assert admin is not None
    assert admin.email == 'root@kindred.local'
    assert admin.role is Role.ADMIN
    assert verify_password('seeded-pw', admin.password_hash)[0] is True
    assert user_directory.ensure_admin_account(db) is None
    assert db.query(User).count() == 1


def test_create_user_maps_storage_failure_to_unexpected(db, monkeypatch: pytest.MonkeyPatch) -> None:
    rollbacks = []
    original_rollback = db.rollback

    def failing_commit():
        raise OperationalError('INSERT INTO users', {}, Exception('database is locked'))

    def tracking_rollback():
        rollbacks.append(True)
        original_rollback()

    monkeypatch.setattr(db, 'commit', failing_commit)
    monkeypatch.setattr(db, 'rollback', tracking_rollback)

    with pytest.raises(Unexpected) as exception_info:
        user_directory.create_user(db, 'Vic', 'vic@example.com', 'pw-1', 'VOLUNTEER')

    assert exception_info.value.status_code == 500
    assert exception_info.value.message == 'Failed to create user.'
    assert 'locked' not in exception_info.value.message
    assert rollbacks == [True]
    assert db.query(User).count() == 0


def test_update_user_detects_collision_with_differently_cased_email(db, make_user) -> None:
    make_user('vol@example.com')
    make_user('taken@example.com')

    with pytest.raises(DuplicateEmail):
        user_directory.update_user(db, 'VOL@example.com', 'Vol', ' TAKEN@Example.com ', 'VOLUNTEER')
