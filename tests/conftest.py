import os

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from kindred.auth.passwords import hash_password  # noqa: E402
from kindred.core.timestamps import format_date_added  # noqa: E402
from kindred.database import Base, get_db  # noqa: E402
from kindred.main import app  # noqa: E402
from kindred.models.user import Role, User  # noqa: E402

ADMIN_EMAIL = 'admin@kindred.local'
ADMIN_PASSWORD = 'admin-pass-123'


@pytest.fixture
def db():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def make_user(db):
    def _make_user(email: str, password: str = 'secret-pass', role: Role = Role.VOLUNTEER, name: str = 'Test User') -> User:
        user = User(
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=role,
            date_added=format_date_added(),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def client_factory(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield lambda: TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def client(client_factory):
    return client_factory()


def login(client: TestClient, email: str, password: str):
    return client.post('/api/auth/login', json={'email': email, 'password': password})


@pytest.fixture
def admin(make_user) -> User:
    return make_user(ADMIN_EMAIL, ADMIN_PASSWORD, role=Role.ADMIN, name='System Administrator')


@pytest.fixture
def admin_client(client_factory, admin):
    client = client_factory()
    response = login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    assert response.status_code == 200
    return client
