import os

# Settings are read at import time, so these must be set before the app is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["AUTO_CREATE_TABLES"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from expense_tracker.db.core import Base, Gender, get_db
from expense_tracker.main import app
from expense_tracker.crud.crud_user import create_db_user
from expense_tracker.models.user import UserCreate

API = "/api/v1"
PASSWORD = "s3cret-pass"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def make_user(db_session):
    def _make_user(username="alice", email=None, gender=Gender.FEMALE, password=PASSWORD):
        return create_db_user(db_session, UserCreate(
            username=username,
            name=username.title(),
            email=email or f"{username}@example.com",
            password=password,
            gender=gender,
        ))
    return _make_user


@pytest.fixture
def make_client(engine):
    testing_session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = testing_session()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    clients = []

    def _make_client():
        client = TestClient(app)
        clients.append(client)
        return client

    yield _make_client

    for client in clients:
        client.close()
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def register(client):
    def _register(username="alice", email=None, gender="female", password=PASSWORD, name=None):
        response = client.post(f"{API}/user/register", json={
            "username": username,
            "name": username.title() if name is None else name,
            "email": email or f"{username}@example.com",
            "password": password,
            "gender": gender,
        })
        return response
    return _register


@pytest.fixture
def login_as(make_client, register):
    """Register a user and return a TestClient holding that user's session cookies"""
    def _login_as(username="alice", gender="female", password=PASSWORD):
        assert register(username=username, gender=gender, password=password).status_code == 201
        user_client = make_client()
        response = user_client.post(f"{API}/user/login", json={
            "email": f"{username}@example.com",
            "password": password,
        })
        assert response.status_code == 200
        return user_client
    return _login_as
