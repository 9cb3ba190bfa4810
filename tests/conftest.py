from typing import Generator
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from quotedesk.db import Base, enable_sqlite_foreign_keys
from quotedesk.crud import BudgetRepository, ProductRepository, UserRepository
from quotedesk.main import app, get_db
from quotedesk.schemas import UserCreate

ADMIN = ("admin", "adminpass")
CLIENT = ("client", "clientpass")
OTHER = ("auditor", "auditorpass")


@pytest.fixture(scope="function")
def db_session() -> Generator:
    # Use in-memory SQLite with a single connection
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    enable_sqlite_foreign_keys(engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def products(db_session):
    return ProductRepository(db_session)


@pytest.fixture
def budgets(db_session, products):
    return BudgetRepository(db_session, catalog=products)


@pytest.fixture
def users(db_session):
    repo = UserRepository(db_session)
    repo.add(UserCreate(name="Ada Admin", username=ADMIN[0], password=ADMIN[1], role="Administrator"))
    repo.add(UserCreate(name="Carl Client", username=CLIENT[0], password=CLIENT[1], role="Client"))
    repo.add(UserCreate(name="Otto Other", username=OTHER[0], password=OTHER[1], role="Auditor"))
    return repo


@pytest.fixture(scope="function")
def client(db_session, users):
    # Override dependency to use the same session
    def override_get_db():
        try:
            yield db_session
        finally:
            pass
    app.dependency_overrides[get_db] = override_get_db
    from fastapi.testclient import TestClient
    with TestClient(app, follow_redirects=False) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def login(client):
    def _login(credentials):
        username, password = credentials
        r = client.post("/login", json={"username": username, "password": password})
        assert r.status_code == 200, r.text
        return r.json()
    return _login
