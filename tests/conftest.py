import os
import tempfile

# the module-level engine in salepdv.db.session is built at import time
os.environ.setdefault("DATABASE_URL", "sqlite:///" + os.path.join(tempfile.gettempdir(), "salepdv-test-default.db"))
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from salepdv.db.session import create_db, get_db
from salepdv.main import app
from salepdv.models.user import RoleEnum, User
from salepdv.services import auth as auth_service


@pytest.fixture
def engine(tmp_path):
    # file-backed so release_table workers on other threads see the same data
    eng = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    create_db(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def _make_user(db, username, papel, **extra):
    user = User(
        username=username,
        name=username.title(),
        senha_hash=auth_service.get_password_hash("secret123"),
        papel=papel,
        **extra,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def seller(db):
    return _make_user(db, "carrinho", RoleEnum.admin)


@pytest.fixture
def other_seller(db):
    return _make_user(db, "quiosque", RoleEnum.admin)


@pytest.fixture
def client_user(db, seller):
    return _make_user(db, "ana", RoleEnum.client, seller_id=seller.id, seller_name=seller.display_name, phone="11999990000")


@pytest.fixture
def other_client(db, seller):
    return _make_user(db, "bruno", RoleEnum.client, seller_id=seller.id, seller_name=seller.display_name)


@pytest.fixture
def make_user(db):
    def _factory(username, papel=RoleEnum.client, **extra):
        return _make_user(db, username, papel, **extra)
    return _factory


@pytest.fixture
def api(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user):
        return {"Authorization": f"Bearer {auth_service.create_access_token(user)}"}
    return _headers
