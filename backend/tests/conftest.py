import os

# Keep the import-time engine of app.database off the filesystem.
os.environ.setdefault("DATABASE_URL", "sqlite://")

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import JWT_SECRET, JWT_ALGORITHM
from app.database import Base, get_db
from app.main import app
from app.models import Student, Identity


@pytest.fixture()
def engine():
    """Fresh in-memory database per test, shared by every session."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_token(uid, **claims):
    return jwt.encode({"uid": uid, **claims}, JWT_SECRET, algorithm=JWT_ALGORITHM)


def auth(uid, **claims):
    return {"Authorization": f"Bearer {make_token(uid, **claims)}"}


def add_student(db, **fields):
    """Insert a student with plausible defaults for every required column."""
    values = {
        "student_id": "2020001",
        "ticket": "T2020001",
        "name": "Alice",
        "secret": "123456",
        "college": "计算机学院",
        "major": "软件工程",
        "campus": "奉贤校区",
        "building": "1号楼",
        "room": 101,
        "bed": "101-1",
        "counselor_name": "王老师",
        "counselor_tel": "021-00000000",
        "province": "浙江",
        "city": "杭州",
        "postcode": 310000,
        "graduated_from": "杭州一中",
        "class_": "20SE1",
        "visible": False,
    }
    values.update(fields)
    student = Student(**values)
    db.add(student)
    db.commit()
    return student


def add_identity(db, uid, student_id, realname, identity_number="", oa_certified=False):
    identity = Identity(uid=uid, student_id=student_id, realname=realname,
                        identity_number=identity_number, oa_certified=oa_certified)
    db.add(identity)
    db.commit()
    return identity
