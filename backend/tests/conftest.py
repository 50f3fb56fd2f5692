import os

# Settings are read at import time; point them at throwaway values before the app loads.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-secret-do-not-use")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("AUTO_CREATE_SCHEMA", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.database import get_db
from core.security import create_access_token
from main import app
from models import Base, ClassSection, Subject, Teacher


@pytest.fixture
def engine():
    """Fresh in-memory database per test, with foreign keys enforced."""
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(eng, "connect")
    def _enable_foreign_keys(dbapi_conn, _record):
        cur = dbapi_conn.cursor()
        cur.execute("PRAGMA foreign_keys=ON")
        cur.close()

    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def db_session(engine):
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    yield session
    session.close()


@pytest.fixture
def client(db_session):
    """Test client with overridden dependency."""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.state.preferences.clear()
    yield TestClient(app)
    del app.dependency_overrides[get_db]
    app.state.preferences.clear()


def _auth_headers(role: str) -> dict:
    token = create_access_token(
        user_id=f"{role}-user",
        email=f"{role}@school.test",
        role=role,
        first_name="Test",
        last_name=role.capitalize(),
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers():
    return _auth_headers("admin")


@pytest.fixture
def teacher_headers():
    return _auth_headers("teacher")


@pytest.fixture
def school(db_session):
    """One class, two subjects and two teachers."""
    cls = ClassSection(class_name="7A", year_level=7, room_number="101")
    math = Subject(subject_name="Math", subject_code="MATH")
    physics = Subject(subject_name="Physics", subject_code="PHY")
    ada = Teacher(first_name="Ada", last_name="Lovelace", email="ada@school.test")
    alan = Teacher(first_name="Alan", last_name="Turing", email="alan@school.test")
    db_session.add_all([cls, math, physics, ada, alan])
    db_session.commit()
    return {
        "class_id": cls.class_id,
        "math_id": math.subject_id,
        "physics_id": physics.subject_id,
        "ada_id": ada.teacher_id,
        "alan_id": alan.teacher_id,
    }
