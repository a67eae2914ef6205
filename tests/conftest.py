import os

TEST_DB_FILE = "test_lms_gradebook.db"
TEST_DB_URL = f"sqlite:///./{TEST_DB_FILE}"
os.environ.setdefault("DATABASE_URL", TEST_DB_URL)

from datetime import datetime, timezone  # noqa: E402
from types import SimpleNamespace  # noqa: E402

import bcrypt  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from lms_gradebook.core.deps import get_db  # noqa: E402
from lms_gradebook.core.security import create_access_token  # noqa: E402
from lms_gradebook.db.base import Base  # noqa: E402
from lms_gradebook.main import app  # noqa: E402
from lms_gradebook.models.assignment import Assignment  # noqa: E402
from lms_gradebook.models.course import Course  # noqa: E402
from lms_gradebook.models.enrollment import Enrollment  # noqa: E402
from lms_gradebook.models.grade import Grade  # noqa: E402
from lms_gradebook.models.submission import Submission  # noqa: E402
from lms_gradebook.models.user import User  # noqa: E402

PASSWORD = "password123"
# cheap rounds keep login tests fast
PASSWORD_HASH = bcrypt.hashpw(PASSWORD.encode(), bcrypt.gensalt(rounds=4)).decode()

engine = create_engine(
    TEST_DB_URL,
    connect_args={"check_same_thread": False},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    """Create a fresh schema once for the whole test session."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    if os.path.exists(TEST_DB_FILE):
        os.remove(TEST_DB_FILE)


@pytest.fixture(autouse=True)
def seed_data():
    """
    Seed a clean dataset for each test.

    CS101 (owned by instructor1):
      Assignment 1 (100 pts, due 2025-01-15), Assignment 2 (50 pts, due 2025-01-20),
      plus one unpublished and one soft-deleted assignment.
      Alice: submitted both on time, graded 85 and 45.
      Bob: Assignment 1 late, Assignment 2 on time, no live grades
           (a soft-deleted grade exists on Assignment 2).
      Carol: nothing submitted.
    MATH200 (owned by instructor2): Problem Set, Alice submitted.
    """
    db = TestingSessionLocal()
    try:
        # Clear tables (child -> parent)
        for model in (Grade, Submission, Enrollment, Assignment, Course, User):
            db.query(model).delete()
        db.commit()

        def user(email, name, role):
            u = User(email=email, full_name=name, role=role, hashed_password=PASSWORD_HASH)
            db.add(u)
            return u

        instructor = user("instructor1@example.com", "Instructor One", "instructor")
        other_instructor = user("instructor2@example.com", "Instructor Two", "instructor")
        admin = user("admin1@example.com", "Admin One", "admin")
        alice = user("alice@example.com", "Alice Smith", "student")
        bob = user("bob@example.com", "Bob Jones", "student")
        carol = user("carol@example.com", "Carol White", "student")
        db.commit()

        course = Course(title="Introduction to AI", code="CS101", instructor_id=instructor.id)
        other_course = Course(title="Linear Algebra", code="MATH200", instructor_id=other_instructor.id)
        db.add_all([course, other_course])
        db.commit()

        db.add_all(
            [Enrollment(course_id=course.id, student_id=s.id) for s in (alice, bob, carol)]
            + [Enrollment(course_id=other_course.id, student_id=alice.id)]
        )

        a1 = Assignment(
            course_id=course.id, title="Assignment 1", max_points=100,
            due_at=utc(2025, 1, 15), is_published=True,
        )
        a2 = Assignment(
            course_id=course.id, title="Assignment 2", max_points=50,
            due_at=utc(2025, 1, 20), is_published=True,
        )
        draft = Assignment(
            course_id=course.id, title="Draft", max_points=100,
            due_at=utc(2025, 2, 1), is_published=False,
        )
        removed = Assignment(
            course_id=course.id, title="Removed", max_points=100,
            due_at=utc(2025, 1, 10), is_published=True, deleted_at=utc(2025, 1, 11),
        )
        b1 = Assignment(
            course_id=other_course.id, title="Problem Set", max_points=100,
            due_at=utc(2025, 2, 1), is_published=True,
        )
        db.add_all([a1, a2, draft, removed, b1])
        db.commit()

        s_alice_a1 = Submission(assignment_id=a1.id, student_id=alice.id, content="a1", submitted_at=utc(2025, 1, 14))
        s_alice_a2 = Submission(assignment_id=a2.id, student_id=alice.id, content="a2", submitted_at=utc(2025, 1, 19))
        s_bob_a1 = Submission(assignment_id=a1.id, student_id=bob.id, content="late", submitted_at=utc(2025, 1, 16))
        s_bob_a2 = Submission(assignment_id=a2.id, student_id=bob.id, content="ok", submitted_at=utc(2025, 1, 19))
        s_alice_b1 = Submission(assignment_id=b1.id, student_id=alice.id, content="ps", submitted_at=utc(2025, 1, 30))
        db.add_all([s_alice_a1, s_alice_a2, s_bob_a1, s_bob_a2, s_alice_b1])

        db.add_all(
            [
                Grade(assignment_id=a1.id, student_id=alice.id, graded_by_id=instructor.id,
                      points=85, graded_at=utc(2025, 1, 21)),
                Grade(assignment_id=a2.id, student_id=alice.id, graded_by_id=instructor.id,
                      points=45, feedback="Nice work", graded_at=utc(2025, 1, 21)),
                Grade(assignment_id=a2.id, student_id=bob.id, graded_by_id=instructor.id,
                      points=10, graded_at=utc(2025, 1, 21), deleted_at=utc(2025, 1, 22)),
            ]
        )
        db.commit()

        ids = SimpleNamespace(
            instructor=instructor.id,
            other_instructor=other_instructor.id,
            admin=admin.id,
            alice=alice.id,
            bob=bob.id,
            carol=carol.id,
            course=course.id,
            other_course=other_course.id,
            a1=a1.id,
            a2=a2.id,
            draft=draft.id,
            removed=removed.id,
            b1=b1.id,
            s_alice_a1=s_alice_a1.id,
            s_alice_a2=s_alice_a2.id,
            s_bob_a1=s_bob_a1.id,
            s_bob_a2=s_bob_a2.id,
            s_alice_b1=s_alice_b1.id,
        )
        yield ids
    finally:
        db.close()


@pytest.fixture()
def client():
    """Test client that uses the test DB session via dependency override."""
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


def auth_header(user_id: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}


@pytest.fixture()
def auth():
    return auth_header
