import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
import os
from typing import Callable, Dict, Generator

# Environment must be in place before teamtasks.core.settings is imported.
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SECRET_KEY"] = "testsecretkey"
os.environ["STORAGE_AUTO_CREATE_BUCKET"] = "false"
os.environ["STORAGE_BUCKET"] = "test-attachments"
os.environ["FIRST_ADMIN_EMAIL"] = "root@example.com"

# Registers every model on Base.metadata.
import teamtasks.models
from teamtasks.models.base import Base

from teamtasks.core.settings import settings as app_settings
from teamtasks.main import app

engine = create_engine(
    app_settings.DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# pysqlite needs explicit BEGIN for SAVEPOINT to work
@event.listens_for(engine, "connect")
def _disable_pysqlite_transactions(dbapi_connection, connection_record):
    dbapi_connection.isolation_level = None


@event.listens_for(engine, "begin")
def _emit_begin(conn):
    conn.exec_driver_sql("BEGIN")


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False)

from teamtasks.core import security
from teamtasks.core.exceptions import StorageError
from teamtasks.dependencies import get_db, get_storage
from teamtasks.models.enums import ProjectStatus, UserRole, UserStatus
from teamtasks.models.user import User
from teamtasks.schemas.project import ProjectCreate
from teamtasks.schemas.task import TaskCreate
from teamtasks.schemas.team import TeamCreate
from teamtasks.services import project_service, task_service, team_member_service, team_service
from teamtasks.services.user_service import build_user

DEFAULT_PASSWORD = "Secure123!Pass"


class InMemoryStorage:
    """Blob store double with the same interface as BlobStorage."""

    def __init__(self, bucket_name: str = "test-attachments"):
        self.bucket_name = bucket_name
        self.objects: Dict[str, bytes] = {}
        self.fail_on_put = False

    def ensure_bucket(self) -> None:
        pass

    def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        if self.fail_on_put:
            raise StorageError("Failed to store file")
        self.objects[key] = data

    def get(self, key: str) -> bytes:
        if key not in self.objects:
            raise StorageError("Failed to read file")
        return self.objects[key]

    def delete(self, key: str) -> None:
        self.objects.pop(key, None)


@pytest.fixture(scope="session", autouse=True)
def create_test_tables_session_scope():
    """
    Create all tables once per test session and drop them afterwards.
    """
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Session joined to an outer transaction. Commits inside the code under test
    only release savepoints, so everything is rolled back after the test.
    """
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection, join_transaction_mode="create_savepoint")

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture(scope="function")
def client(db: Session, storage: InMemoryStorage) -> Generator[TestClient, None, None]:
    """
    TestClient with the database session and blob store overridden.
    """
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def make_user(db: Session) -> Callable[..., User]:
    """
    Factory: make_user("ann@example.com", role=UserRole.ADMIN, status=UserStatus.SUSPENDED).
    """
    def _make(
        email: str,
        role: UserRole = UserRole.MEMBER,
        status: UserStatus = UserStatus.ACTIVE,
        password: str = DEFAULT_PASSWORD,
    ) -> User:
        first_name = email.split("@")[0].capitalize()
        user = build_user(db, email, password, first_name, "Tester", role)
        user.status = status
        db.commit()
        return user
    return _make


@pytest.fixture(scope="function")
def test_admin(make_user) -> User:
    return make_user("admin@example.com", role=UserRole.ADMIN)


@pytest.fixture(scope="function")
def test_user(make_user) -> User:
    return make_user("owner@example.com")


@pytest.fixture(scope="function")
def other_user(make_user) -> User:
    return make_user("member@example.com")


@pytest.fixture(scope="function")
def outsider(make_user) -> User:
    return make_user("outsider@example.com")


@pytest.fixture(scope="function")
def auth_headers() -> Callable[[User], Dict[str, str]]:
    def _headers(user: User) -> Dict[str, str]:
        token, _ = security.create_access_token(subject=user.email, role=user.role.value)
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture(scope="function")
def admin_token_headers(test_admin: User, auth_headers) -> Dict[str, str]:
    return auth_headers(test_admin)


@pytest.fixture(scope="function")
def user_token_headers(test_user: User, auth_headers) -> Dict[str, str]:
    return auth_headers(test_user)


@pytest.fixture(scope="function")
def test_team(db: Session, test_user: User, other_user: User):
    """
    Team owned by test_user with other_user as a plain MEMBER.
    """
    team = team_service.create_team(db, test_user, TeamCreate(name="Core", description="Core team"))
    team_member_service.add_member(db, test_user, team.id, other_user.id)
    return team


@pytest.fixture(scope="function")
def test_project(db: Session, test_user: User, test_team):
    return project_service.create_project(
        db, test_user, ProjectCreate(name="Billing", team_id=test_team.id, status=ProjectStatus.ACTIVE)
    )


@pytest.fixture(scope="function")
def test_task(db: Session, test_user: User, other_user: User, test_project):
    return task_service.create_task(
        db, test_user, TaskCreate(title="Write docs", project_id=test_project.id, assigned_to=other_user.id)
    )
