"""Shared fixtures: an in-memory SQLite database, factories and fake collaborators."""
from datetime import datetime, timedelta

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from uboard.controllers.comment import CommentController
from uboard.controllers.post import PostController
from uboard.db.session import Base
from uboard.models.post import EVENT_TYPE, Post
from uboard.models.user import User
from uboard.repositories.comment import CommentRepository
from uboard.repositories.engagement import CheckinRepository, LikeRepository, ReportRepository
from uboard.repositories.post import PostRepository
from uboard.repositories.tag import TagRepository


class FakeFileManager:
    def __init__(self, available: bool = True):
        self.available = available
        self.uploads: list[tuple[str, str]] = []

    def status(self) -> bool:
        return self.available

    def upload(self, path: str, filename: str) -> str:
        self.uploads.append((path, filename))
        return f"http://files.test/thumbnails/{filename}"


class FakeEmailService:
    def __init__(self, result: bool = True):
        self.result = result
        self.sent: list[tuple] = []

    async def send_confirm_email(self, token, first_name, last_name, email_address):
        self.sent.append(("conf", token, email_address))
        return self.result

    async def send_reset_email(self, token, first_name, last_name, user_name, email_address):
        self.sent.append(("reset", token, email_address))
        return self.result


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db(engine):
    maker = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
    async with maker() as session:
        yield session


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    async def _make_user(user_name: str | None = None, first_name: str = "test", last_name: str = "test") -> User:
        counter["n"] += 1
        user_name = user_name or f"user{counter['n']}"
        user = User(
            first_name=first_name,
            last_name=last_name,
            user_name=user_name,
            email=f"{user_name}@mail.utoronto.ca",
            password_hash="not-a-real-hash",
        )
        db.add(user)
        await db.flush()
        return user

    return _make_user


@pytest.fixture
def make_post(db):
    base_time = datetime(2021, 10, 1, 12, 0, 0)
    counter = {"n": 0}

    async def _make_post(
        author_id,
        title: str = "This is a new post!",
        body: str = "This is a new post!This is a new post!",
        post_type: str = EVENT_TYPE,
        capacity: int = 10,
        location: str = "Bahen Centre",
    ) -> Post:
        counter["n"] += 1
        post = Post(
            type=post_type,
            title=title,
            body=body,
            location=location,
            capacity=capacity,
            author_id=author_id,
            created_at=base_time + timedelta(minutes=counter["n"]),
        )
        db.add(post)
        await db.flush()
        return post

    return _make_post


@pytest.fixture
def files():
    return FakeFileManager()


@pytest.fixture
def emails():
    return FakeEmailService()


@pytest.fixture
def post_controller(db, files):
    return PostController(
        PostRepository(db),
        LikeRepository(db),
        CheckinRepository(db),
        ReportRepository(db),
        TagRepository(db),
        files,
    )


@pytest.fixture
def comment_controller(db):
    return CommentController(CommentRepository(db), PostRepository(db))
