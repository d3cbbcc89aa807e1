import os
import tempfile
from itertools import count
from unittest.mock import MagicMock

# Point the app at throwaway resources before it is imported
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["UPLOAD_DIRECTORY"] = tempfile.mkdtemp(prefix="hobbi-uploads-")
os.environ["ENVIRONMENT"] = "test"
os.environ["STORAGE_PUBLIC_URL"] = "https://objects.example.com/hobbi-media"

import pytest
from fastapi.testclient import TestClient

import hobbi.db.base  # noqa: F401
from hobbi.core.config import settings
from hobbi.core.security import create_access_token, get_password_hash
from hobbi.core.storage import ObjectStorage, get_storage
from hobbi.db.session import Base, SessionLocal, engine, get_db
from hobbi.main import app
from hobbi.modules.hobby_tags.services.hobby_tag import replace_user_hobby_tags, seed_hobby_tags
from hobbi.modules.post_images.events import ImageFile
from hobbi.modules.posts.schemas.post import PostCreate
from hobbi.modules.posts.services.post import PostService
from hobbi.modules.users.models.user import User


class FakeStorage(ObjectStorage):
    """In-memory object storage recording every put and delete"""

    def __init__(self):
        super().__init__(client=MagicMock())
        self.objects = {}
        self.deleted = []
        self._names = count(1)

    def generate_unique_name(self, filename):
        extension = os.path.splitext(filename or "")[1].lower()
        return f"img-{next(self._names)}{extension}"

    def put_object(self, name, content, content_type=None):
        key = self.key_for(name)
        self.objects[key] = content
        return key

    def delete(self, url_or_key):
        key = self.suffix_of(url_or_key)
        self.deleted.append(key)
        self.objects.pop(key, None)


@pytest.fixture(autouse=True)
def clean_db():
    """Recreate the schema and default hobby tags for every test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        seed_hobby_tags(session, settings.DEFAULT_HOBBY_TAGS)
    finally:
        session.close()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(clean_db):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def events():
    return []


@pytest.fixture
def post_service(db, storage, events):
    return PostService(db, storage, events.append)


@pytest.fixture
def client(clean_db, storage):
    def override_get_db():
        session = SessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage

    yield TestClient(app)

    app.dependency_overrides.clear()


def create_user(db, email, nickname="tester", password=None, hobby_tag_names=()):
    user = User(
        email=email,
        nickname=nickname,
        hashed_password=get_password_hash(password) if password else None,
    )
    db.add(user)
    db.flush()
    return replace_user_hobby_tags(db, user, list(hobby_tag_names))


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user.email)}"}


def image(filename="photo.png", content=b"\x89PNG fake bytes"):
    return ImageFile(filename=filename, content_type="image/png", content=content)


def make_post(post_service, user, title="A post", hobby_tag_names=(), image_files=None):
    request = PostCreate(title=title, content=f"{title} content", hobby_tag_names=list(hobby_tag_names))
    return post_service.create(user, request, image_files)


@pytest.fixture
def alice(db):
    return create_user(db, "alice@example.com", "alice", hobby_tag_names=["running", "hiking"])


@pytest.fixture
def bob(db):
    return create_user(db, "bob@example.com", "bob")
