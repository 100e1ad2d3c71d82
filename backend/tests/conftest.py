import re

import pytest
import mongomock
from fastapi.testclient import TestClient

from app.core.config import settings
from app.db.indexes import RECIPE_TEXT_FIELDS
from app.db.init import MongoStore
from app.main import app
from app.services.images import CloudinaryHost, ImageHostError, get_image_host

# bcrypt 기본 12라운드는 테스트에서 너무 느림
settings.BCRYPT_ROUNDS = 4


# --- motor 모양의 async 래퍼 (mongomock 위) ---

def _emulate_text(query):
    # mongomock은 $text를 모른다: 단어 시작 일치(대소문자 무시) 정규식으로 흉내
    if not query or "$text" not in query:
        return query
    query = dict(query)
    words = query.pop("$text")["$search"].split()
    query["$or"] = [
        {f: re.compile(r"\b" + re.escape(w), re.I)}
        for w in words
        for f in RECIPE_TEXT_FIELDS
    ]
    return query


class FakeCursor:
    def __init__(self, cursor, call=None):
        self._cursor = cursor
        self._call = call if call is not None else {}

    def sort(self, key_or_list, direction=None):
        self._call["sort"] = key_or_list
        if isinstance(key_or_list, list):
            # {"$meta": "textScore"} 정렬은 건너뜀
            key_or_list = [(k, d) for k, d in key_or_list if not isinstance(d, dict)]
        self._cursor = self._cursor.sort(key_or_list, direction)
        return self

    def skip(self, n):
        self._cursor = self._cursor.skip(n)
        return self

    def limit(self, n):
        self._cursor = self._cursor.limit(n)
        return self

    async def to_list(self, length=None):
        docs = list(self._cursor)
        return docs if length is None else docs[:length]


class FakeCollection:
    def __init__(self, col, finds):
        self._col = col
        self._finds = finds

    def find(self, query=None, *args, **kwargs):
        # 라우터가 실제로 만든 쿼리를 남겨둔다 (모양 검증용)
        call = {"collection": self._col.name, "query": query}
        self._finds.append(call)
        return FakeCursor(self._col.find(_emulate_text(query), *args, **kwargs), call)

    async def count_documents(self, query, *args, **kwargs):
        return self._col.count_documents(_emulate_text(query), *args, **kwargs)

    def __getattr__(self, name):
        attr = getattr(self._col, name)
        if not callable(attr):
            return attr

        async def call(*args, **kwargs):
            return attr(*args, **kwargs)

        return call


class FakeDatabase:
    def __init__(self, db):
        self._db = db
        self.finds = []

    def __getitem__(self, name):
        return FakeCollection(self._db[name], self.finds)

    async def command(self, cmd, *args, **kwargs):
        if cmd == "ping":
            return {"ok": 1.0}
        raise NotImplementedError(cmd)


class FakeMotorClient:
    def __init__(self):
        self._client = mongomock.MongoClient()

    def __getitem__(self, name):
        return FakeDatabase(self._client[name])

    def close(self):
        pass


# --- 이미지 호스트 대역 ---

class FakeImageHost(CloudinaryHost):
    def __init__(self, configured=True):
        if configured:
            super().__init__("demo-cloud", "key", "secret", folder="recipeshare")
        else:
            super().__init__(None, None, None)
        self.uploads = []
        self.destroyed = []
        self.fail = False

    async def upload(self, file, filename="upload", content_type="application/octet-stream"):
        self._require()
        if self.fail:
            raise ImageHostError("boom")
        n = len(self.uploads) + 1
        public_id = f"recipeshare/img{n}"
        self.uploads.append({"file": file, "filename": filename, "content_type": content_type})
        return {
            "public_id": public_id,
            "secure_url": f"https://res.cloudinary.com/demo-cloud/image/upload/{public_id}.jpg",
            "width": 800,
            "height": 600,
            "format": "jpg",
            "bytes": len(file) if isinstance(file, bytes) else 1234,
        }

    async def destroy(self, public_id):
        self._require()
        known = any(f"recipeshare/img{i + 1}" == public_id for i in range(len(self.uploads)))
        self.destroyed.append(public_id)
        return {"result": "ok" if known else "not found"}


@pytest.fixture
def store():
    return MongoStore("mongodb://fake", "recipeshare_test", client=FakeMotorClient())


@pytest.fixture
def db(store):
    return store.db


@pytest.fixture
def images():
    return FakeImageHost()


@pytest.fixture
def client(store, images):
    """Test client with fake store + image host."""
    app.state.store = store
    app.dependency_overrides[get_image_host] = lambda: images
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    app.state.store = None
    app.state.images = None


# --- 공용 헬퍼 ---

def signup(client, email="cook@example.com", name="Home Cook", password="secret123"):
    resp = client.post("/api/auth/signup", json={"email": email, "name": name, "password": password})
    assert resp.status_code == 201, resp.text
    data = resp.json()
    return data["user"], {"Authorization": f"Bearer {data['token']}"}


def recipe_payload(**overrides):
    body = {
        "title": "Lemon Garlic Pasta",
        "description": "Bright weeknight pasta with lemon, garlic and parmesan.",
        "image": "https://example.com/pasta.jpg",
        "cookTime": "20 min",
        "prepTime": "10 min",
        "servings": 2,
        "category": "Dinner",
        "difficulty": "Easy",
        "tags": ["Pasta", "Quick"],
        "ingredients": ["200g spaghetti", "2 cloves garlic", "1 lemon"],
        "instructions": ["Boil the pasta.", "Fry garlic in olive oil.", "Toss with lemon and cheese."],
    }
    body.update(overrides)
    return body


@pytest.fixture
def author(client):
    return signup(client)


@pytest.fixture
def recipe(client, author):
    _, headers = author
    resp = client.post("/api/recipes", json=recipe_payload(), headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()
