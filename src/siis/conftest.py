"""Shared pytest fixtures for siis tests.

Firestore and Cloud Storage are replaced by small in-memory doubles that
implement only the calls the gateway makes.
"""

import copy
import itertools
from datetime import datetime, timedelta, timezone as dt_timezone
from types import SimpleNamespace

import pytest
from google.api_core.exceptions import NotFound, ServiceUnavailable
from google.cloud.firestore_v1 import DELETE_FIELD

from siis.core.session import SHOPPER_SESSION_KEY, SessionUser
from siis.gateway import BackendClient, Gateway, install_gateway, reset_gateway


class FakeSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data)


class FakeDocument:
    def __init__(self, collection, doc_id):
        self.collection = collection
        self.id = doc_id

    def get(self):
        self.collection.db.check("get")
        return FakeSnapshot(self.id, self.collection.docs.get(self.id))

    def update(self, data):
        self.collection.db.check("update")
        if self.id not in self.collection.docs:
            raise NotFound(f"No document to update: {self.id}")
        doc = self.collection.docs[self.id]
        for key, value in data.items():
            if value is DELETE_FIELD:
                doc.pop(key, None)
            else:
                doc[key] = value

    def delete(self):
        self.collection.db.check("delete")
        self.collection.docs.pop(self.id, None)


class FakeQuery:
    def __init__(self, collection, filters=()):
        self.collection = collection
        self.filters = list(filters)

    def where(self, *, filter):
        return FakeQuery(self.collection, [*self.filters, filter])

    def stream(self):
        self.collection.db.check("list")
        self.collection.db.stream_calls += 1
        for doc_id, data in list(self.collection.docs.items()):
            if all(
                f.op_string == "==" and data.get(f.field_path) == f.value
                for f in self.filters
            ):
                yield FakeSnapshot(doc_id, data)


class FakeCollection(FakeQuery):
    def __init__(self, db, name):
        super().__init__(self)
        self.db = db
        self.name = name
        self.docs = {}

    def document(self, doc_id):
        return FakeDocument(self, doc_id)

    def add(self, data):
        self.db.check("create")
        doc_id = f"{self.name}-{next(self.db.ids)}"
        self.docs[doc_id] = copy.deepcopy(data)
        return datetime.now(dt_timezone.utc), SimpleNamespace(id=doc_id)


class FakeFirestore:
    """Collections keyed by name; ``fail_on`` names operations that raise."""

    def __init__(self):
        self.collections = {}
        self.ids = itertools.count(1)
        self.fail_on = set()
        self.stream_calls = 0

    def check(self, operation):
        if operation in self.fail_on:
            raise ServiceUnavailable(f"Firestore unavailable during {operation}")

    def collection(self, name):
        if name not in self.collections:
            self.collections[name] = FakeCollection(self, name)
        return self.collections[name]

    def seed(self, collection, data, doc_id=None, age_minutes=0):
        """Store a document directly, with a createdAt ``age_minutes`` in the past."""
        docs = self.collection(collection).docs
        doc_id = doc_id or f"{collection}-{next(self.ids)}"
        created = datetime(2026, 1, 1, tzinfo=dt_timezone.utc) - timedelta(minutes=age_minutes)
        docs[doc_id] = {"createdAt": created, "updatedAt": created, **data}
        return doc_id

    def docs(self, collection):
        return self.collection(collection).docs


class FakeBlob:
    def __init__(self, bucket, name):
        self.bucket = bucket
        self.name = name
        self.metadata = None
        self.content_type = None
        self.data = b""

    @property
    def public_url(self):
        return f"https://storage.googleapis.com/{self.bucket.name}/{self.name}"

    def upload_from_file(self, file, content_type=None):
        if any(marker in self.name for marker in self.bucket.fail_uploads):
            raise self.bucket.upload_error(f"Upload failed for {self.name}")
        self.data = file.read()
        self.content_type = content_type
        self.bucket.blobs[self.name] = self

    def delete(self):
        if self.bucket.fail_deletes:
            raise ServiceUnavailable(f"Delete failed for {self.name}")
        if self.name not in self.bucket.blobs:
            raise NotFound(f"No such object: {self.name}")
        del self.bucket.blobs[self.name]
        self.bucket.deleted.append(self.name)


class FakeBucket:
    def __init__(self, name="siis-test.appspot.com"):
        self.name = name
        self.blobs = {}
        self.deleted = []
        self.fail_uploads = set()
        self.upload_error = ServiceUnavailable
        self.fail_deletes = False

    def blob(self, name):
        return self.blobs.get(name) or FakeBlob(self, name)

    def get_blob(self, name):
        return self.blobs.get(name)

    def put(self, name, token=None):
        blob = FakeBlob(self, name)
        if token:
            blob.metadata = {"firebaseStorageDownloadTokens": token}
        self.blobs[name] = blob
        return blob


class FakeBackendClient(BackendClient):
    """Backend client whose auth calls are answered from dictionaries."""

    def __init__(self, firestore, bucket):
        super().__init__(app=None, firestore=firestore, bucket=bucket)
        self.tokens = {}
        self.created_users = []
        self.create_user_error = None

    def verify_id_token(self, id_token):
        if id_token not in self.tokens:
            raise ValueError("Invalid ID token")
        return self.tokens[id_token]

    def create_user(self, email, password, display_name=None):
        if self.create_user_error is not None:
            raise self.create_user_error
        uid = f"uid-{len(self.created_users) + 1}"
        self.created_users.append({"uid": uid, "email": email, "display_name": display_name})
        return SimpleNamespace(uid=uid, email=email, display_name=display_name)


@pytest.fixture
def fake_db():
    return FakeFirestore()


@pytest.fixture
def fake_bucket():
    return FakeBucket()


@pytest.fixture
def backend(fake_db, fake_bucket):
    return FakeBackendClient(fake_db, fake_bucket)


@pytest.fixture
def gateway(backend):
    """Install a gateway built on the in-memory doubles."""
    installed = install_gateway(Gateway(backend))
    yield installed
    reset_gateway()


@pytest.fixture
def product_doc():
    """Firestore fields for a purchasable product."""

    def make(**overrides):
        data = {
            "name": "Moonlit Pearl Necklace",
            "description": "Freshwater pearls",
            "price": 1280,
            "category": "Necklaces",
            "stock": 10,
            "images": [
                "https://firebasestorage.googleapis.com/v0/b/siis-test.appspot.com/o/products%2Fa.jpg?alt=media&token=t1",
            ],
            "isActive": True,
        }
        data.update(overrides)
        return data

    return make


@pytest.fixture
def shopper():
    return SessionUser(uid="uid-shopper", email="shopper@example.com", display_name="Mei")


@pytest.fixture
def admin_user():
    return SessionUser(uid="uid-admin", email="admin@siis.test", display_name="Admin", is_admin=True)


def sign_in_client(client, user):
    session = client.session
    session[SHOPPER_SESSION_KEY] = user.to_session()
    session.save()
    return client


@pytest.fixture
def shopper_client(client, db, shopper):
    return sign_in_client(client, shopper)


@pytest.fixture
def admin_client(client, db, admin_user):
    return sign_in_client(client, admin_user)
