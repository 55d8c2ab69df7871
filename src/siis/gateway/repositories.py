"""Firestore repositories, one per collection."""

import logging
from datetime import datetime, timezone as dt_timezone

from django.utils import timezone
from firebase_admin.exceptions import FirebaseError
from google.api_core.exceptions import GoogleAPIError
from google.cloud.firestore_v1.base_query import FieldFilter

from .exceptions import GatewayError
from .records import CatalogItem, Member, Order, to_firestore

logger = logging.getLogger(__name__)

BACKEND_ERRORS = (GoogleAPIError, FirebaseError)

_OLDEST = datetime.min.replace(tzinfo=dt_timezone.utc)


class Repository:
    """CRUD over one Firestore collection.

    Reads come back newest first by ``createdAt``. Sorting happens here
    rather than in the query so equality filters never need a composite
    index.
    """

    collection_name = None
    record_class = None

    def __init__(self, db):
        self.db = db

    def _collection(self):
        return self.db.collection(self.collection_name)

    def _to_record(self, snapshot):
        return self.record_class.from_document(snapshot.id, snapshot.to_dict() or {})

    def list(self, where: dict | None = None) -> list:
        """List records matching all equality filters in ``where``."""
        query = self._collection()
        for field_path, value in (where or {}).items():
            query = query.where(filter=FieldFilter(field_path, "==", value))

        try:
            snapshots = list(query.stream())
        except BACKEND_ERRORS as e:
            logger.exception(f"Failed to list {self.collection_name}: {e}")
            raise GatewayError(f"Could not load {self.collection_name}", operation="list") from e

        records = [self._to_record(snapshot) for snapshot in snapshots]
        records.sort(key=lambda record: record.created_at or _OLDEST, reverse=True)
        logger.debug(f"Listed {len(records)} {self.collection_name} (filters={where or {}})")
        return records

    def get(self, record_id: str):
        """Get one record, or None when it does not exist."""
        if not record_id:
            return None
        try:
            snapshot = self._collection().document(record_id).get()
        except BACKEND_ERRORS as e:
            logger.exception(f"Failed to get {self.collection_name}/{record_id}: {e}")
            raise GatewayError(f"Could not load {self.collection_name} record", operation="get") from e

        if not snapshot.exists:
            logger.info(f"{self.collection_name}/{record_id} does not exist")
            return None
        return self._to_record(snapshot)

    def create(self, fields: dict) -> str:
        """Create a record and return the backend-assigned id."""
        now = timezone.now()
        data = to_firestore({**fields, "createdAt": now, "updatedAt": now})
        try:
            _, ref = self._collection().add(data)
        except BACKEND_ERRORS as e:
            logger.exception(f"Failed to create {self.collection_name}: {e}")
            raise GatewayError(f"Could not create {self.collection_name} record", operation="create") from e

        logger.info(f"Created {self.collection_name}/{ref.id}")
        return ref.id

    def update(self, record_id: str, fields: dict):
        """Write a partial set of fields, stamping ``updatedAt``."""
        data = to_firestore({**fields, "updatedAt": timezone.now()})
        try:
            self._collection().document(record_id).update(data)
        except BACKEND_ERRORS as e:
            logger.exception(f"Failed to update {self.collection_name}/{record_id}: {e}")
            raise GatewayError(f"Could not update {self.collection_name} record", operation="update") from e

        logger.info(f"Updated {self.collection_name}/{record_id}: {sorted(fields)}")

    def delete(self, record_id: str):
        try:
            self._collection().document(record_id).delete()
        except BACKEND_ERRORS as e:
            logger.exception(f"Failed to delete {self.collection_name}/{record_id}: {e}")
            raise GatewayError(f"Could not delete {self.collection_name} record", operation="delete") from e

        logger.info(f"Deleted {self.collection_name}/{record_id}")


class ProductRepository(Repository):
    collection_name = "products"
    record_class = CatalogItem

    def list_active(self, category: str | None = None) -> list[CatalogItem]:
        """List items shown on the storefront."""
        where = {"isActive": True}
        if category:
            where["category"] = category
        return self.list(where)


class OrderRepository(Repository):
    collection_name = "orders"
    record_class = Order

    def list_recent(self, limit: int = 10) -> list[Order]:
        return self.list()[:limit]


class MemberRepository(Repository):
    collection_name = "members"
    record_class = Member

    def get_by_uid(self, uid: str) -> Member | None:
        if not uid:
            return None
        members = self.list({"uid": uid})
        return members[0] if members else None
