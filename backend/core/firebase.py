# backend/core/firebase.py

"""
Firebase backed implementations of the store interfaces.

* Cloud Firestore (async client) is the document store.
* Firebase Realtime Database is the realtime tree store. The admin SDK
  client is blocking, so every call runs in a worker thread and listener
  events are handed back to the event loop.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import firebase_admin
from firebase_admin import credentials, db, exceptions as firebase_exceptions, firestore_async
from google.api_core import exceptions as google_exceptions
from google.cloud.firestore_v1.base_query import FieldFilter

from .config import Settings
from .exceptions import StoreError
from .stores import (
    DocumentStore,
    ErrorCallback,
    RealtimeStore,
    Unsubscribe,
    ValueCallback,
    join_path,
    merge_path,
    read_path,
    write_path,
)

logger = logging.getLogger(__name__)


def initialize_firebase(config: Settings) -> firebase_admin.App:
    """Initialize the default Firebase app once per process."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    if config.firebase_credentials_path:
        cred = credentials.Certificate(config.firebase_credentials_path)
    else:
        cred = credentials.ApplicationDefault()

    options = {}
    if config.firebase_database_url:
        options["databaseURL"] = config.firebase_database_url
    if config.firebase_project_id:
        options["projectId"] = config.firebase_project_id

    app = firebase_admin.initialize_app(cred, options)
    logger.info(
        "Firebase initialized (project=%s, database=%s)",
        config.firebase_project_id or "default",
        config.firebase_database_url or "unset",
    )
    return app


class FirestoreDocumentStore(DocumentStore):
    """Document store on the Firestore async client."""

    def __init__(self, app: Optional[firebase_admin.App] = None):
        self.client = firestore_async.client(app)

    async def add(self, collection: str, data: Dict[str, Any]) -> str:
        try:
            _, doc_ref = await self.client.collection(collection).add(data)
        except google_exceptions.GoogleAPIError as e:
            raise self._error("add", collection, e)
        return doc_ref.id

    async def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        try:
            await self.client.collection(collection).document(doc_id).set(data)
        except google_exceptions.GoogleAPIError as e:
            raise self._error("set", f"{collection}/{doc_id}", e)

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        try:
            snapshot = await self.client.collection(collection).document(doc_id).get()
        except google_exceptions.GoogleAPIError as e:
            raise self._error("get", f"{collection}/{doc_id}", e)
        if not snapshot.exists:
            return None
        return {**snapshot.to_dict(), "id": snapshot.id}

    async def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        try:
            await self.client.collection(collection).document(doc_id).update(data)
        except google_exceptions.GoogleAPIError as e:
            raise self._error("update", f"{collection}/{doc_id}", e)

    async def delete(self, collection: str, doc_id: str) -> None:
        try:
            await self.client.collection(collection).document(doc_id).delete()
        except google_exceptions.GoogleAPIError as e:
            raise self._error("delete", f"{collection}/{doc_id}", e)

    async def list(
        self, collection: str, filters: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        query = self.client.collection(collection)
        for field, value in (filters or {}).items():
            query = query.where(filter=FieldFilter(field, "==", value))

        documents = []
        try:
            async for snapshot in query.stream():
                documents.append({**snapshot.to_dict(), "id": snapshot.id})
        except google_exceptions.GoogleAPIError as e:
            raise self._error("query", collection, e)
        return documents

    def _error(self, operation: str, target: str, exc: Exception) -> StoreError:
        logger.error(f"Firestore {operation} failed for {target}: {exc}")
        return StoreError(str(exc), store=self.name)


class FirebaseRealtimeStore(RealtimeStore):
    """Realtime tree store on the Realtime Database admin client."""

    def __init__(self, app: Optional[firebase_admin.App] = None):
        self.app = app

    def _ref(self, path: str):
        return db.reference(f"/{path.strip('/')}", app=self.app)

    async def _call(self, operation: str, path: str, func, *args):
        try:
            return await asyncio.to_thread(func, *args)
        except firebase_exceptions.FirebaseError as e:
            logger.error(f"Realtime Database {operation} failed for /{path}: {e}")
            raise StoreError(str(e), store=self.name)

    async def get(self, path: str) -> Any:
        return await self._call("get", path, self._ref(path).get)

    async def set(self, path: str, value: Any) -> None:
        await self._call("set", path, self._ref(path).set, value)

    async def update(self, path: str, values: Dict[str, Any]) -> None:
        await self._call("update", path, self._ref(path).update, values)

    async def remove(self, path: str) -> None:
        await self._call("delete", path, self._ref(path).delete)

    def listen(
        self,
        path: str,
        callback: ValueCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> Unsubscribe:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        # Events carry deltas relative to ``path``; keep a local copy of
        # the subtree so subscribers always receive the full value.
        holder: Dict[str, Any] = {}

        def deliver(func, *args):
            if loop is None:
                func(*args)
            else:
                loop.call_soon_threadsafe(func, *args)

        def notify(value):
            try:
                callback(value)
            except Exception as e:
                if on_error is None:
                    logger.exception("Listener on /%s failed", path)
                    return
                on_error(e)

        def handle(event):
            nonlocal holder
            try:
                target = join_path("value", event.path or "/")
                if event.event_type == "patch":
                    holder = merge_path(holder, target, event.data or {})
                else:
                    holder = write_path(holder, target, event.data)
                value = read_path(holder, "value")
            except Exception as e:
                logger.error(f"Realtime listener on /{path} failed: {e}")
                if on_error is not None:
                    deliver(on_error, e)
                return
            deliver(notify, value)

        try:
            registration = self._ref(path).listen(handle)
        except firebase_exceptions.FirebaseError as e:
            raise StoreError(str(e), store=self.name)
        logger.info("Realtime listener started on /%s", path)

        def unsubscribe():
            registration.close()
            logger.info("Realtime listener closed on /%s", path)

        return unsubscribe
