# backend/core/memory_store.py

"""
In-process implementations of the store interfaces.

Used with ``STORE_BACKEND=memory`` for local development and by the test
suite. Semantics follow the hosted services closely enough for the
services built on top: documents must exist to be updated, the tree
prunes empty nodes, and subscribers get the full subtree value on every
change.
"""

import asyncio
import copy
import logging
import secrets
import string
from typing import Any, Dict, List, Optional, Tuple

from .auth import AuthenticatedAdmin, AuthProvider
from .exceptions import AuthenticationError, ConflictError, StoreError
from .stores import (
    DocumentStore,
    ErrorCallback,
    RealtimeStore,
    Unsubscribe,
    ValueCallback,
    merge_path,
    read_path,
    split_path,
    write_path,
)

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_letters + string.digits


def _auto_id(length: int = 20) -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


class InMemoryDocumentStore(DocumentStore):
    """Dictionary backed document store."""

    def __init__(self):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def _collection(self, collection: str) -> Dict[str, Dict[str, Any]]:
        return self._collections.setdefault(collection, {})

    async def add(self, collection: str, data: Dict[str, Any]) -> str:
        await asyncio.sleep(0)
        doc_id = _auto_id()
        self._collection(collection)[doc_id] = copy.deepcopy(data)
        return doc_id

    async def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        await asyncio.sleep(0)
        self._collection(collection)[doc_id] = copy.deepcopy(data)

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        await asyncio.sleep(0)
        data = self._collection(collection).get(doc_id)
        if data is None:
            return None
        return {**copy.deepcopy(data), "id": doc_id}

    async def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        await asyncio.sleep(0)
        documents = self._collection(collection)
        if doc_id not in documents:
            raise StoreError(
                f"No document to update: {collection}/{doc_id}", store=self.name
            )
        documents[doc_id].update(copy.deepcopy(data))

    async def delete(self, collection: str, doc_id: str) -> None:
        await asyncio.sleep(0)
        self._collection(collection).pop(doc_id, None)

    async def list(
        self, collection: str, filters: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        await asyncio.sleep(0)
        filters = filters or {}
        return [
            {**copy.deepcopy(data), "id": doc_id}
            for doc_id, data in self._collection(collection).items()
            if all(data.get(field) == value for field, value in filters.items())
        ]


class InMemoryRealtimeStore(RealtimeStore):
    """Nested-dictionary tree with synchronous change notification."""

    def __init__(self):
        self._tree: Dict[str, Any] = {}
        self._listeners: Dict[int, Tuple[str, ValueCallback, Optional[ErrorCallback]]] = {}
        self._next_listener = 0

    async def get(self, path: str) -> Any:
        await asyncio.sleep(0)
        return read_path(self._tree, path)

    async def set(self, path: str, value: Any) -> None:
        await asyncio.sleep(0)
        self._tree = write_path(self._tree, path, value)
        self._notify(path)

    async def update(self, path: str, values: Dict[str, Any]) -> None:
        await asyncio.sleep(0)
        self._tree = merge_path(self._tree, path, values)
        self._notify(path)

    async def remove(self, path: str) -> None:
        await asyncio.sleep(0)
        self._tree = write_path(self._tree, path, None)
        self._notify(path)

    def listen(
        self,
        path: str,
        callback: ValueCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> Unsubscribe:
        listener_id = self._next_listener
        self._next_listener += 1
        self._listeners[listener_id] = (path, callback, on_error)
        logger.debug("Listener %s attached to /%s", listener_id, path)
        self._deliver(path, callback, on_error)

        def unsubscribe():
            if self._listeners.pop(listener_id, None) is not None:
                logger.debug("Listener %s detached from /%s", listener_id, path)

        return unsubscribe

    def _notify(self, changed_path: str) -> None:
        changed = split_path(changed_path)
        for path, callback, on_error in list(self._listeners.values()):
            watched = split_path(path)
            overlap = min(len(watched), len(changed))
            if watched[:overlap] == changed[:overlap]:
                self._deliver(path, callback, on_error)

    def _deliver(
        self, path: str, callback: ValueCallback, on_error: Optional[ErrorCallback]
    ) -> None:
        try:
            callback(read_path(self._tree, path))
        except Exception as e:
            if on_error is None:
                logger.exception("Listener on /%s failed", path)
                return
            on_error(e)


class InMemoryAuthProvider(AuthProvider):
    """
    Account registry for local development and tests.

    Tokens are opaque strings handed out by ``issue_token``; revoking a
    uid's sessions invalidates every token issued to it.
    """

    def __init__(self):
        self.accounts: Dict[str, Dict[str, Any]] = {}
        self._tokens: Dict[str, str] = {}

    async def create_user(self, email: str, password: str, display_name: str) -> str:
        if any(account["email"] == email for account in self.accounts.values()):
            raise ConflictError("An account with this email already exists")
        uid = _auto_id(28)
        self.accounts[uid] = {"email": email, "password": password, "display_name": display_name}
        return uid

    def issue_token(self, uid: str) -> str:
        token = secrets.token_urlsafe(24)
        self._tokens[token] = uid
        return token

    async def verify_token(self, token: str) -> AuthenticatedAdmin:
        uid = self._tokens.get(token)
        if uid is None:
            raise AuthenticationError("Invalid or expired token")
        account = self.accounts.get(uid, {})
        return AuthenticatedAdmin(uid=uid, email=account.get("email"))

    async def revoke_sessions(self, uid: str) -> None:
        self._tokens = {t: owner for t, owner in self._tokens.items() if owner != uid}
