# backend/core/stores.py

"""
Store interfaces shared by the Firebase adapters and the in-process stores.

Two independently queried backends hold the console's data:

* a document store: collections of schemaless documents, queried by
  field equality;
* a realtime tree store: a path addressed JSON tree with continuous
  subscriptions on any subtree.

Services depend only on these interfaces; ``core.firebase`` and
``core.memory_store`` provide the implementations.
"""

import copy
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

# Callback receiving the full value of a subscribed path (None when absent)
ValueCallback = Callable[[Any], None]
ErrorCallback = Callable[[Exception], None]
Unsubscribe = Callable[[], None]


class DocumentStore(ABC):
    """Collection based document database."""

    name = "document"

    @abstractmethod
    async def add(self, collection: str, data: Dict[str, Any]) -> str:
        """Insert a document with a store assigned id and return the id."""

    @abstractmethod
    async def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Create or overwrite the document ``doc_id``."""

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Return the document data with its ``id``, or None."""

    @abstractmethod
    async def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Merge ``data`` into an existing document; fails if it is missing."""

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> None:
        """Delete a document. Deleting a missing document is not an error."""

    @abstractmethod
    async def list(
        self, collection: str, filters: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """Return every document matching all ``field == value`` filters."""


class RealtimeStore(ABC):
    """Path addressed realtime key-value tree."""

    name = "realtime"

    @abstractmethod
    async def get(self, path: str) -> Any:
        """Return the value at ``path`` or None."""

    @abstractmethod
    async def set(self, path: str, value: Any) -> None:
        """Replace the value at ``path``."""

    @abstractmethod
    async def update(self, path: str, values: Dict[str, Any]) -> None:
        """Merge the given children into the value at ``path``."""

    @abstractmethod
    async def remove(self, path: str) -> None:
        """Delete the value at ``path``."""

    @abstractmethod
    def listen(
        self,
        path: str,
        callback: ValueCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> Unsubscribe:
        """
        Invoke ``callback`` with the current value of ``path`` and again
        after every change to that subtree.

        Returns a function that cancels the subscription.
        """


def split_path(path: str) -> List[str]:
    """Split a tree path into its non-empty segments."""
    return [segment for segment in path.strip("/").split("/") if segment]


def join_path(*parts: str) -> str:
    return "/".join(segment for part in parts for segment in split_path(part))


def read_path(tree: Any, path: str) -> Any:
    """Return a deep copy of the value at ``path`` inside ``tree``."""
    node = tree
    for segment in split_path(path):
        if not isinstance(node, dict) or segment not in node:
            return None
        node = node[segment]
    return copy.deepcopy(node)


def write_path(tree: Dict[str, Any], path: str, value: Any) -> Dict[str, Any]:
    """
    Set ``value`` at ``path`` inside ``tree`` and return the tree.

    A None value deletes the node; parents left empty are pruned, matching
    the way the hosted tree never stores empty objects.
    """
    segments = split_path(path)
    if not segments:
        return _prune(copy.deepcopy(value)) if isinstance(value, dict) else {}

    parents = []
    node = tree
    for segment in segments[:-1]:
        child = node.get(segment)
        if not isinstance(child, dict):
            if value is None:
                return tree
            child = {}
            node[segment] = child
        parents.append((node, segment))
        node = child

    leaf = segments[-1]
    if value is None or value == {}:
        node.pop(leaf, None)
    else:
        node[leaf] = _prune(copy.deepcopy(value)) if isinstance(value, dict) else copy.deepcopy(value)

    for parent, segment in reversed(parents):
        if parent[segment]:
            break
        del parent[segment]
    return tree


def merge_path(tree: Dict[str, Any], path: str, values: Dict[str, Any]) -> Dict[str, Any]:
    """Apply a multi-child update: every key of ``values`` is a relative path."""
    for key, value in values.items():
        tree = write_path(tree, join_path(path, key), value)
    return tree


def _prune(value: Dict[str, Any]) -> Dict[str, Any]:
    pruned = {}
    for key, child in value.items():
        if isinstance(child, dict):
            child = _prune(child)
            if not child:
                continue
        elif child is None:
            continue
        pruned[key] = child
    return pruned
