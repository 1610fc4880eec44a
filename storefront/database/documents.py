"""Document store for the storefront"""

import copy
import operator
import uuid
from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional

# (field, op, value) triples, e.g. ("user_id", "==", "u-1")
Filter = tuple[str, str, Any]

_OPERATORS = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "in": lambda field_value, values: field_value in values,
    "array-contains": lambda field_value, value: isinstance(field_value, list) and value in field_value,
}


def deep_merge(base: dict, updates: dict) -> dict:
    """Merge ``updates`` into a copy of ``base``, recursing into nested dicts"""
    merged = dict(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class DocumentStore(ABC):
    """
    Collection/id keyed document persistence.

    Documents are plain dicts; returned documents carry their id under "id".
    """

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Optional[dict]:
        ...

    @abstractmethod
    async def set(self, collection: str, doc_id: str, data: dict, merge: bool = False) -> None:
        ...

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: Iterable[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[dict]:
        ...

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> bool:
        ...

    async def add(self, collection: str, data: dict) -> str:
        """Store a document under a generated id and return the id"""
        doc_id = uuid.uuid4().hex
        await self.set(collection, doc_id, data)
        return doc_id


class MemoryDocumentStore(DocumentStore):
    """In-memory document storage"""

    def __init__(self):
        self.collections: dict[str, dict[str, dict]] = {}

    async def get(self, collection: str, doc_id: str) -> Optional[dict]:
        doc = self.collections.get(collection, {}).get(doc_id)
        if doc is None:
            return None
        return {**copy.deepcopy(doc), "id": doc_id}

    async def set(self, collection: str, doc_id: str, data: dict, merge: bool = False) -> None:
        docs = self.collections.setdefault(collection, {})
        data = {k: v for k, v in copy.deepcopy(data).items() if k != "id"}
        if merge and doc_id in docs:
            docs[doc_id] = deep_merge(docs[doc_id], data)
        else:
            docs[doc_id] = data

    async def query(
        self,
        collection: str,
        filters: Iterable[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[dict]:
        filters = list(filters)
        for _, op, _ in filters:
            if op not in _OPERATORS:
                raise ValueError(f"Unsupported query operator: {op}")

        results = []
        for doc_id, doc in self.collections.get(collection, {}).items():
            if all(
                field in doc and _OPERATORS[op](doc[field], value)
                for field, op, value in filters
            ):
                results.append({**copy.deepcopy(doc), "id": doc_id})

        if order_by:
            # Documents missing the field sort last, as in most document stores
            present = [d for d in results if d.get(order_by) is not None]
            missing = [d for d in results if d.get(order_by) is None]
            present.sort(key=lambda d: d[order_by], reverse=descending)
            results = present + missing

        if limit is not None:
            results = results[:limit]
        return results

    async def delete(self, collection: str, doc_id: str) -> bool:
        docs = self.collections.get(collection, {})
        if doc_id in docs:
            del docs[doc_id]
            return True
        return False

    def clear(self) -> None:
        self.collections.clear()


# Singleton instance
document_store = MemoryDocumentStore()
