"""In-memory per-user document storage for the development backend."""

import secrets
from dataclasses import dataclass, field


@dataclass(slots=True)
class StoredDocument:
    id: str
    name: str
    content: str


@dataclass
class DocumentStore:
    """Documents keyed by user id, then by document id (insertion ordered)."""

    _by_user: dict[str, dict[str, StoredDocument]] = field(default_factory=dict)

    def add(self, uid: str, name: str, content: str) -> StoredDocument:
        # 24 hex chars, the shape of a Mongo ObjectId
        doc = StoredDocument(id=secrets.token_hex(12), name=name, content=content)
        self._by_user.setdefault(uid, {})[doc.id] = doc
        return doc

    def documents_for(self, uid: str) -> list[StoredDocument]:
        return list(self._by_user.get(uid, {}).values())

    def get_many(self, uid: str, ids: list[str]) -> list[StoredDocument]:
        """Return the documents for ``ids``; raises KeyError on the first unknown id."""
        owned = self._by_user.get(uid, {})
        return [owned[doc_id] for doc_id in ids]

    def delete(self, uid: str, ids: list[str]) -> int:
        owned = self._by_user.get(uid, {})
        removed = 0
        for doc_id in ids:
            if owned.pop(doc_id, None) is not None:
                removed += 1
        return removed

    def clear(self) -> None:
        self._by_user.clear()
