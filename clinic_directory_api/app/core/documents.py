"""
Document store over SQLite.

Each collection lives in its own table.  A document is a plain ``dict``
with ``id``, ``name``, ``created_at``, ``updated_at`` and one ``set`` of
ids per relationship field.  Set fields are persisted as sorted JSON
arrays.

Writes are described by a :class:`Patch` and bulk writes select their
targets with a filter ``dict``: for a set field the filter matches
documents whose set contains the given id, for a scalar field it matches
equality.  This mirrors the ``$set`` / ``$addToSet`` / ``$pull`` update
model the services are written against.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from .db import get_connection
from .errors import DuplicateKeyError, StorageError
from .idsets import add_to_set, pull


logger = logging.getLogger(__name__)

Document = Dict[str, Any]


@dataclass(frozen=True)
class Collection:
    """Table name plus the fields the store knows how to handle."""

    table: str
    set_fields: Tuple[str, ...] = ()
    scalar_fields: Tuple[str, ...] = ("name",)

    @property
    def sortable_fields(self) -> Set[str]:
        return {"id", "created_at", *self.scalar_fields}

    def check_field(self, name: str) -> None:
        if name not in self.set_fields and name not in self.scalar_fields and name != "id":
            raise ValueError(f"Unknown field '{name}' for collection '{self.table}'")


CLINICS = Collection("clinics", set_fields=("doctors", "health_services"))
DOCTORS = Collection("doctors", set_fields=("clinics", "health_services"))
HEALTH_SERVICES = Collection("health_services")


@dataclass
class Patch:
    """Field level update applied to one or many documents.

    ``set_values`` replaces values, ``add_ids`` unions ids into set fields
    and ``pull_ids`` removes ids from set fields.  They are applied in that
    order.
    """

    set_values: Dict[str, Any] = field(default_factory=dict)
    add_ids: Dict[str, Set[str]] = field(default_factory=dict)
    pull_ids: Dict[str, Set[str]] = field(default_factory=dict)

    @classmethod
    def assign(cls, **values: Any) -> "Patch":
        return cls(set_values=dict(values))

    @classmethod
    def add(cls, field_name: str, *ids: str) -> "Patch":
        return cls(add_ids={field_name: set(ids)})

    @classmethod
    def remove(cls, field_name: str, *ids: str) -> "Patch":
        return cls(pull_ids={field_name: set(ids)})

    def fields(self) -> Set[str]:
        return set(self.set_values) | set(self.add_ids) | set(self.pull_ids)

    def apply(self, document: Document) -> bool:
        """Apply the patch to ``document`` in place; return ``True`` if it changed."""
        changed = False
        for name, value in self.set_values.items():
            if isinstance(value, (set, frozenset, list, tuple)):
                value = set(value)
            if document.get(name) != value:
                document[name] = value
                changed = True
        for name, ids in self.add_ids.items():
            merged = add_to_set(document.get(name, set()), ids)
            if merged != document.get(name):
                document[name] = merged
                changed = True
        for name, ids in self.pull_ids.items():
            remaining = pull(document.get(name, set()), ids)
            if remaining != document.get(name):
                document[name] = remaining
                changed = True
        return changed


def new_id() -> str:
    """Generate an opaque, globally unique document id."""
    return uuid.uuid4().hex


class DocumentStore:
    """Persistence operations for one collection.

    Every call opens its own connection and closes it before returning.
    Single document updates run inside ``BEGIN IMMEDIATE`` so the read and
    the write cannot interleave with another writer; ``update_many``
    updates every matching document inside one transaction.
    """

    def __init__(self, database_path: Optional[str], collection: Collection) -> None:
        self.database_path = database_path
        self.collection = collection

    # ------------------------------------------------------------------
    # Row conversion
    # ------------------------------------------------------------------
    def _to_document(self, row: sqlite3.Row) -> Document:
        document: Document = {
            "id": row["id"],
            "created_at": row["created_at"],
            "updated_at": row["updated_at"],
        }
        for name in self.collection.scalar_fields:
            document[name] = row[name]
        for name in self.collection.set_fields:
            document[name] = set(json.loads(row[name]) if row[name] else [])
        return document

    def _column_values(self, document: Document, names: Iterable[str]) -> List[Any]:
        values: List[Any] = []
        for name in names:
            if name in self.collection.set_fields:
                values.append(json.dumps(sorted(document.get(name) or ())))
            else:
                values.append(document.get(name))
        return values

    def _where(self, filters: Optional[Mapping[str, Any]]) -> Tuple[str, List[Any]]:
        """Translate a filter mapping into a WHERE clause and its parameters."""
        if not filters:
            return "", []
        table = self.collection.table
        clauses: List[str] = []
        params: List[Any] = []
        for name, value in filters.items():
            self.collection.check_field(name)
            if name in self.collection.set_fields:
                clauses.append(
                    f"EXISTS (SELECT 1 FROM json_each({table}.{name}) WHERE json_each.value = ?)"
                )
            else:
                clauses.append(f"{table}.{name} = ?")
            params.append(value)
        return " WHERE " + " AND ".join(clauses), params

    def _check_patch(self, patch: Patch) -> None:
        for name in patch.fields():
            self.collection.check_field(name)
            if name == "id":
                raise ValueError("Document ids are immutable")
        for name in list(patch.add_ids) + list(patch.pull_ids):
            if name not in self.collection.set_fields:
                raise ValueError(f"Field '{name}' is not a set field")

    def _write(self, cursor: sqlite3.Cursor, document: Document, names: Iterable[str]) -> None:
        names = list(names)
        assignments = ", ".join(f"{name} = ?" for name in names)
        cursor.execute(
            f"UPDATE {self.collection.table} SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            (*self._column_values(document, names), document["id"]),
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def find_by_id(self, document_id: str) -> Optional[Document]:
        conn = get_connection(self.database_path)
        try:
            row = conn.execute(
                f"SELECT * FROM {self.collection.table} WHERE id = ?", (document_id,)
            ).fetchone()
            return self._to_document(row) if row else None
        except sqlite3.Error as exc:
            logger.error("Failed to read %s %s: %s", self.collection.table, document_id, exc)
            raise StorageError(f"{self.collection.table} read failed") from exc
        finally:
            conn.close()

    def find_by_ids(self, document_ids: Iterable[str]) -> List[Document]:
        """Return the documents whose id is in ``document_ids``; unknown ids are skipped."""
        ids = sorted(set(document_ids))
        if not ids:
            return []
        placeholders = ", ".join("?" for _ in ids)
        conn = get_connection(self.database_path)
        try:
            rows = conn.execute(
                f"SELECT * FROM {self.collection.table} WHERE id IN ({placeholders})", ids
            ).fetchall()
            return [self._to_document(row) for row in rows]
        except sqlite3.Error as exc:
            logger.error("Failed to read %s by ids: %s", self.collection.table, exc)
            raise StorageError(f"{self.collection.table} read failed") from exc
        finally:
            conn.close()

    def find(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        limit: int = 100,
        offset: int = 0,
        sort_by: str = "id",
        order: str = "asc",
    ) -> List[Document]:
        """Return documents matching ``filters`` with sorting and pagination.

        Unknown ``sort_by`` values fall back to ``id`` and unknown ``order``
        values fall back to ascending.
        """
        where, params = self._where(filters)
        if sort_by not in self.collection.sortable_fields:
            sort_by = "id"
        order = order.lower() if order else "asc"
        if order not in {"asc", "desc"}:
            order = "asc"
        query = (
            f"SELECT * FROM {self.collection.table}{where} "
            f"ORDER BY {sort_by} {order}, id ASC LIMIT ? OFFSET ?"
        )
        conn = get_connection(self.database_path)
        try:
            rows = conn.execute(query, (*params, limit, offset)).fetchall()
            return [self._to_document(row) for row in rows]
        except sqlite3.Error as exc:
            logger.error("Failed to query %s: %s", self.collection.table, exc)
            raise StorageError(f"{self.collection.table} query failed") from exc
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def insert_one(self, values: Mapping[str, Any]) -> Document:
        """Insert a new document and return it as stored."""
        document: Document = {"id": new_id()}
        for name in self.collection.scalar_fields:
            document[name] = values.get(name)
        for name in self.collection.set_fields:
            document[name] = set(values.get(name) or ())
        names = ["id", *self.collection.scalar_fields, *self.collection.set_fields]
        placeholders = ", ".join("?" for _ in names)
        conn = get_connection(self.database_path)
        try:
            conn.execute(
                f"INSERT INTO {self.collection.table} ({', '.join(names)}) VALUES ({placeholders})",
                self._column_values(document, names),
            )
            conn.commit()
            row = conn.execute(
                f"SELECT * FROM {self.collection.table} WHERE id = ?", (document["id"],)
            ).fetchone()
            return self._to_document(row)
        except sqlite3.IntegrityError as exc:
            raise DuplicateKeyError(f"{self.collection.table} insert violates a unique index") from exc
        except sqlite3.Error as exc:
            logger.error("Failed to insert into %s: %s", self.collection.table, exc)
            raise StorageError(f"{self.collection.table} insert failed") from exc
        finally:
            conn.close()

    def update_one(self, document_id: str, patch: Patch) -> Optional[Document]:
        """Atomically apply ``patch`` to one document.

        Returns the document after the update, or ``None`` when no document
        has this id.
        """
        self._check_patch(patch)
        conn = get_connection(self.database_path)
        try:
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute(
                f"SELECT * FROM {self.collection.table} WHERE id = ?", (document_id,)
            ).fetchone()
            if row is None:
                conn.rollback()
                return None
            document = self._to_document(row)
            if patch.apply(document):
                self._write(conn.cursor(), document, patch.fields())
            conn.commit()
            row = conn.execute(
                f"SELECT * FROM {self.collection.table} WHERE id = ?", (document_id,)
            ).fetchone()
            return self._to_document(row)
        except sqlite3.IntegrityError as exc:
            conn.rollback()
            raise DuplicateKeyError(f"{self.collection.table} update violates a unique index") from exc
        except sqlite3.Error as exc:
            conn.rollback()
            logger.error("Failed to update %s %s: %s", self.collection.table, document_id, exc)
            raise StorageError(f"{self.collection.table} update failed") from exc
        finally:
            conn.close()

    def update_many(self, filters: Mapping[str, Any], patch: Patch) -> int:
        """Apply ``patch`` to every document matching ``filters``.

        All matching documents are updated in one transaction.  Returns the
        number of documents that actually changed.
        """
        self._check_patch(patch)
        where, params = self._where(filters)
        conn = get_connection(self.database_path)
        try:
            conn.execute("BEGIN IMMEDIATE")
            rows = conn.execute(f"SELECT * FROM {self.collection.table}{where}", params).fetchall()
            cursor = conn.cursor()
            modified = 0
            for row in rows:
                document = self._to_document(row)
                if patch.apply(document):
                    self._write(cursor, document, patch.fields())
                    modified += 1
            conn.commit()
            return modified
        except sqlite3.IntegrityError as exc:
            conn.rollback()
            raise DuplicateKeyError(f"{self.collection.table} update violates a unique index") from exc
        except sqlite3.Error as exc:
            conn.rollback()
            logger.error("Bulk update on %s failed: %s", self.collection.table, exc)
            raise StorageError(f"{self.collection.table} DB update error") from exc
        finally:
            conn.close()

    def delete_one(self, document_id: str) -> bool:
        conn = get_connection(self.database_path)
        try:
            cursor = conn.execute(
                f"DELETE FROM {self.collection.table} WHERE id = ?", (document_id,)
            )
            conn.commit()
            return cursor.rowcount > 0
        except sqlite3.Error as exc:
            logger.error("Failed to delete %s %s: %s", self.collection.table, document_id, exc)
            raise StorageError(f"{self.collection.table} delete failed") from exc
        finally:
            conn.close()
