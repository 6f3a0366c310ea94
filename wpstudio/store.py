"""
Almacén de historial y conexiones guardadas
Guarda documentos JSON por usuario en SQLite: users/{uid}/history y users/{uid}/connections
"""

import os
import json
import uuid
import sqlite3
import logging
from datetime import datetime, timezone
from typing import List, Optional

from . import config
from .exceptions import StorePermissionError
from .models import HistoryEvent, WpConnection

logger = logging.getLogger(__name__)

HISTORY = "history"
CONNECTIONS = "connections"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class DocumentStore:
    """Almacén de documentos por usuario"""

    def __init__(self, path: Optional[str] = None):
        self.path = path or config.STORE_PATH
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        self._ensure_table()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.path)

    def _ensure_table(self):
        con = self._connect()
        try:
            con.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    path TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    collection TEXT NOT NULL,
                    data TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
            con.execute(
                "CREATE INDEX IF NOT EXISTS idx_documents_user ON documents(user_id, collection, updated_at)"
            )
            con.commit()
        finally:
            con.close()

    @staticmethod
    def collection_path(user_id: str, collection: str) -> str:
        return f"users/{user_id}/{collection}"

    def _write(self, user_id: str, collection: str, doc_id: str, data: dict, updated_at: str,
               operation: str = "create"):
        path = f"{self.collection_path(user_id, collection)}/{doc_id}"
        con = self._connect()
        try:
            con.execute(
                "INSERT OR REPLACE INTO documents (path, user_id, collection, data, updated_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (path, user_id, collection, json.dumps(data, ensure_ascii=False), updated_at),
            )
            con.commit()
        except sqlite3.Error as e:
            raise StorePermissionError(path, operation, data) from e
        finally:
            con.close()

    def _read(self, user_id: str, collection: str, limit: Optional[int] = None) -> List[tuple]:
        query = (
            "SELECT path, data FROM documents WHERE user_id = ? AND collection = ? "
            "ORDER BY updated_at DESC, rowid DESC"
        )
        params: tuple = (user_id, collection)
        if limit is not None:
            query += " LIMIT ?"
            params += (limit,)

        con = self._connect()
        try:
            rows = con.execute(query, params).fetchall()
        except sqlite3.Error as e:
            raise StorePermissionError(self.collection_path(user_id, collection), "list") from e
        finally:
            con.close()
        return [(row[0].rsplit('/', 1)[-1], json.loads(row[1])) for row in rows]

    # === Historial ===
    def add_history_event(self, user_id: str, event: HistoryEvent) -> Optional[HistoryEvent]:
        """Guarda un evento con la hora del servidor. Sin usuario no hace nada"""
        if not user_id:
            logger.error("No se puede guardar el evento: el usuario no ha iniciado sesión")
            return None

        doc_id = uuid.uuid4().hex
        timestamp = _now()
        data = event.model_dump(exclude={"id", "timestamp"}, exclude_none=True)
        data["timestamp"] = timestamp

        self._write(user_id, HISTORY, doc_id, data, timestamp)
        return HistoryEvent(id=doc_id, **data)

    def list_history(self, user_id: str, limit: int = 50) -> List[HistoryEvent]:
        """Eventos del usuario, del más reciente al más antiguo"""
        return [HistoryEvent(id=doc_id, **data) for doc_id, data in self._read(user_id, HISTORY, limit)]

    # === Conexiones ===
    def add_or_update_connection(self, user_id: str, wp_url: str, wp_username: str):
        """
        Guarda la conexión o actualiza last_used si ya existe (misma URL y usuario)

        Es una tarea en segundo plano: los errores se registran pero no se propagan.
        """
        if not user_id:
            return

        try:
            doc_id = None
            for existing_id, data in self._read(user_id, CONNECTIONS):
                if data.get("wp_url") == wp_url and data.get("wp_username") == wp_username:
                    doc_id = existing_id
                    break

            last_used = _now()
            data = {"wp_url": wp_url, "wp_username": wp_username, "last_used": last_used}
            self._write(user_id, CONNECTIONS, doc_id or uuid.uuid4().hex, data, last_used,
                        operation="update" if doc_id else "create")
        except StorePermissionError as e:
            logger.error(f"❌ Error guardando conexión: {e}")

    def list_connections(self, user_id: str) -> List[WpConnection]:
        """Conexiones del usuario, la última usada primero"""
        return [WpConnection(id=doc_id, **data) for doc_id, data in self._read(user_id, CONNECTIONS)]
