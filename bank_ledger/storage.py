"""
Storage Backend Module

Provides the abstract storage interface, the thread-safe in-memory backend and
the repository base class that maps entities onto storage tables. All monetary
values are stored as Decimal strings and every record is copied on the way in
and out, so callers never share an instance with the store.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar
from decimal import Decimal
from datetime import date, datetime
from enum import Enum
import json
import threading
from dataclasses import dataclass, asdict


@dataclass
class StorageRecord:
    """Base class for all mutable stored records"""
    id: str
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage"""
        result = asdict(self)
        for key, value in result.items():
            if isinstance(value, Decimal):
                result[key] = str(value)
            elif isinstance(value, (datetime, date)):
                result[key] = value.isoformat()
            elif isinstance(value, Enum):
                result[key] = value.name
        return result


class StorageInterface(ABC):
    """Abstract interface for storage backends"""

    @abstractmethod
    def save(self, table: str, record_id: str, data: Dict[str, Any]) -> None:
        """Save a record to storage"""
        pass

    @abstractmethod
    def load(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        """Load a record from storage"""
        pass

    @abstractmethod
    def load_all(self, table: str) -> List[Dict[str, Any]]:
        """Load all records from a table"""
        pass

    @abstractmethod
    def delete(self, table: str, record_id: str) -> bool:
        """Delete a record from storage"""
        pass

    @abstractmethod
    def exists(self, table: str, record_id: str) -> bool:
        """Check if a record exists"""
        pass

    @abstractmethod
    def find(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Find records matching filters"""
        pass

    @abstractmethod
    def count(self, table: str) -> int:
        """Count records in table"""
        pass

    @abstractmethod
    def clear_table(self, table: str) -> None:
        """Clear all records from a table"""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close storage connection"""
        pass


class InMemoryStorage(StorageInterface):
    """In-memory storage implementation; process restart discards all data"""

    def __init__(self):
        self._data: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._lock = threading.RLock()

    def _ensure_table(self, table: str) -> None:
        """Ensure table exists"""
        if table not in self._data:
            self._data[table] = {}

    def save(self, table: str, record_id: str, data: Dict[str, Any]) -> None:
        """Save a record to memory, replacing any record with the same id"""
        # Serialize outside the lock; the swap below is the only write
        snapshot = json.loads(json.dumps(data, default=str))
        with self._lock:
            self._ensure_table(table)
            self._data[table][record_id] = snapshot

    def load(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        """Load a record from memory"""
        with self._lock:
            self._ensure_table(table)
            record = self._data[table].get(record_id)
            if record:
                return json.loads(json.dumps(record))
            return None

    def load_all(self, table: str) -> List[Dict[str, Any]]:
        """Load all records from a table in insertion order"""
        with self._lock:
            self._ensure_table(table)
            return [json.loads(json.dumps(record)) for record in self._data[table].values()]

    def delete(self, table: str, record_id: str) -> bool:
        """Delete a record from memory"""
        with self._lock:
            self._ensure_table(table)
            if record_id in self._data[table]:
                del self._data[table][record_id]
                return True
            return False

    def exists(self, table: str, record_id: str) -> bool:
        """Check if a record exists"""
        with self._lock:
            self._ensure_table(table)
            return record_id in self._data[table]

    def find(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Find records whose fields equal every filter value"""
        with self._lock:
            self._ensure_table(table)
            results = []
            for record in self._data[table].values():
                match = True
                for key, value in filters.items():
                    if key not in record or record[key] != value:
                        match = False
                        break
                if match:
                    results.append(json.loads(json.dumps(record)))
            return results

    def count(self, table: str) -> int:
        """Count records in table"""
        with self._lock:
            self._ensure_table(table)
            return len(self._data[table])

    def clear_table(self, table: str) -> None:
        """Clear all records from a table"""
        with self._lock:
            self._data[table] = {}

    def close(self) -> None:
        """Close storage (no-op for in-memory)"""
        pass


T = TypeVar("T")


class Repository(ABC, Generic[T]):
    """
    Maps one entity type onto one storage table.

    Subclasses provide the table name and the dict conversion. Every read
    builds a fresh entity from the stored record.
    """

    table_name: str = ""

    def __init__(self, storage: Optional[StorageInterface] = None):
        self.storage = storage if storage is not None else InMemoryStorage()

    @abstractmethod
    def _to_dict(self, entity: T) -> Dict[str, Any]:
        """Convert entity to a storable dictionary"""

    @abstractmethod
    def _from_dict(self, data: Dict[str, Any]) -> T:
        """Rebuild entity from a stored dictionary"""

    def _key(self, entity: T) -> str:
        return entity.id

    def save(self, entity: T) -> T:
        """Insert or replace the entity keyed by its id"""
        self.storage.save(self.table_name, self._key(entity), self._to_dict(entity))
        return entity

    def find_by_id(self, entity_id: str) -> Optional[T]:
        """Return the entity or None; never raises for unknown ids"""
        if not isinstance(entity_id, str):
            return None
        data = self.storage.load(self.table_name, entity_id)
        if data:
            return self._from_dict(data)
        return None

    def find_all(self) -> List[T]:
        """Snapshot of every stored entity"""
        return [self._from_dict(data) for data in self.storage.load_all(self.table_name)]

    def find_by(self, **filters: Any) -> List[T]:
        """Entities whose stored fields equal the given values"""
        return [self._from_dict(data) for data in self.storage.find(self.table_name, filters)]

    def find_where(self, predicate: Callable[[T], bool]) -> List[T]:
        """Entities matching an arbitrary predicate"""
        return [entity for entity in self.find_all() if predicate(entity)]

    def exists_by_id(self, entity_id: str) -> bool:
        return isinstance(entity_id, str) and self.storage.exists(self.table_name, entity_id)

    def delete_by_id(self, entity_id: str) -> bool:
        return self.storage.delete(self.table_name, entity_id)

    def count(self) -> int:
        return self.storage.count(self.table_name)

    def clear(self) -> None:
        self.storage.clear_table(self.table_name)
