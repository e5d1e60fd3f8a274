"""
Account Locking Module

Per-account mutual exclusion for balance read-modify-write sequences.
Locks for several accounts are always taken in sorted id order, so two
transfers running in opposite directions over the same pair cannot deadlock.
A lock stays registered only while some thread holds or waits on it.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class AccountLocks:
    """Registry of one lock per account id, created on first use"""

    def __init__(self):
        self._entries: Dict[str, _Entry] = {}
        self._registry_lock = threading.Lock()

    def _checkout(self, account_ids: List[str]) -> List[_Entry]:
        with self._registry_lock:
            entries = []
            for account_id in account_ids:
                entry = self._entries.get(account_id)
                if entry is None:
                    entry = _Entry()
                    self._entries[account_id] = entry
                entry.users += 1
                entries.append(entry)
            return entries

    def _checkin(self, account_ids: List[str]) -> None:
        with self._registry_lock:
            for account_id in account_ids:
                entry = self._entries[account_id]
                entry.users -= 1
                if entry.users == 0:
                    del self._entries[account_id]

    @contextmanager
    def hold(self, *account_ids: str) -> Iterator[None]:
        """Hold the locks for every given account for the duration of the block"""
        ordered: List[str] = sorted(set(account_ids), key=str)
        entries = self._checkout(ordered)
        acquired: List[threading.Lock] = []
        try:
            for entry in entries:
                entry.lock.acquire()
                acquired.append(entry.lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
            self._checkin(ordered)

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._entries)
