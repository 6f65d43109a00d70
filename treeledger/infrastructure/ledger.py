"""
Infrastructure layer: ledger substrate for the registries.

The ledger provides three things to every call:
- an authenticated caller identity
- a monotonic logical timestamp
- atomic key-value storage with read-after-write consistency

Calls are serialized. Writes are staged in a transaction and only reach the
store when the operation returns without raising a RegistryError.
"""
import copy
import logging
import threading
import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Iterator, List, Literal, Optional, Tuple, Union

from treeledger.domain.errors import ErrorKind, RegistryError

logger = logging.getLogger(__name__)


# ============================================================
# Storage
# ============================================================

class LedgerStore(ABC):
    """Namespaced key-value storage backing the ledger."""

    @abstractmethod
    def get(self, namespace: str, key: Hashable) -> Optional[Any]:
        ...

    @abstractmethod
    def put(self, namespace: str, key: Hashable, value: Any) -> None:
        ...

    @abstractmethod
    def keys(self, namespace: str) -> List[Hashable]:
        ...


class InMemoryLedgerStore(LedgerStore):
    """Process-local store. Values are kept as-is."""

    def __init__(self):
        self._maps: Dict[str, Dict[Hashable, Any]] = {}

    def get(self, namespace: str, key: Hashable) -> Optional[Any]:
        return self._maps.get(namespace, {}).get(key)

    def put(self, namespace: str, key: Hashable, value: Any) -> None:
        self._maps.setdefault(namespace, {})[key] = value

    def keys(self, namespace: str) -> List[Hashable]:
        return list(self._maps.get(namespace, {}))


# ============================================================
# Logical time
# ============================================================

class LedgerClock(ABC):
    """Source of logical time in seconds."""

    @abstractmethod
    def now(self) -> int:
        ...


class SystemClock(LedgerClock):
    """Wall clock truncated to whole seconds."""

    def now(self) -> int:
        return int(time.time())


class ManualClock(LedgerClock):
    """Clock driven explicitly, for tests and replays."""

    def __init__(self, start: int = 0):
        self.current = start

    def now(self) -> int:
        return self.current

    def advance(self, seconds: int) -> int:
        self.current += seconds
        return self.current


# ============================================================
# Transactions and call context
# ============================================================

class Transaction:
    """
    Write set staged over a store until commit.

    Values are copied on the way in and out, so records handed to callers
    never alias stored state.
    """

    def __init__(self, store: LedgerStore):
        self._store = store
        self._writes: Dict[Tuple[str, Hashable], Any] = {}

    def get(self, namespace: str, key: Hashable) -> Optional[Any]:
        if (namespace, key) in self._writes:
            return copy.deepcopy(self._writes[(namespace, key)])
        return copy.deepcopy(self._store.get(namespace, key))

    def put(self, namespace: str, key: Hashable, value: Any) -> None:
        self._writes[(namespace, key)] = copy.deepcopy(value)

    def keys(self, namespace: str) -> List[Hashable]:
        keys = self._store.keys(namespace)
        seen = set(keys)
        for ns, key in self._writes:
            if ns == namespace and key not in seen:
                keys.append(key)
                seen.add(key)
        return keys

    @property
    def write_count(self) -> int:
        return len(self._writes)

    def commit(self) -> None:
        for (namespace, key), value in self._writes.items():
            self._store.put(namespace, key, value)
        self._writes.clear()


@dataclass(frozen=True)
class CallContext:
    """What a registry operation sees of the ledger during one call."""
    sender: str
    time: int
    tx: Transaction

    def get(self, namespace: str, key: Hashable) -> Optional[Any]:
        return self.tx.get(namespace, key)

    def put(self, namespace: str, key: Hashable, value: Any) -> None:
        self.tx.put(namespace, key, value)

    def exists(self, namespace: str, key: Hashable) -> bool:
        return self.tx.get(namespace, key) is not None

    def keys(self, namespace: str) -> List[Hashable]:
        return self.tx.keys(namespace)


# ============================================================
# Results
# ============================================================

@dataclass(frozen=True)
class Ok:
    """Successful call outcome."""
    value: Any
    type: Literal["ok"] = "ok"

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """Rejected call outcome."""
    kind: ErrorKind
    message: str
    type: Literal["err"] = "err"

    @property
    def is_ok(self) -> bool:
        return False


Result = Union[Ok, Err]


# ============================================================
# Ledger
# ============================================================

class Ledger:
    """
    Serializing call executor over a store and a clock.

    Logical time never decreases across calls, even if the clock does.
    """

    def __init__(
        self,
        store: Optional[LedgerStore] = None,
        clock: Optional[LedgerClock] = None,
    ):
        self.store = store or InMemoryLedgerStore()
        self.clock = clock or SystemClock()
        self._lock = threading.RLock()
        self._last_time = 0

    def _next_time(self) -> int:
        self._last_time = max(self._last_time, self.clock.now())
        return self._last_time

    @contextmanager
    def transaction(self, sender: str) -> Iterator[CallContext]:
        """
        Run one call atomically.

        Commits staged writes on success; discards them if the body raises.
        """
        with self._lock:
            ctx = CallContext(sender=sender, time=self._next_time(), tx=Transaction(self.store))
            yield ctx
            logger.debug(f"Committing {ctx.tx.write_count} writes for {sender or 'anonymous'}")
            ctx.tx.commit()

    def call(
        self,
        sender: str,
        operation: Callable[..., Any],
        *args,
        **kwargs,
    ) -> Result:
        """
        Execute a registry operation on behalf of ``sender``.

        Args:
            sender: Authenticated caller identity
            operation: Registry method taking a CallContext first
            *args: Positional operation arguments
            **kwargs: Keyword operation arguments

        Returns:
            Ok with the operation's return value, or Err with the error kind
        """
        try:
            with self.transaction(sender) as ctx:
                value = operation(ctx, *args, **kwargs)
        except RegistryError as e:
            logger.info(f"Rejected {getattr(operation, '__name__', operation)} from {sender or 'anonymous'}: "
                        f"{e.kind.value} - {e.message}")
            return Err(kind=e.kind, message=e.message)
        return Ok(value=value)

    def query(self, operation: Callable[..., Any], *args, **kwargs) -> Result:
        """Execute a read-only operation without a caller identity."""
        return self.call("", operation, *args, **kwargs)


# Singleton instance
_ledger: Optional[Ledger] = None


def get_ledger() -> Ledger:
    """
    Get or create the singleton ledger instance.

    Returns:
        Ledger instance
    """
    global _ledger
    if _ledger is None:
        _ledger = Ledger()
    return _ledger
