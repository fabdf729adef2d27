"""Process-wide tokenizer registry with per-kind instance caches.

Two cache shapes are used:

- Fixed-identity kinds (whitespace, jieba, tinysegmenter) live in a
  ``OnceSlot``: built lazily, at most one instance is ever retained.
- Model-parameterized kinds (hf, tiktoken) live in a ``KeyedCache``: one
  lock guards the whole model -> instance map of a kind. Callers hold that
  lock while building *and* while tokenizing, so every call to a keyed kind
  is serialized, even across distinct models that are already built. This
  is a known throughput bottleneck, kept because it never changes results.

Cached instances are never rebuilt or invalidated. A build that raises is
not cached, so the next call simply tries again.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
import logging
import threading
import time
from typing import Generic, TypeVar

from bm25_svector.errors import MissingModelParameterError
from bm25_svector.observability.metrics import TOKENIZER_BUILD_SECONDS, TOKENIZER_BUILDS
from bm25_svector.tokenization.backends import BackendFactory, TokenizerBackend, default_backend_factories
from bm25_svector.tokenization.kinds import TokenizerKind


logger = logging.getLogger(__name__)

T = TypeVar("T")


class OnceSlot(Generic[T]):
    """Lazily-initialized single value.

    Concurrent first callers may each run the factory; the first one to
    publish wins and every caller gets that instance. Losers' work is
    discarded, never reused.
    """

    def __init__(self) -> None:
        self._value: T | None = None
        self._lock = threading.Lock()

    def get(self) -> T | None:
        return self._value

    def get_or_init(self, factory: Callable[[], T]) -> T:
        value = self._value
        if value is not None:
            return value
        built = factory()
        with self._lock:
            if self._value is None:
                self._value = built
            return self._value


class KeyedCache(Generic[T]):
    """Insert-once map guarded by a single mutual-exclusion lock."""

    def __init__(self) -> None:
        self._entries: dict[str, T] = {}
        self._lock = threading.Lock()

    @contextmanager
    def acquire(self, key: str, factory: Callable[[str], T]) -> Iterator[T]:
        """Yield the instance for ``key`` while holding the cache lock.

        The lock is released when the block exits, normally or by exception;
        entries inserted before the failure stay intact.
        """
        with self._lock:
            instance = self._entries.get(key)
            if instance is None:
                instance = factory(key)
                self._entries[key] = instance
            yield instance

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class TokenizerRegistry:
    """Owns every tokenizer backend instance and dispatches ``tokenize`` calls.

    Usage:
        registry = TokenizerRegistry()
        registry.tokenize("tiktoken", "cl100k_base", "i want an apple")
        # ['72', '1390', '459', '24149']

    Args:
        factories: Backend factory per kind. Missing kinds fall back to the
            production factories, so tests can replace a single backend.
        hf_revision: Hub revision used by the default HuggingFace factory.
        hf_token: Optional hub token used by the default HuggingFace factory.
    """

    def __init__(
        self,
        factories: Mapping[TokenizerKind, BackendFactory] | None = None,
        *,
        hf_revision: str = "main",
        hf_token: str | None = None,
    ) -> None:
        merged = dict(default_backend_factories(hf_revision=hf_revision, hf_token=hf_token))
        merged.update(factories or {})
        self._factories: dict[TokenizerKind, BackendFactory] = merged
        self._slots: dict[TokenizerKind, OnceSlot[TokenizerBackend]] = {
            kind: OnceSlot() for kind in TokenizerKind if not kind.requires_model
        }
        self._keyed: dict[TokenizerKind, KeyedCache[TokenizerBackend]] = {
            kind: KeyedCache() for kind in TokenizerKind if kind.requires_model
        }

    def tokenize(self, kind: str | TokenizerKind, model: str | None, text: str) -> list[str]:
        """Tokenize ``text`` with the backend identified by ``(kind, model)``.

        Raises:
            UnsupportedTokenizerKindError: ``kind`` names no known backend.
            MissingModelParameterError: a model-parameterized kind got no model.
            ModelLoadError: the model or encoding could not be loaded.
        """
        resolved = TokenizerKind.parse(kind)

        if resolved.requires_model:
            if not model:
                raise MissingModelParameterError(resolved.value)
            cache = self._keyed[resolved]
            with cache.acquire(model, lambda key: self._build(resolved, key)) as backend:
                return backend.tokenize(text)

        backend = self._slots[resolved].get_or_init(lambda: self._build(resolved, None))
        return backend.tokenize(text)

    def cached_keys(self) -> list[tuple[str, str | None]]:
        """Return ``(kind, model)`` pairs whose backend has been built."""
        keys: list[tuple[str, str | None]] = []
        for kind, slot in self._slots.items():
            if slot.get() is not None:
                keys.append((kind.value, None))
        for kind, cache in self._keyed.items():
            keys.extend((kind.value, model) for model in cache.keys())
        return sorted(keys, key=lambda item: (item[0], item[1] or ""))

    def _build(self, kind: TokenizerKind, model: str | None) -> TokenizerBackend:
        factory = self._factories[kind]
        start = time.perf_counter()
        try:
            backend = factory(model)
        except Exception:
            TOKENIZER_BUILDS.labels(kind=kind.value, status="error").inc()
            logger.warning("Failed to build %s tokenizer (model=%s)", kind.value, model, exc_info=True)
            raise
        elapsed = time.perf_counter() - start
        TOKENIZER_BUILDS.labels(kind=kind.value, status="ok").inc()
        TOKENIZER_BUILD_SECONDS.labels(kind=kind.value).observe(elapsed)
        logger.info("Built %s tokenizer (model=%s) in %.3fs", kind.value, model, elapsed)
        return backend


_DEFAULT_REGISTRY: OnceSlot[TokenizerRegistry] = OnceSlot()


def get_default_registry() -> TokenizerRegistry:
    """Return the process-wide registry, configured from settings on first use."""

    def _create() -> TokenizerRegistry:
        from bm25_svector.config import get_settings

        settings = get_settings()
        return TokenizerRegistry(hf_revision=settings.hf_revision, hf_token=settings.hf_token)

    return _DEFAULT_REGISTRY.get_or_init(_create)


def tokenize(kind: str | TokenizerKind, model: str | None, text: str) -> list[str]:
    """Tokenize through the process-wide registry."""
    return get_default_registry().tokenize(kind, model, text)
