"""Cache-aware transform pipeline.

One run per source unit::

    read source -> checksum -> lookup
        hit:  return stored artifact
        miss: generate -> write -> evict stale -> return

Runs sharing a ``(cache dir, source basename)`` key are serialised with an
``asyncio.Lock`` held from lookup to eviction, so overlapping rebuilds of the
same file generate once and never evict each other's artifact. Nothing is
written unless generation fully succeeded, and nothing is evicted unless the
write fully succeeded.
"""
from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple, Union

from .cache import DEFAULT_EXTENSION, artifact_path, cache_dir_for
from .checksum import checksum
from .errors import GenerationError, SourceUnreadable, StorageError
from .generator import GeneratorAdapter, clean_generation, component_name
from .schema import PipelineState, TransformOutcome
from .store import CacheStore

logger = logging.getLogger(__name__)

StoreFactory = Callable[[Path], CacheStore]


class TransformPipeline:
    def __init__(
        self,
        generator: GeneratorAdapter,
        system_prompt: Optional[str] = None,
        transform_prompt: Optional[Callable[[str], str]] = None,
        extension: str = DEFAULT_EXTENSION,
        store_factory: StoreFactory = CacheStore,
    ) -> None:
        self.generator = generator
        self.system_prompt = system_prompt
        self.transform_prompt = transform_prompt or (lambda text: text)
        self.extension = extension
        self.store_factory = store_factory
        self._stores: Dict[Path, CacheStore] = {}
        self._locks: Dict[Tuple[Path, str], asyncio.Lock] = {}
        self._locks_loop: Optional[asyncio.AbstractEventLoop] = None

    def store_for(self, source_path: Union[str, Path]) -> CacheStore:
        cache_dir = cache_dir_for(source_path)
        store = self._stores.get(cache_dir)
        if store is None:
            store = self._stores[cache_dir] = self.store_factory(cache_dir)
        return store

    def _lock_for(self, cache_dir: Path, source_name: str) -> asyncio.Lock:
        # locks bind to the loop they were contended on; start fresh per loop
        loop = asyncio.get_running_loop()
        if loop is not self._locks_loop:
            self._locks = {}
            self._locks_loop = loop
        key = (cache_dir, source_name)
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    def _enter(self, source: Path, state: PipelineState) -> None:
        logger.debug("%s: %s", source, state.value)

    async def run(self, source_path: Union[str, Path]) -> TransformOutcome:
        """Return the generated code for ``source_path``, generating on a miss.

        Raises SourceUnreadable, GenerationError or StorageError.
        """
        source = Path(source_path)
        self._enter(source, PipelineState.START)
        try:
            raw = source.read_bytes()
        except OSError as e:
            raise SourceUnreadable(f"Cannot read prompt source {source}: {e}") from e

        digest = checksum(raw)
        target = artifact_path(source, digest, self.extension)
        store = self.store_for(source)
        self._enter(source, PipelineState.CHECKSUM_KNOWN)

        async with self._lock_for(store.directory.absolute(), source.name):
            try:
                await store.ensure_directory()
                cached = await store.lookup(target)
            except StorageError:
                logger.error("Storage failure for %s (%s)", source, PipelineState.STORAGE_FAILED.value)
                raise
            if cached is not None:
                self._enter(source, PipelineState.CACHE_HIT)
                logger.info("Using cached component: %s %s", source, target)
                return TransformOutcome(
                    source_path=str(source),
                    checksum=digest,
                    artifact_path=str(target),
                    code=cached,
                    cached=True,
                    latency_s=0.0,
                    state=PipelineState.CACHE_HIT,
                )

            self._enter(source, PipelineState.CACHE_MISS)
            logger.info("Cache miss for %s, generating", source)
            try:
                text = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise SourceUnreadable(f"Prompt source {source} is not valid UTF-8: {e}") from e
            try:
                prompt = self.transform_prompt(text)
            except Exception as e:
                logger.error("Prompt transform failed for %s (%s)", source, PipelineState.GENERATION_FAILED.value)
                raise GenerationError(f"Prompt transform failed for {source}: {e}") from e

            self._enter(source, PipelineState.GENERATING)
            start = time.time()
            try:
                reply = await self.generator.generate(prompt, component_name(source), self.system_prompt)
            except GenerationError:
                logger.error("Generation failed for %s (%s)", source, PipelineState.GENERATION_FAILED.value)
                raise
            except Exception as e:
                logger.error("Generation failed for %s (%s)", source, PipelineState.GENERATION_FAILED.value)
                raise GenerationError(f"Generation failed for {source}: {e}") from e
            elapsed = time.time() - start
            code = clean_generation(reply)
            self._enter(source, PipelineState.GENERATED)

            self._enter(source, PipelineState.WRITE_CACHE)
            try:
                await store.write(target, code)
            except StorageError:
                logger.error("Storage failure for %s (%s)", source, PipelineState.STORAGE_FAILED.value)
                raise

            self._enter(source, PipelineState.EVICT)
            evicted = await store.evict_stale(source.name, target)

        return TransformOutcome(
            source_path=str(source),
            checksum=digest,
            artifact_path=str(target),
            code=code,
            cached=False,
            latency_s=elapsed,
            state=PipelineState.GENERATED,
            evicted=[str(p) for p in evicted],
        )


__all__ = ["TransformPipeline"]
