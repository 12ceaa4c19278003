from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from enum import Enum


class PipelineState(str, Enum):
    START = "start"
    CHECKSUM_KNOWN = "checksum_known"
    CACHE_HIT = "cache_hit"
    CACHE_MISS = "cache_miss"
    GENERATING = "generating"
    GENERATED = "generated"
    WRITE_CACHE = "write_cache"
    EVICT = "evict"
    GENERATION_FAILED = "generation_failed"
    STORAGE_FAILED = "storage_failed"


class CacheEntry(BaseModel):
    path: str
    checksum: str
    source_name: str
    content: str
    created_at: datetime  # file mtime, diagnostics only


class TransformOutcome(BaseModel):
    """Result of one pipeline run for a single source unit."""
    source_path: str
    checksum: str
    artifact_path: str
    code: str
    cached: bool
    latency_s: float
    state: PipelineState = PipelineState.GENERATED  # CACHE_HIT or GENERATED
    evicted: List[str] = []


class TransformResult(BaseModel):
    """Value handed back to the host bundler's transform hook."""
    code: str
    map: Optional[dict] = None


class BuildRecord(BaseModel):
    source_path: str
    status: str  # cached|generated|failed
    checksum: Optional[str] = None
    artifact_path: Optional[str] = None
    latency_s: float = 0.0
    error: Optional[str] = None


class BuildSummary(BaseModel):
    root: str
    started_at: datetime
    model: Optional[str]
    records: List[BuildRecord]
    n_cached: int
    n_generated: int
    n_failed: int
