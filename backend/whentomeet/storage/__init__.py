"""
Blob store backends: memory, Redis, flat JSON files, SQL.
Each backend persists JSON differently but exposes the same get/set contract
so the slot and roster stores stay backend-agnostic.
"""
from whentomeet.storage.base import BlobStore
from whentomeet.storage.registry import build_blob_store, list_backends

__all__ = [
    "BlobStore",
    "build_blob_store",
    "list_backends",
]
