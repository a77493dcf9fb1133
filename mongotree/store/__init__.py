"""
mongotree Stores

Collaborator interfaces plus MongoDB/GridFS and in-memory implementations.
"""
from mongotree.store.base import BlobStore, NamespaceStore, PointUpdate
from mongotree.store.memory import MemoryBlobStore, MemoryNamespaceStore
from mongotree.store.mongo import GridFSBlobStore, MongoNamespaceStore

__all__ = [
    "BlobStore",
    "NamespaceStore",
    "PointUpdate",
    "MemoryBlobStore",
    "MemoryNamespaceStore",
    "GridFSBlobStore",
    "MongoNamespaceStore",
]
