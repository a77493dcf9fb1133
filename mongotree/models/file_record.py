"""
mongotree - FileRecord Model

One stored version of a file: the GridFS files document of the bucket.
"""
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from mongotree.models.base import (
    CustomMetadata,
    IS_LATEST_KEY,
    PARENT_DIRECTORY_KEY,
    PATH_KEY,
    RESERVED_KEYS,
)


class FileRecord(BaseModel):
    """
    A single version of a file.

    Stored shape::

        {"_id": <ObjectId>, "length": <int>, "chunkSize": <int>,
         "uploadDate": <datetime>, "filename": <str>,
         "metadata": {"path": <str>, "parentDirectory": <str>,
                      "isLatest": <bool>, ...custom}}

    `_id` doubles as the content reference into the blob store.
    """
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True, extra="ignore")

    id: Any = Field(alias="_id")
    filename: str
    length: int = 0
    chunk_size: Optional[int] = Field(default=None, alias="chunkSize")
    upload_date: Optional[datetime] = Field(default=None, alias="uploadDate")
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "FileRecord":
        return cls.model_validate(doc)

    @property
    def path(self) -> str:
        return self.metadata.get(PATH_KEY, "")

    @property
    def parent_directory(self) -> str:
        return self.metadata.get(PARENT_DIRECTORY_KEY, "")

    @property
    def is_latest(self) -> bool:
        return bool(self.metadata.get(IS_LATEST_KEY, False))

    @property
    def custom_metadata(self) -> CustomMetadata:
        return {k: v for k, v in self.metadata.items() if k not in RESERVED_KEYS}

    def __str__(self) -> str:
        marker = " (latest)" if self.is_latest else ""
        return f"File: {self.filename} ({self.path}){marker}"
