"""
mongotree - Folder Model

A folder document stored in the folder collection. The root folder has no
document; it is identified by the configured root name only.
"""
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field

from mongotree.models.base import CustomMetadata


class Folder(BaseModel):
    """
    Represents a folder in the namespace.

    Stored shape::

        {"_id": <ObjectId>, "name": <str>, "path": <str>,
         "parentDirectory": <str>, "customMetadata": {...}}
    """
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: Any = Field(default=None, alias="_id")
    name: str
    path: str
    parent_directory: str = Field(alias="parentDirectory")
    custom_metadata: CustomMetadata = Field(default_factory=dict, alias="customMetadata")

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Folder":
        return cls.model_validate(doc)

    def to_document(self) -> Dict[str, Any]:
        """Stored shape; `_id` is omitted until the store assigns one."""
        if self.id is None:
            return self.model_dump(by_alias=True, exclude={"id"})
        return self.model_dump(by_alias=True)

    def __str__(self) -> str:
        return f"Folder: {self.name} ({self.path})"
