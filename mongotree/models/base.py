"""
mongotree - Shared model types

Metadata value types and the reserved metadata keys.
"""
from datetime import datetime
from typing import Any, Dict, List, Union

# Closed set of values a custom metadata bag may hold
MetadataValue = Union[None, bool, int, float, str, datetime, List[Any], Dict[str, Any]]
CustomMetadata = Dict[str, MetadataValue]

# Keys maintained by the tree itself; never writable through metadata updates
PATH_KEY = "path"
PARENT_DIRECTORY_KEY = "parentDirectory"
IS_LATEST_KEY = "isLatest"
RESERVED_KEYS = (PATH_KEY, PARENT_DIRECTORY_KEY, IS_LATEST_KEY)
