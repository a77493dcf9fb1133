"""
File tree error hierarchy.

Hierarchy:
    FileTreeError
    ├── InvalidArgumentError    - Unusable input (bad stream, unknown output type)
    ├── InvalidCharacterError   - Name contains a forbidden character
    ├── AlreadyExistsError      - Name collision in the target directory
    ├── NotFoundError           - Folder or file path does not resolve
    ├── ReservedFieldError      - path/parentDirectory/isLatest touched via metadata update
    ├── CannotRenameRootError   - Rename attempted on the root
    └── CannotDeleteCWDError    - Delete attempted on the current working directory

Messages are stable; callers and tests match on them.
"""
from typing import Any, Dict, Optional


class FileTreeError(Exception):
    """Base error for every precondition the file tree enforces."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.message = message
        self.path = path
        self.error_type = self.__class__.__name__
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": self.error_type,
            "message": self.message,
            "path": self.path,
        }


class InvalidArgumentError(FileTreeError):
    pass


class InvalidCharacterError(FileTreeError):
    """Raised with the first forbidden character found in a name."""

    def __init__(self, character: str, kind: str = "folder"):
        self.character = character
        self.kind = kind
        super().__init__(f'Character "{character}" cannot be used as part of a {kind} name')

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["character"] = self.character
        return data


class AlreadyExistsError(FileTreeError):
    pass


class NotFoundError(FileTreeError):
    pass


class ReservedFieldError(FileTreeError):
    pass


class CannotRenameRootError(FileTreeError):
    def __init__(self, path: Optional[str] = None):
        super().__init__("Cannot rename root directory of the file tree", path)


class CannotDeleteCWDError(FileTreeError):
    def __init__(self, current_working_directory: str):
        super().__init__(
            f"Cannot delete current working directory ({current_working_directory})",
            current_working_directory,
        )
