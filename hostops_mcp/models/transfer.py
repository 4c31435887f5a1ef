"""File transfer data models."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ContentEncoding(str, Enum):
    """How file content is represented in requests and responses."""

    BASE64 = "base64"
    TEXT = "text"


@dataclass(frozen=True)
class UploadResult:
    """Result of a file upload."""

    path: str
    size: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to the tool response shape."""
        return {"path": self.path, "size": self.size}


@dataclass(frozen=True)
class DownloadResult:
    """Result of a file download."""

    content: str
    path: str
    size: int
    permissions: str
    modified_time: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to the tool response shape."""
        return {
            "content": self.content,
            "path": self.path,
            "size": self.size,
            "permissions": self.permissions,
            "modifiedTime": self.modified_time,
        }
