from __future__ import annotations

import hashlib
from dataclasses import dataclass
from functools import cached_property

from ..core.errors import InfrastructureError
from .processing import FileMetadata


@dataclass(frozen=True)
class UploadedFile:
    """A file handed to the core: bytes plus the browser-side metadata."""

    name: str
    data: bytes
    mime_type: str = "application/pdf"
    last_modified: int = 0  # epoch ms

    @property
    def size(self) -> int:
        return len(self.data)

    @cached_property
    def sha256(self) -> str:
        try:
            return hashlib.sha256(self.data).hexdigest()
        except (TypeError, ValueError) as e:
            raise InfrastructureError(f"Cannot hash file {self.name!r}: {e}") from e

    def metadata(self, *, with_hash: bool = False) -> FileMetadata:
        return FileMetadata(
            name=self.name,
            size=self.size,
            mime_type=self.mime_type,
            last_modified=self.last_modified,
            hash=self.sha256 if with_hash else None,
        )
