from abc import ABC, abstractmethod
from typing import BinaryIO

from app.core.config import Settings


class StorageBackend(ABC):
    @abstractmethod
    async def put(self, key: str, body: BinaryIO | bytes, content_type: str | None = None) -> str:
        """Store file; return path or URI."""
        ...

    @abstractmethod
    async def get(self, key: str) -> bytes:
        """Retrieve file bytes. Raise FileNotFoundError if the key is absent."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete file."""
        ...


def get_storage(settings: Settings) -> StorageBackend:
    from app.storage.local import LocalStorage
    return LocalStorage(settings.upload_dir)
