"""Local disk storage for thumbnails, design documents and uploaded assets."""

from __future__ import annotations

import json
import random
import string
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

import structlog

from ..core.config import get_settings
from ..domain.files import FileKind, StoredFile

logger = structlog.get_logger(__name__)

THUMBNAILS_DIR = "thumbnails"
STORAGE_DIRECTORIES = (THUMBNAILS_DIR, "designs", "images", "files")


class StorageError(RuntimeError):
    """Raised when a file cannot be written, read or removed."""


class InvalidFilenameError(StorageError):
    """Raised when a client supplied filename is not a plain file name."""


def now_ms() -> int:
    return int(time.time() * 1000)


def random_suffix(length: int = 9) -> str:
    alphabet = string.digits + string.ascii_lowercase
    return "".join(random.choice(alphabet) for _ in range(length))


def validate_filename(filename: str) -> str:
    """Return ``filename`` unchanged when it names a file directly inside a directory."""

    if not filename:
        raise InvalidFilenameError("Filename is required")
    if filename in {".", ".."} or "/" in filename or "\\" in filename or "\x00" in filename:
        raise InvalidFilenameError(f"Invalid filename: {filename}")
    return filename


class LocalStorageService:
    """Filesystem store rooted at ``uploads_root`` and published under ``public_prefix``."""

    def __init__(self, *, root: Path, public_prefix: str = "/uploads") -> None:
        self._root = root
        self._public_prefix = public_prefix.rstrip("/")
        self.ensure_directories()

    @property
    def root(self) -> Path:
        return self._root

    def ensure_directories(self) -> None:
        for name in STORAGE_DIRECTORIES:
            (self._root / name).mkdir(parents=True, exist_ok=True)

    def path_for(self, directory: str, filename: str) -> Path:
        return self._root / directory / validate_filename(filename)

    def public_path(self, directory: str, filename: str) -> str:
        return f"{self._public_prefix}/{directory}/{filename}"

    def exists(self, directory: str, filename: str) -> bool:
        return self.path_for(directory, filename).is_file()

    def save_bytes(self, directory: str, filename: str, content: bytes) -> Path:
        path = self.path_for(directory, filename)
        try:
            path.write_bytes(content)
        except OSError as exc:
            raise StorageError(f"Unable to write {directory}/{filename}: {exc}") from exc
        logger.info("storage.saved", directory=directory, filename=filename, size=len(content))
        return path

    def read_bytes(self, directory: str, filename: str) -> bytes:
        path = self.path_for(directory, filename)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise
        except OSError as exc:
            raise StorageError(f"Unable to read {directory}/{filename}: {exc}") from exc

    def delete(self, directory: str, filename: str) -> bool:
        """Remove a file; returns False when it was already gone."""

        path = self.path_for(directory, filename)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise StorageError(f"Unable to delete {directory}/{filename}: {exc}") from exc
        logger.info("storage.deleted", directory=directory, filename=filename)
        return True

    def delete_public_path(self, public_path: str | None, *, keep: Iterable[str] = ()) -> bool:
        """Delete the file behind a ``/uploads/<dir>/<name>`` URL unless it is listed in ``keep``."""

        if not public_path or public_path in set(keep):
            return False
        location = self.split_public_path(public_path)
        if location is None:
            return False
        directory, filename = location
        try:
            return self.delete(directory, filename)
        except InvalidFilenameError:
            return False

    def copy(self, directory: str, filename: str, new_filename: str) -> bool:
        """Copy a stored file under a new name; returns False when the source is missing."""

        try:
            content = self.read_bytes(directory, filename)
        except FileNotFoundError:
            return False
        self.save_bytes(directory, new_filename, content)
        return True

    def split_public_path(self, public_path: str | None) -> tuple[str, str] | None:
        """Return ``(directory, filename)`` for a ``/uploads/<dir>/<name>`` URL."""

        prefix = f"{self._public_prefix}/"
        if not public_path or not public_path.startswith(prefix):
            return None
        directory, _, filename = public_path[len(prefix):].partition("/")
        if directory not in STORAGE_DIRECTORIES or not filename:
            return None
        return directory, filename

    def save_json(self, filename: str, document: Any) -> int:
        """Write a pretty-printed design document and return its size in bytes."""

        content = json.dumps(document, indent=2, ensure_ascii=False).encode("utf-8")
        self.save_bytes(FileKind.DESIGNS.value, filename, content)
        return len(content)

    def read_json(self, filename: str) -> Any:
        raw = self.read_bytes(FileKind.DESIGNS.value, filename)
        try:
            return json.loads(raw)
        except ValueError as exc:
            raise StorageError(f"Design file {filename} is not valid JSON") from exc

    def list_directory(self, directory: str) -> list[StoredFile]:
        base = self._root / directory
        if not base.is_dir():
            return []
        entries: list[StoredFile] = []
        for path in sorted(base.iterdir()):
            if not path.is_file():
                continue
            stat = path.stat()
            entries.append(
                StoredFile(
                    filename=path.name,
                    size=stat.st_size,
                    created=datetime.utcfromtimestamp(stat.st_ctime),
                    modified=datetime.utcfromtimestamp(stat.st_mtime),
                    path=self.public_path(directory, path.name),
                )
            )
        return entries

    def list_filenames(self, directory: str) -> list[str]:
        base = self._root / directory
        if not base.is_dir():
            return []
        return sorted(path.name for path in base.iterdir() if path.is_file())


def build_storage_service() -> LocalStorageService:
    settings = get_settings()
    return LocalStorageService(root=Path(settings.uploads_root))
