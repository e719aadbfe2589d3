from __future__ import annotations

import logging
import re
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator

from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from symptom_core.errors import CleanupError, UploadTooLarge, ValidationError

logger = logging.getLogger(__name__)

_CHUNK_BYTES = 1024 * 1024
_SAFE_EXTENSION_RE = re.compile(r"^\.[a-z0-9]{1,10}$")


@dataclass
class TemporaryFile:
    path: Path
    released: bool = False

    @property
    def exists(self) -> bool:
        return self.path.is_file()


def _extension_from_filename(file_name: str | None) -> str:
    # Client-supplied; anything unusual is dropped rather than written to disk.
    ext = Path(file_name or "").suffix.lower().strip()
    return ext if _SAFE_EXTENSION_RE.fullmatch(ext) else ""


class TempFileStore:
    """Owns uploaded files from the moment they hit disk until they are consumed.

    Whoever holds a TemporaryFile must hand it back through
    ``release_guaranteed`` (or use ``scoped``) on every exit path.
    """

    def __init__(self, upload_dir: Path, *, max_upload_bytes: int) -> None:
        self.upload_dir = Path(upload_dir)
        self.max_upload_bytes = max_upload_bytes

    def ensure_directory(self) -> Path:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        return self.upload_dir

    def unique_path(self, field_name: str, original_name: str | None) -> Path:
        ext = _extension_from_filename(original_name)
        return self.upload_dir / f"{field_name}-{uuid.uuid4().hex}{ext}"

    async def save_upload(self, upload: UploadFile, *, field_name: str) -> Path:
        self.ensure_directory()
        target = self.unique_path(field_name, upload.filename)
        written = 0
        handle: BinaryIO | None = None
        try:
            handle = await run_in_threadpool(target.open, "wb")
            while True:
                chunk = await upload.read(_CHUNK_BYTES)
                if not chunk:
                    break
                written += len(chunk)
                if written > self.max_upload_bytes:
                    limit_mb = self.max_upload_bytes / (1024 * 1024)
                    raise UploadTooLarge(f"Le fichier téléchargé dépasse la limite de {limit_mb:g} Mo.")
                await run_in_threadpool(handle.write, chunk)
            await run_in_threadpool(handle.close)
            if written == 0:
                raise ValidationError(f'Le fichier téléchargé dans le champ "{field_name}" est vide.')
        except BaseException:
            if handle is not None:
                handle.close()
            self.release_guaranteed(TemporaryFile(path=target))
            raise
        logger.info("stored upload %s (%d bytes)", target.name, written, extra={"file_path": str(target)})
        return target

    def acquire(self, path: str | Path) -> TemporaryFile:
        return TemporaryFile(path=Path(path))

    def release_guaranteed(self, handle: TemporaryFile) -> None:
        if handle.released:
            return
        handle.released = True
        try:
            handle.path.unlink()
        except FileNotFoundError:
            logger.debug("temporary file already gone: %s", handle.path)
        except (OSError, ValueError) as exc:
            error = CleanupError(f"Failed to delete temporary file {handle.path}: {exc}")
            logger.error("%s", error, extra={"file_path": str(handle.path)})

    @contextmanager
    def scoped(self, path: str | Path) -> Iterator[TemporaryFile]:
        handle = self.acquire(path)
        try:
            yield handle
        finally:
            self.release_guaranteed(handle)
