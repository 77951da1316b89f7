from __future__ import annotations

import logging
import time
import uuid
from pathlib import Path
from typing import Iterable, Optional

from itsdangerous import BadSignature, URLSafeTimedSerializer
from werkzeug.utils import secure_filename

from ..core.constants import DEFAULT_SIGNED_URL_SECONDS
from ..core.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

_SALT = "storage"


class LocalFileStorage:
    """Uploaded files on local disk, handed out through signed, expiring URLs."""

    def __init__(self, root: str | Path, *, secret_key: str, url_prefix: str = "/files"):
        self._root = Path(root).resolve()
        self._serializer = URLSafeTimedSerializer(secret_key)
        self._url_prefix = url_prefix.rstrip("/")

    @property
    def root(self) -> Path:
        return self._root

    def _full_path(self, path: str) -> Path:
        full = (self._root / path).resolve()
        if self._root not in full.parents:
            raise ValidationError("Invalid file path")
        return full

    def save(self, upload, *, folder: str = "", allowed_extensions: Optional[Iterable[str]] = None) -> str:
        """Store a werkzeug FileStorage under a generated name, return its relative path."""

        filename = secure_filename(getattr(upload, "filename", "") or "")
        if not filename:
            raise ValidationError("Choose a file to upload")

        ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
        if allowed_extensions is not None and ext not in set(allowed_extensions):
            raise ValidationError("This file type is not allowed")

        name = f"{uuid.uuid4().hex}.{ext}" if ext else uuid.uuid4().hex
        relative = f"{folder.strip('/')}/{name}" if folder else name
        target = self._full_path(relative)
        target.parent.mkdir(parents=True, exist_ok=True)
        upload.save(str(target))
        logger.info("stored upload %s as %s", filename, relative)
        return relative

    def signed_url(self, path: str, *, expires_in: int = DEFAULT_SIGNED_URL_SECONDS) -> str:
        token = self._serializer.dumps({"p": path, "e": int(expires_in)}, salt=_SALT)
        return f"{self._url_prefix}/{token}"

    def resolve(self, token: str, *, now: Optional[float] = None) -> Path:
        try:
            data, signed_at = self._serializer.loads(token, salt=_SALT, return_timestamp=True)
        except BadSignature:
            raise ValidationError("Invalid file link")

        now = time.time() if now is None else now
        if now - signed_at.timestamp() > int(data.get("e", 0)):
            raise ValidationError("This file link has expired")

        full = self._full_path(str(data.get("p") or ""))
        if not full.is_file():
            raise NotFoundError("File not found")
        return full

    def delete(self, path: str) -> bool:
        full = self._full_path(path)
        if not full.exists():
            return False
        full.unlink()
        return True
