"""
Media upload workflow.
"""

from __future__ import annotations

import mimetypes
import os
import random
import string
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, BinaryIO, Callable, Mapping, Protocol

from mastodon_client.exceptions import MediaValidationError, UnknownMimeTypeError

UPLOAD_PREFIX = "mastodonpyupload"
DEFAULT_EXTENSION = "bin"
SUFFIX_ALPHABET = string.digits + string.ascii_uppercase
SUFFIX_LENGTH = 10


class MediaDispatcher(Protocol):
    """Protocol capturing media upload behaviour from the dispatcher."""

    def post(
        self,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        *,
        files: Mapping[str, Any] | None = None,
        ratelimited: bool = True,
    ) -> Any:
        ...


def extension_for(mime_type: str) -> str:
    """File extension (without dot) for ``mime_type``, ``bin`` when unknown."""

    extension = mimetypes.guess_extension(mime_type, strict=False)
    return extension.lstrip(".") if extension else DEFAULT_EXTENSION


@dataclass(slots=True)
class MediaService:
    """Uploads images and video so they can be attached to statuses."""

    dispatcher: MediaDispatcher
    clock: Callable[[], float] = field(default=time.time)
    rng: random.Random = field(default_factory=random.Random)

    def media_post(
        self,
        media_file: str | os.PathLike[str] | bytes | BinaryIO,
        mime_type: str | None = None,
        *,
        description: str | None = None,
    ) -> Any:
        """
        Upload a media file and return the media attachment payload.

        ``media_file`` is either the path to a file or the raw data (bytes or
        a binary file object). For raw data ``mime_type`` is required; for a
        path it is guessed from the file name when omitted. The returned
        payload's ``id`` can be passed to ``status_post(media_ids=...)``.

        Raises:
            UnknownMimeTypeError: when no MIME type was given and none can be guessed.
        """

        path = self._resolve_path(media_file)
        if mime_type is None and path is not None:
            mime_type, _ = mimetypes.guess_type(path.name)
        if not mime_type:
            raise UnknownMimeTypeError(
                "Could not determine mime type or data passed directly without mime type."
            )

        file_name = self.upload_file_name(mime_type)
        params = {"description": description} if description else None

        if path is None:
            return self._upload(media_file, file_name, mime_type, params)
        with path.open("rb") as file_obj:
            return self._upload(file_obj, file_name, mime_type, params)

    def upload_file_name(self, mime_type: str) -> str:
        suffix = "".join(self.rng.choice(SUFFIX_ALPHABET) for _ in range(SUFFIX_LENGTH))
        return f"{UPLOAD_PREFIX}_{int(self.clock())}_{suffix}.{extension_for(mime_type)}"

    def _upload(self, data: Any, file_name: str, mime_type: str, params: Mapping[str, Any] | None) -> Any:
        files = {"file": (file_name, data, mime_type)}
        return self.dispatcher.post("/api/v1/media/", params, files=files)

    @staticmethod
    def _resolve_path(media_file: Any) -> Path | None:
        if isinstance(media_file, os.PathLike):
            path = Path(media_file).expanduser()
            if not path.is_file():
                raise MediaValidationError(f"Media file '{media_file}' does not exist or is not a file.")
            return path
        if isinstance(media_file, str) and os.path.isfile(os.path.expanduser(media_file)):
            return Path(media_file).expanduser()
        return None
