"""File create/rename/remove through ``update_objects``."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping

from pydantic import ValidationError

from copycloud.client.session import ApiSession
from copycloud.core.constants import UPDATE_OBJECTS_METHOD
from copycloud.core.errors import CodecError
from copycloud.core.models import FileManifest, ObjectMeta, PartLike
from copycloud.utils.logging import get_logger

logger = get_logger(__name__)


class ObjectManager:
    def __init__(self, session: ApiSession) -> None:
        self.session = session

    def _update(self, request: Dict[str, Any], context: str) -> Any:
        result = self.session.call(UPDATE_OBJECTS_METHOD, {"meta": [request]})
        return result.unwrap(context)

    def create_file(self, path: str, parts: Iterable[PartLike]) -> FileManifest:
        """
        Create (or replace) the file at ``path`` from already uploaded parts.

        Parts are placed in the given order; offsets are accumulated here.
        """
        manifest = FileManifest.from_parts(path, parts)
        self._update(manifest.to_request(), "Error creating file")
        logger.info(
            "file_created",
            path=path,
            parts=len(manifest.parts),
            size=manifest.total_size,
        )
        return manifest

    def remove_file(self, path: str) -> None:
        self._update(
            {"action": "remove", "object_type": "file", "path": path},
            "Error removing file",
        )
        logger.info("file_removed", path=path)

    def rename(self, source: str, destination: str) -> ObjectMeta:
        """Rename ``source`` to ``destination`` and return the updated object."""
        result = self._update(
            {"action": "rename", "path": source, "new_path": destination},
            "Error renaming object",
        )
        logger.info("object_renamed", path=source, new_path=destination)
        return _first_object(result, destination)


def _first_object(result: Any, fallback_path: str) -> ObjectMeta:
    # update_objects answers with one entry per submitted meta request
    if isinstance(result, list):
        result = result[0] if result else None
    if isinstance(result, Mapping) and isinstance(result.get("object"), Mapping):
        result = result["object"]
    if result is None:
        return ObjectMeta(path=fallback_path)
    if not isinstance(result, Mapping):
        raise CodecError(f"Unexpected update_objects result: {result!r}")
    try:
        return ObjectMeta.model_validate({"path": fallback_path, **result})
    except ValidationError as exc:
        raise CodecError(f"Malformed object in update_objects reply: {exc}") from exc


__all__ = ["ObjectManager"]
