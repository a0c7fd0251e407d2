"""
Data models for parts, wire structures, manifests and remote objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from copycloud.core.constants import (
    DEFAULT_SHARE_ID,
    HEADER_SIGNATURE,
    HEADER_SIZE,
    HEADER_VERSION,
    PART_FIXED_SIZE,
    PART_SIGNATURE,
    PART_VERSION,
)
from copycloud.core.errors import CodecError


@dataclass(frozen=True)
class PartRef:
    """
    Reference to a content-addressed part (no payload).

    Attributes:
        fingerprint: Content fingerprint of the part
        size: Part size in bytes
        share_id: Share namespace (0 = owner namespace)
    """

    fingerprint: str
    size: int
    share_id: int = DEFAULT_SHARE_ID

    def to_dict(self) -> dict[str, Any]:
        return {"fingerprint": self.fingerprint, "size": self.size}


@dataclass(frozen=True)
class Part(PartRef):
    """A part together with its payload (a transfer unit)."""

    payload: bytes = b""

    @property
    def ref(self) -> PartRef:
        return PartRef(self.fingerprint, self.size, self.share_id)

    def __repr__(self) -> str:
        return (
            f"Part(fingerprint={self.fingerprint!r}, size={self.size}, "
            f"share_id={self.share_id}, payload=<{len(self.payload)} bytes>)"
        )


@dataclass(frozen=True)
class Header:
    """
    Generation 1 request/response header.

    ``total_size`` is the exact byte length of the part records that follow.
    """

    signature: int
    struct_size: int
    version: int
    total_size: int
    part_count: int
    error_code: int = 0

    @classmethod
    def for_records(
        cls,
        records: Sequence["PartRecord"],
        version: int = HEADER_VERSION,
        error_code: int = 0,
    ) -> "Header":
        """Build the header that frames ``records``."""
        return cls(
            signature=HEADER_SIGNATURE,
            struct_size=HEADER_SIZE,
            version=version,
            total_size=sum(r.struct_size for r in records),
            part_count=len(records),
            error_code=error_code,
        )


@dataclass(frozen=True)
class PartRecord:
    """
    Generation 1 on-wire part.

    ``struct_size`` and ``payload_size`` are derived from ``payload``. On a
    part-level error the payload carries the server's error message.
    """

    share_id: int
    fingerprint: str
    size: int
    payload: bytes = b""
    error_code: int = 0
    version: int = PART_VERSION
    reserved: int = 0

    @property
    def signature(self) -> int:
        return PART_SIGNATURE

    @property
    def payload_size(self) -> int:
        return len(self.payload)

    @property
    def struct_size(self) -> int:
        return PART_FIXED_SIZE + self.payload_size

    @classmethod
    def for_part(cls, part: PartRef, payload: bytes = b"") -> "PartRecord":
        return cls(
            share_id=part.share_id,
            fingerprint=part.fingerprint,
            size=part.size,
            payload=payload,
        )

    def __repr__(self) -> str:
        error = f", error_code={self.error_code}" if self.error_code else ""
        return (
            f"PartRecord(fingerprint={self.fingerprint!r}, size={self.size}, "
            f"share_id={self.share_id}, payload_size={self.payload_size}{error})"
        )


@dataclass(frozen=True)
class ManifestEntry:
    fingerprint: str
    offset: int
    size: int

    def to_dict(self) -> dict[str, Any]:
        return {"fingerprint": self.fingerprint, "offset": self.offset, "size": self.size}


PartLike = Union[PartRef, Mapping[str, Any]]


@dataclass
class FileManifest:
    """
    Ordered part list that reconstructs a file.

    Offsets are the running sum of the preceding part sizes and
    ``total_size`` is the sum of all sizes.
    """

    path: str
    parts: List[ManifestEntry] = field(default_factory=list)
    total_size: int = 0

    @classmethod
    def from_parts(cls, path: str, parts: Iterable[PartLike]) -> "FileManifest":
        entries: List[ManifestEntry] = []
        offset = 0
        for part in parts:
            if isinstance(part, PartRef):
                part_fingerprint, size = part.fingerprint, part.size
            else:
                part_fingerprint, size = part["fingerprint"], int(part["size"])
            if size < 0:
                raise ValueError(f"Invalid part size: {size}")
            entries.append(ManifestEntry(part_fingerprint, offset, size))
            offset += size
        return cls(path=path, parts=entries, total_size=offset)

    def to_request(self) -> dict[str, Any]:
        return {
            "action": "create",
            "object_type": "file",
            "path": self.path,
            "parts": [entry.to_dict() for entry in self.parts],
            "size": self.total_size,
        }


class RevisionPart(BaseModel):
    model_config = ConfigDict(extra="allow")

    fingerprint: str
    offset: int = 0
    size: int


class Revision(BaseModel):
    model_config = ConfigDict(extra="allow")

    parts: List[RevisionPart] = Field(default_factory=list)


class ObjectMeta(BaseModel):
    """
    Remote object as reported by the server.

    Unknown fields are preserved (``extra="allow"``); the client only reads
    them or submits requests that mutate the object remotely.
    """

    model_config = ConfigDict(extra="allow")

    path: str
    type: Optional[str] = Field(None, description="file or dir")
    name: Optional[str] = None
    size: Optional[int] = None
    created_time: Optional[int] = None
    modified_time: Optional[int] = None
    revisions: List[Revision] = Field(default_factory=list)

    @property
    def is_file(self) -> bool:
        return self.type == "file"

    @property
    def is_dir(self) -> bool:
        return self.type == "dir"

    def latest_parts(self) -> List[RevisionPart]:
        """Parts of the most recent revision (empty when none were listed)."""
        if not self.revisions:
            return []
        return list(self.revisions[0].parts)


@dataclass
class ListPage:
    """One ``list_objects`` reply."""

    children: List[ObjectMeta]
    watermark: Any
    more_items: bool
    root: Optional[ObjectMeta] = None

    @classmethod
    def from_result(cls, result: Mapping[str, Any]) -> "ListPage":
        """
        Raises:
            CodecError: A child or the root object is not a valid object
        """
        try:
            children = [ObjectMeta.model_validate(c) for c in result.get("children") or []]
            raw_root = result.get("object")
            root = ObjectMeta.model_validate(raw_root) if raw_root else None
        except ValidationError as exc:
            raise CodecError(f"Malformed object in list_objects reply: {exc}") from exc
        return cls(
            children=children,
            watermark=result.get("list_watermark"),
            more_items=bool(result.get("more_items", False)),
            root=root,
        )


@dataclass
class Listing:
    """Aggregated result of a paginated listing, in server emission order."""

    items: List[ObjectMeta] = field(default_factory=list)
    watermark: Any = False
    pages: int = 0

    def __iter__(self) -> Iterator[ObjectMeta]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> ObjectMeta:
        return self.items[index]

    @property
    def paths(self) -> List[str]:
        return [item.path for item in self.items]


__all__ = [
    "PartRef",
    "Part",
    "Header",
    "PartRecord",
    "ManifestEntry",
    "FileManifest",
    "RevisionPart",
    "Revision",
    "ObjectMeta",
    "ListPage",
    "Listing",
]
