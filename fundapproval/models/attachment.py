from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Union

from fundapproval.schemas.fund_request import AttachmentInfo


@dataclass(frozen=True)
class ExistingAttachment:
    """Attachment already stored on the server. Removing it only drops the association."""
    id: int
    name: str
    url: Optional[str] = None

    is_existing = True

    @property
    def merge_key(self) -> str:
        return f"existing-{self.id}"

    @classmethod
    def from_info(cls, info: AttachmentInfo) -> "ExistingAttachment":
        return cls(id=info.id, name=info.file_name, url=info.url)


@dataclass(frozen=True)
class PendingAttachment:
    """Locally selected file, uploaded after a successful submit."""
    name: str
    size: int
    last_modified: int
    content: bytes = field(default=b"", repr=False)
    content_type: str = "application/octet-stream"

    is_existing = False

    @property
    def merge_key(self) -> str:
        return f"{self.name}|{self.size}|{self.last_modified}"

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "PendingAttachment":
        """Read a file from disk, using its mtime (ms) as the modification stamp."""
        path = Path(path)
        stat = path.stat()
        return cls(
            name=path.name,
            size=stat.st_size,
            last_modified=int(stat.st_mtime * 1000),
            content=path.read_bytes(),
        )


Attachment = Union[ExistingAttachment, PendingAttachment]


def merge_attachments(current: Iterable[Attachment], picked: Iterable[Attachment]) -> list[Attachment]:
    """
    Add newly picked files to the current list.

    Nothing already present is dropped. A file whose merge key is already
    present replaces the earlier entry in place, so re-picking the same file
    never grows the list.
    """
    merged: dict[str, Attachment] = {a.merge_key: a for a in current}
    for attachment in picked:
        merged[attachment.merge_key] = attachment
    return list(merged.values())


def uploadable(attachments: Iterable[Attachment]) -> list[PendingAttachment]:
    """Pending, non-empty files in selection order."""
    return [a for a in attachments if isinstance(a, PendingAttachment) and a.size > 0]
