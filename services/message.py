from dataclasses import dataclass, field
from pathlib import Path

import services.util as u


@dataclass(frozen=True)
class FileHandle:
    """A selected file whose bytes have been read into memory."""
    name: str      # used for the extension and for display only
    data: bytes = field(repr=False)

    @classmethod
    def from_path(cls, path: str | Path, name: str = "") -> "FileHandle":
        path = Path(path)
        return cls(name=name or path.name, data=path.read_bytes())

    @property
    def extension(self) -> str:
        return u.get_extension(self.name)

    @property
    def size(self) -> int:
        return len(self.data)

    def read_bytes(self) -> bytes:
        return self.data

    def read_text(self, encoding: str = "utf-8", errors: str = "strict") -> str:
        """Decode the content; raises ``UnicodeDecodeError`` when *errors* is strict."""
        return self.data.decode(encoding, errors)


@dataclass(frozen=True)
class FileSource:
    """A selected file that has not been read yet."""
    location: str  # local path or http(s) URL
    name: str = "" # display name; derived from location when empty

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        tail = self.location.split("?", 1)[0].split("#", 1)[0]
        return tail.replace("\\", "/").rstrip("/").rsplit("/", 1)[-1] or self.location

    @property
    def is_remote(self) -> bool:
        return self.location.lower().startswith(("http://", "https://"))


@dataclass(frozen=True)
class AttachmentRef:
    """Index and file name recovered from one attachment envelope."""
    index: int
    name: str


@dataclass
class DecodedMessage:
    """Message text split into what a human reads and the attached files."""
    display_text: str
    attachments: list[AttachmentRef] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "display_text": self.display_text,
            "attachments": [{"index": a.index, "name": a.name} for a in self.attachments],
        }
