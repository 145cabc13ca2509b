"""Data models for SharePoint folders, files and file versions."""

from dataclasses import dataclass, field
from datetime import datetime

# SharePoint REST JSON field names (odata=nometadata)
FIELD_NAME = "Name"
FIELD_SERVER_RELATIVE_URL = "ServerRelativeUrl"
FIELD_VERSION_ID = "ID"
FIELD_VERSION_LABEL = "VersionLabel"
FIELD_CREATED = "Created"
FIELD_EXISTS = "Exists"

# OData response keys
ODATA_VALUE = "value"


def file_extension(filename: str) -> str:
    """Return the lowercased file extension including the dot."""
    dot = filename.rfind(".")
    return filename[dot:].lower() if dot != -1 else ""


@dataclass
class FolderDescriptor:
    """A folder returned by a subfolder listing."""

    name: str
    path: str = ""


@dataclass
class FileDescriptor:
    """A file returned by a folder file listing."""

    name: str
    server_relative_url: str = ""
    extension: str = field(init=False)

    def __post_init__(self) -> None:
        self.extension = file_extension(self.name)


@dataclass(frozen=True)
class VersionDescriptor:
    """A single historical version of a file.

    Attributes:
        id: Opaque version identifier, unique within the file's version set.
        label: Display label (e.g. "3.0"); not usable as a sort key.
        created_at: Timezone-aware creation timestamp.
    """

    id: str
    label: str
    created_at: datetime
