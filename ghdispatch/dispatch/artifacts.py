"""Extract a JSON payload from a workflow artifact zip archive."""

from __future__ import annotations

import dataclasses
import io
import lzma
import typing as typ
import zipfile
import zlib

import msgspec

JSON_SUFFIX = ".json"


class ArtifactExtractionError(RuntimeError):
    """Raised when an artifact archive cannot be read or parsed."""

    @classmethod
    def unreadable(cls, detail: str) -> ArtifactExtractionError:
        """Return an error for an archive that could not be opened or scanned."""
        return cls(f"artifact archive could not be read: {detail}")

    @classmethod
    def invalid_json(cls, entry: str, detail: str) -> ArtifactExtractionError:
        """Return an error for an entry that is not UTF-8 JSON."""
        return cls(f"artifact entry {entry} is not valid UTF-8 JSON: {detail}")


@dataclasses.dataclass(frozen=True, slots=True)
class ExtractedJSON:
    """JSON value decoded from one archive entry."""

    entry_name: str
    value: typ.Any


def _first_json_entry(archive: zipfile.ZipFile) -> zipfile.ZipInfo | None:
    for info in archive.infolist():
        if not info.is_dir() and info.filename.endswith(JSON_SUFFIX):
            return info
    return None


def extract_json(archive_bytes: bytes) -> ExtractedJSON | None:
    """Decode the first ``.json`` entry of a zip archive.

    Entries are scanned in archive order. Returns ``None`` when the archive
    holds no ``.json`` file.

    Raises
    ------
    ArtifactExtractionError
        If the archive is corrupt, the entry cannot be read, or its content
        is not UTF-8 JSON.

    """
    try:
        with zipfile.ZipFile(io.BytesIO(archive_bytes)) as archive:
            info = _first_json_entry(archive)
            if info is None:
                return None
            content = archive.read(info)
    # Corrupt compressed streams surface as codec errors, not BadZipFile.
    except (
        zipfile.BadZipFile,
        zipfile.LargeZipFile,
        zlib.error,
        lzma.LZMAError,
        OSError,
        EOFError,
        ValueError,
        RuntimeError,
        NotImplementedError,
    ) as exc:
        raise ArtifactExtractionError.unreadable(str(exc)) from exc

    try:
        value = msgspec.json.decode(content.decode("utf-8"))
    except (UnicodeDecodeError, msgspec.DecodeError) as exc:
        raise ArtifactExtractionError.invalid_json(info.filename, str(exc)) from exc
    return ExtractedJSON(entry_name=info.filename, value=value)
