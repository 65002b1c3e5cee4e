import contextlib
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

from lx.models import GeneratedArtifact


def splice(source_bytes: bytes, replacements: Iterable[tuple[int, int, bytes]]) -> bytes:
    """Apply non-overlapping ``(start, end, text)`` replacements to a buffer.

    Edits are applied from the highest start offset down, so every pending
    range still refers to the original offsets when it is applied.
    """
    ordered = sorted(replacements, key=lambda item: item[0], reverse=True)
    limit = len(source_bytes)
    for start, end, _ in ordered:
        if not 0 <= start <= end <= limit:
            raise ValueError(f"Replacement range {start}:{end} is out of bounds or overlaps a later range")
        limit = start

    buffer = bytearray(source_bytes)
    for start, end, text in ordered:
        buffer[start:end] = text
    return bytes(buffer)


def splice_artifacts(source_bytes: bytes, artifacts: Iterable[GeneratedArtifact]) -> bytes | None:
    """Splice the successful artifacts into the source; ``None`` when none succeeded."""
    replacements = [
        (artifact.spec.start, artifact.spec.end, artifact.text.encode("utf-8"))
        for artifact in artifacts
        if artifact.text is not None
    ]
    if not replacements:
        return None
    return splice(source_bytes, replacements)


def write_atomic(file_path: Path, content: bytes) -> None:
    """Replace ``file_path`` with ``content`` in one step.

    The content goes to a temporary file in the same directory which is then
    renamed over the target; on any failure the original is left untouched.
    """
    mode = file_path.stat().st_mode & 0o7777 if file_path.exists() else None
    fd, temp_name = tempfile.mkstemp(dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".lx-tmp")
    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "wb") as temp_file:
            temp_file.write(content)
            temp_file.flush()
            os.fsync(temp_file.fileno())
        if mode is not None:
            os.chmod(temp_path, mode)
        os.replace(temp_path, file_path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            temp_path.unlink()
        raise
