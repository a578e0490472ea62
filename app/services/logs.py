"""Workflow log archive handling."""

import io
import re
import zipfile
import zlib

from app.core.exceptions import LogFetchError
from app.services.github import GitHubActionsClient

# Runner prefix on every line, e.g. "2024-05-01T12:00:00.1234567Z "
TIMESTAMP_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d+Z[ \t]?", re.MULTILINE)


def strip_timestamps(text: str) -> str:
    """Remove runner timestamps from the start of each line."""
    return TIMESTAMP_PREFIX.sub("", text)


def flatten_log_archive(data: bytes) -> str:
    """Concatenate every file in a log archive into one plaintext log.

    Files are ordered by name; GitHub prefixes job and step files with their
    index, so this follows execution order closely enough.
    """
    parts: list[str] = []
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            for info in sorted(archive.infolist(), key=lambda i: i.filename):
                if info.is_dir():
                    continue
                content = archive.read(info).decode("utf-8-sig", errors="replace")
                parts.append(f"\n=== {info.filename} ===\n{strip_timestamps(content)}\n")
    except (
        zipfile.BadZipFile,
        zipfile.LargeZipFile,
        zlib.error,
        EOFError,
        # Unsupported compression method or an encrypted entry
        NotImplementedError,
        RuntimeError,
    ) as e:
        raise LogFetchError(f"Invalid log archive: {e}") from e

    return "".join(parts).strip()


class LogArchiveFetcher:
    """Downloads and flattens the full log of a run."""

    def __init__(self, github: GitHubActionsClient):
        self.github = github

    async def fetch(self, logs_url: str | None) -> str | None:
        """Return the whole log as currently known, or None if not available yet."""
        if not logs_url:
            return None
        data = await self.github.download_logs(logs_url)
        if data is None:
            return None
        return flatten_log_archive(data)
