"""
Append-only log sinks for serialized error records.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Protocol, Union

from faultcatch.exceptions import LogDestinationNotConfiguredError
from faultcatch.utils.logging import get_logger

logger = get_logger(__name__)


class LogSink(Protocol):
    """Destination that durably records serialized error records."""

    def set_directory(self, directory: Union[str, Path]) -> None:
        ...

    def write(self, line: str) -> None:
        ...


class FileLogSink:
    """
    Writes one serialized record per line to a daily log file.

    Files are named ``YYYY-MM-DD.log`` (UTC date) inside the configured
    directory, which is created on first write. Write failures are not
    caught.
    """

    def __init__(self, directory: Optional[Union[str, Path]] = None):
        self._directory: Optional[Path] = Path(directory) if directory is not None else None

    @property
    def directory(self) -> Optional[Path]:
        return self._directory

    def set_directory(self, directory: Union[str, Path]) -> None:
        self._directory = Path(directory)

    def current_file(self) -> Path:
        """Return the file the next record will be appended to."""
        if self._directory is None:
            raise LogDestinationNotConfiguredError()
        return self._directory / f"{datetime.now(timezone.utc):%Y-%m-%d}.log"

    def write(self, line: str) -> None:
        """
        Append a serialized record to the current log file.

        Args:
            line: Serialized record, without trailing newline
        """
        path = self.current_file()
        path.parent.mkdir(parents=True, exist_ok=True)

        with path.open("a", encoding="utf-8") as handle:
            handle.write(line.rstrip("\n") + "\n")

        logger.debug(f"Error record appended to {path}", extra={"log_file": str(path)})
