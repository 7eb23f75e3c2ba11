"""Custom exceptions for the timetable engine."""

from pathlib import Path


class TimetableEngineError(Exception):
    """Base exception for timetable engine errors."""

    pass


class CatalogError(TimetableEngineError):
    """Catalog file could not be loaded."""

    def __init__(self, message: str, path: Path | str | None = None, row: int | None = None):
        self.path = Path(path) if path is not None else None
        self.row = row
        location = ""
        if self.path is not None:
            location += f" in '{self.path.name}'"
        if row is not None:
            location += f" at row {row}"
        super().__init__(f"Invalid catalog{location}: {message}")


class MissingColumnsError(CatalogError):
    """Catalog file is missing required columns."""

    def __init__(self, path: Path | str, missing: list[str]):
        self.missing = missing
        super().__init__(f"missing required columns: {', '.join(missing)}", path=path)


class InvalidTimeRangeError(TimetableEngineError):
    """Time range is malformed or does not satisfy start < end."""

    def __init__(self, start_time: str, end_time: str, reason: str | None = None):
        self.start_time = start_time
        self.end_time = end_time
        message = f"Invalid time range {start_time}-{end_time}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class ConfigurationError(TimetableEngineError):
    """Allocation configuration is invalid."""

    def __init__(self, field: str, value: object, expected: str):
        self.field = field
        self.value = value
        super().__init__(f"Invalid configuration value for '{field}': {value!r} (expected {expected})")


class ScheduleFileError(TimetableEngineError):
    """Schedule JSON file could not be read."""

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        super().__init__(f"Invalid schedule file '{self.path.name}': {reason}")
