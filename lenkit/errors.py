from __future__ import annotations


class LenkitError(Exception):
    """Base class for every error a lenkit command reports and exits on."""


class ColumnNotFound(LenkitError, LookupError):
    def __init__(self, name: str, available=None) -> None:
        self.name = name
        self.available = list(available or [])
        msg = f'Column "{name}" not found in the header.'
        if self.available:
            msg += " Available: " + ", ".join(self.available)
        super().__init__(msg)


class InvalidArgument(LenkitError, ValueError):
    pass


class UnsupportedFormat(InvalidArgument):
    def __init__(self, token: str, allowed=None) -> None:
        self.token = token
        msg = f"Invalid output format '{token}'."
        if allowed:
            msg += " Allowed: " + ", ".join(allowed) + "."
        super().__init__(msg)


class FileNotFound(LenkitError, FileNotFoundError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"File '{path}' not found.")
