"""Errors raised by the proposal store."""

from pathlib import Path


class ParseError(ValueError):
    """A DIP document's metadata is missing or malformed."""

    def __init__(self, path: Path | str | None, field: str, message: str, line: int | None = None):
        self.path = Path(path) if path is not None else None
        self.field = field
        self.line = line
        self.message = message
        location = str(self.path) if self.path else "<document>"
        if line:
            location += f":{line}"
        super().__init__(f"{location}: {field}: {message}")


class NotFoundError(LookupError):
    """No proposal with the requested identifier."""

    def __init__(self, dip_id: int):
        self.dip_id = dip_id
        super().__init__(f"DIP {dip_id} not found")
