import json
from dataclasses import dataclass


@dataclass(frozen=True)
class Diagnostic:
    filename: str
    line: int
    message: str

    def __str__(self) -> str:
        return f"{self.filename}({self.line}): error: {self.message}"

    def to_json(self) -> str:
        return json.dumps(
            {"filename": self.filename, "line": self.line, "message": self.message},
            separators=(",", ":"),
        )


class ErrorLog:
    """Ordered record of every diagnostic raised during one run.

    Recording never interrupts processing; the count only decides the exit
    status once the run is over.
    """

    def __init__(self) -> None:
        self._entries: list[Diagnostic] = []

    def report(self, filename: str, line: int, message: str) -> Diagnostic:
        diagnostic = Diagnostic(filename, line, message)
        self._entries.append(diagnostic)
        return diagnostic

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        return tuple(self._entries)

    @property
    def count(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class ProcessorError(ValueError):
    def __init__(self, message: str, *, filename: str | None = None) -> None:
        super().__init__(message if filename is None else f"{filename}: {message}")
        self.message = message
        self.filename = filename
