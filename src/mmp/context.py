from dataclasses import dataclass

from mmp.options import DEFAULT_MARKER


@dataclass
class SourceContext:
    """One input being scanned: a whole file or a snippet window of one.

    ``boundary`` is exclusive and never exceeds ``len(buffer)``; the cursor
    never moves past it.
    """

    name: str
    buffer: str
    start_marker: str = DEFAULT_MARKER
    macro_marker: str = DEFAULT_MARKER
    cursor: int = 0
    boundary: int = -1
    line: int = 1
    snippet_id: str | None = None

    def __post_init__(self) -> None:
        if not self.start_marker or not self.macro_marker:
            raise ValueError("Context markers must not be empty")
        if self.boundary < 0:
            self.boundary = len(self.buffer)
        if not 0 <= self.cursor <= self.boundary <= len(self.buffer):
            raise ValueError(
                f"Invalid context window {self.cursor}:{self.boundary} for {self.name}"
            )

    @property
    def at_end(self) -> bool:
        return self.cursor >= self.boundary

    def peek(self, offset: int = 0) -> str:
        index = self.cursor + offset
        if index >= self.boundary:
            return ""
        return self.buffer[index]

    def startswith(self, text: str, offset: int = 0) -> bool:
        start = self.cursor + offset
        if not text or start + len(text) > self.boundary:
            return False
        return self.buffer.startswith(text, start)

    def advance(self, count: int = 1) -> str:
        """Move forward up to ``count`` characters and return the text crossed."""
        if count < 0:
            raise ValueError(f"Cannot move cursor backwards by {-count}")
        end = min(self.cursor + count, self.boundary)
        crossed = self.buffer[self.cursor : end]
        self.line += crossed.count("\n")
        self.cursor = end
        return crossed

    def advance_to(self, position: int) -> str:
        return self.advance(position - self.cursor)

    def narrow(self, boundary: int) -> None:
        if not self.cursor <= boundary <= self.boundary:
            raise ValueError(f"Boundary {boundary} outside {self.cursor}:{self.boundary}")
        self.boundary = boundary


class ContextStack:
    def __init__(self) -> None:
        self._contexts: list[SourceContext] = []

    def push(self, context: SourceContext) -> SourceContext:
        self._contexts.append(context)
        return context

    def pop(self) -> SourceContext:
        if not self._contexts:
            raise IndexError("pop from empty context stack")
        return self._contexts.pop()

    @property
    def top(self) -> SourceContext:
        if not self._contexts:
            raise IndexError("context stack is empty")
        return self._contexts[-1]

    def __len__(self) -> int:
        return len(self._contexts)
