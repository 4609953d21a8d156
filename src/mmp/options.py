from dataclasses import dataclass
from typing import Literal

DiagFormat = Literal["human", "json"]

DEFAULT_MARKER = "$"
DEFAULT_MAX_DEPTH = 64
# Each nesting level costs several interpreter frames.
MAX_DEPTH_LIMIT = 100


@dataclass(frozen=True)
class ProcessorOptions:
    defines: tuple[str, ...] = ()
    include_dirs: tuple[str, ...] = ()
    start_marker: str = DEFAULT_MARKER
    macro_marker: str = DEFAULT_MARKER
    max_depth: int = DEFAULT_MAX_DEPTH
    verbose: bool = False
    diag_format: DiagFormat = "human"

    def __post_init__(self) -> None:
        if not self.start_marker:
            raise ValueError("Directive start marker must not be empty")
        if not self.macro_marker:
            raise ValueError("Macro marker must not be empty")
        if not 1 <= self.max_depth <= MAX_DEPTH_LIMIT:
            raise ValueError(f"Unsupported nesting depth: {self.max_depth}")
        if self.diag_format not in {"human", "json"}:
            raise ValueError(f"Unsupported diagnostic format: {self.diag_format}")


def normalize_options(options: ProcessorOptions | None) -> ProcessorOptions:
    return ProcessorOptions() if options is None else options
