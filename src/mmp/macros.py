import re
from collections.abc import Iterator, Mapping

from mmp.context import SourceContext
from mmp.diag import ErrorLog, ProcessorError
from mmp.lexer import peek_name

_NAME_RE = re.compile(r"[A-Za-z0-9_]+")


class MacroTable:
    """Macro name to replacement text.

    Replacement text is opaque: it is written out as-is and never rescanned,
    so a macro whose value mentions its own name expands exactly once.
    """

    def __init__(self, definitions: Mapping[str, str] | None = None) -> None:
        self._macros: dict[str, str] = {}
        if definitions is not None:
            for name, value in definitions.items():
                self.define(name, value)

    def define(self, name: str, value: str) -> None:
        if _NAME_RE.fullmatch(name) is None:
            raise ValueError(f"Invalid macro name: {name!r}")
        self._macros[name] = value

    def lookup(self, name: str) -> str | None:
        return self._macros.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._macros

    def __len__(self) -> int:
        return len(self._macros)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._macros))

    def dump(self) -> tuple[str, ...]:
        return tuple(f'{name}="{self._macros[name]}"' for name in self)


def parse_predefinition(define: str) -> tuple[str, str]:
    if "=" in define:
        name, value = define.split("=", 1)
    else:
        name, value = define, "1"
    if _NAME_RE.fullmatch(name) is None:
        raise ProcessorError(f"Invalid macro definition: {define}")
    return name, value


def read_reference(context: SourceContext) -> str | None:
    """Consume ``<marker>NAME`` and an optional closing marker at the cursor.

    Returns None without moving when no name follows the marker. A marker
    directly after the name always closes the reference.
    """
    marker = context.macro_marker
    if not context.startswith(marker):
        return None
    name = peek_name(context, len(marker))
    if not name:
        return None
    context.advance(len(marker) + len(name))
    if context.startswith(marker):
        context.advance(len(marker))
    return name


def expand_reference(
    context: SourceContext,
    macros: MacroTable,
    errors: ErrorLog,
    *,
    emit: bool,
) -> str | None:
    line = context.line
    name = read_reference(context)
    if name is None:
        return None
    if not emit:
        return ""
    value = macros.lookup(name)
    if value is None:
        errors.report(context.name, line, f"Macro not found: {name}")
        return ""
    return value
