import io
from collections.abc import Callable
from dataclasses import dataclass
from typing import TextIO

from mmp.context import ContextStack, SourceContext
from mmp.diag import Diagnostic, ErrorLog
from mmp.expression import ConditionParser, ExpressionError
from mmp.lexer import (
    CLOSING_KEYWORDS,
    QUOTE,
    SNIPPET_CLOSE_KEYWORD,
    SNIPPET_OPEN_KEYWORD,
    StopReason,
    directive_keyword,
    is_name_char,
    read_quoted,
    read_word,
    scan_name,
    scan_string,
    skip_whitespace,
)
from mmp.log import get_logger
from mmp.macros import MacroTable, expand_reference, parse_predefinition
from mmp.options import ProcessorOptions, normalize_options
from mmp.snippet import SnippetError, locate_snippet, skip_open_delimiter
from mmp.sources import FileLoader, SourceLoader, source_dir

logger = get_logger(__name__)

_CommandHandler = Callable[[int, bool], None]

# Consumed with no effect outside a snippet lookup.
_SILENT_KEYWORDS = frozenset({SNIPPET_CLOSE_KEYWORD})


@dataclass(frozen=True)
class ExpandResult:
    output: str
    diagnostics: tuple[Diagnostic, ...]
    macro_table: tuple[str, ...]
    include_trace: tuple[str, ...]

    @property
    def error_count(self) -> int:
        return len(self.diagnostics)


@dataclass
class _ConditionalState:
    line: int
    matched: bool
    saw_else: bool = False


def _format_include_trace(
    source: str,
    line: int,
    path: str,
    resolved: str,
    snippet_id: str | None,
) -> str:
    command = "include" if snippet_id is None else f"snippet {snippet_id}"
    return f'{source}:{line}: {command} "{path}" -> {resolved}'


def expand_source(
    source: str,
    *,
    filename: str = "<input>",
    options: ProcessorOptions | None = None,
    loader: SourceLoader | None = None,
) -> ExpandResult:
    sink = io.StringIO()
    processor = Processor(sink, options=options, loader=loader)
    processor.process_source(source, filename=filename)
    return processor.result(sink.getvalue())


def expand_file(
    path: str,
    *,
    options: ProcessorOptions | None = None,
    loader: SourceLoader | None = None,
) -> ExpandResult:
    sink = io.StringIO()
    processor = Processor(sink, options=options, loader=loader)
    processor.process_file(path)
    return processor.result(sink.getvalue())


class Processor:
    """One expansion session.

    Owns the context stack, the macro table and the error log, and writes
    every piece of output to ``sink`` in document order.
    """

    def __init__(
        self,
        sink: TextIO,
        *,
        options: ProcessorOptions | None = None,
        loader: SourceLoader | None = None,
    ) -> None:
        self._options = normalize_options(options)
        self._sink = sink
        self._loader: SourceLoader = (
            FileLoader(self._options.include_dirs) if loader is None else loader
        )
        self.contexts = ContextStack()
        self.macros = MacroTable()
        self.errors = ErrorLog()
        self.include_trace: list[str] = []
        for define in self._options.defines:
            name, value = parse_predefinition(define)
            self.macros.define(name, value)
        self._commands: dict[str, _CommandHandler] = {
            "def": self._handle_def,
            "include": self._handle_include,
            "snippet": self._handle_snippet,
            "if": self._handle_if,
            SNIPPET_OPEN_KEYWORD: self._handle_snippet_open,
        }

    def process_file(self, path: str) -> None:
        filename, source = self._loader.load(path, base_dir=None)
        self.process_source(source, filename=filename)

    def process_source(self, source: str, *, filename: str = "<input>") -> None:
        self.contexts.push(self._new_context(filename, source))
        try:
            self._drain()
        finally:
            self.contexts.pop()

    def result(self, output: str) -> ExpandResult:
        return ExpandResult(
            output,
            self.errors.diagnostics,
            self.macros.dump(),
            tuple(self.include_trace),
        )

    def _new_context(self, filename: str, source: str) -> SourceContext:
        return SourceContext(
            filename,
            source,
            start_marker=self._options.start_marker,
            macro_marker=self._options.macro_marker,
        )

    def _write(self, text: str, emit: bool) -> None:
        if emit and text:
            self._sink.write(text)

    def _drain(self) -> None:
        context = self.contexts.top
        if context.snippet_id is None:
            logger.info("Processing %s...", context.name)
        else:
            logger.info("Processing snippet %s of %s...", context.snippet_id, context.name)
        reason = self._scan(emit=True)
        while reason is not StopReason.END_OF_INPUT:
            self._report_unmatched(context, reason)
            reason = self._scan(emit=True)
        logger.info("  %s complete", context.name)

    def _scan(self, emit: bool) -> StopReason:
        context = self.contexts.top
        while not context.at_end:
            literal_end = self._next_marker(context)
            if literal_end > context.cursor:
                text = context.advance_to(literal_end)
                if directive_keyword(context) in CLOSING_KEYWORDS:
                    text = text.rstrip(" \t")
                self._write(text, emit)
                continue
            keyword = directive_keyword(context)
            if keyword in CLOSING_KEYWORDS:
                context.advance(len(context.start_marker) + len(keyword))
                return CLOSING_KEYWORDS[keyword]
            if keyword in _SILENT_KEYWORDS:
                context.advance(len(context.start_marker) + len(keyword))
                skip_whitespace(context)
                continue
            handler = self._commands.get(keyword)
            if handler is not None:
                line = context.line
                context.advance(len(context.start_marker) + len(keyword))
                handler(line, emit)
                skip_whitespace(context)
                continue
            expansion = expand_reference(context, self.macros, self.errors, emit=emit)
            if expansion is not None:
                self._write(expansion, emit)
                continue
            self._write(context.advance(), emit)
        return StopReason.END_OF_INPUT

    def _next_marker(self, context: SourceContext) -> int:
        end = context.boundary
        for marker in (context.start_marker, context.macro_marker):
            position = context.buffer.find(marker, context.cursor, context.boundary)
            if 0 <= position < end:
                end = position
        return end

    def _report_unmatched(self, context: SourceContext, reason: StopReason) -> None:
        keyword = reason.name.lower()
        self.errors.report(context.name, context.line, f"{keyword} without matching if")
        if reason is StopReason.ELIF:
            self._condition(context, evaluate=False)
        skip_whitespace(context)

    def _read_string(self, context: SourceContext, evaluate: bool) -> str | None:
        skip_whitespace(context)
        expansion = expand_reference(context, self.macros, self.errors, emit=evaluate)
        if expansion is not None:
            return expansion
        if not context.startswith(QUOTE) and not is_name_char(context.peek()):
            return None
        return scan_string(context, self.errors)

    def _read_path(self, context: SourceContext, evaluate: bool) -> str | None:
        skip_whitespace(context)
        if context.startswith(QUOTE):
            return read_quoted(context, self.errors)
        expansion = expand_reference(context, self.macros, self.errors, emit=evaluate)
        if expansion is not None:
            return expansion
        return read_word(context) or None

    def _handle_def(self, line: int, emit: bool) -> None:
        context = self.contexts.top
        name = scan_name(context)
        if not name:
            self.errors.report(context.name, line, "Expected macro name after def")
            return
        value = self._read_string(context, emit)
        if value is None:
            self.errors.report(context.name, line, f"Expected value for macro {name}")
            return
        if emit:
            self.macros.define(name, value)

    def _handle_include(self, line: int, emit: bool) -> None:
        context = self.contexts.top
        path = self._read_path(context, emit)
        if path is None:
            self.errors.report(context.name, line, "Expected path after include")
            return
        if emit:
            self._include(path, line)

    def _handle_snippet(self, line: int, emit: bool) -> None:
        context = self.contexts.top
        snippet_id = self._read_string(context, emit)
        if snippet_id is None:
            self.errors.report(context.name, line, "Expected snippet id after snippet")
            return
        path = self._read_path(context, emit)
        if path is None:
            self.errors.report(context.name, line, f"Expected path after snippet {snippet_id}")
            return
        if emit:
            self._include(path, line, snippet_id=snippet_id)

    def _handle_snippet_open(self, line: int, emit: bool) -> None:
        context = self.contexts.top
        scan_name(context)
        skip_open_delimiter(context)

    def _include(self, path: str, line: int, *, snippet_id: str | None = None) -> None:
        parent = self.contexts.top
        if len(self.contexts) >= self._options.max_depth:
            self.errors.report(
                parent.name,
                line,
                f"Include nesting exceeds {self._options.max_depth} levels: {path}",
            )
            return
        try:
            filename, source = self._loader.load(path, base_dir=source_dir(parent.name))
        except (OSError, UnicodeError) as error:
            logger.debug("Unable to load %s: %s", path, error)
            self.errors.report(parent.name, line, f"Could not open input file: {path}")
            return
        self.include_trace.append(_format_include_trace(parent.name, line, path, filename, snippet_id))
        child = self.contexts.push(self._new_context(filename, source))
        try:
            if snippet_id is not None:
                try:
                    locate_snippet(child, snippet_id)
                except SnippetError as error:
                    self.errors.report(parent.name, line, str(error))
            self._drain()
        finally:
            self.contexts.pop()

    def _handle_if(self, line: int, emit: bool) -> None:
        context = self.contexts.top
        taken = self._condition(context, evaluate=emit)
        state = _ConditionalState(line, matched=taken)
        skip_whitespace(context)
        reason = self._scan(taken)
        while reason is not StopReason.ENDIF:
            if reason is StopReason.END_OF_INPUT:
                self.errors.report(context.name, state.line, "if without matching endif")
                return
            taken = self._next_clause(context, reason, state, emit)
            reason = self._scan(taken)

    def _next_clause(
        self,
        context: SourceContext,
        reason: StopReason,
        state: _ConditionalState,
        emit: bool,
    ) -> bool:
        if reason is StopReason.ELIF:
            if state.saw_else:
                self.errors.report(context.name, context.line, "elif after else")
            value = self._condition(context, evaluate=emit and not state.matched)
            taken = emit and not state.matched and value
        else:
            if state.saw_else:
                self.errors.report(context.name, context.line, "Duplicate else")
            state.saw_else = True
            taken = emit and not state.matched
        state.matched = state.matched or taken
        skip_whitespace(context)
        return taken

    def _condition(self, context: SourceContext, *, evaluate: bool) -> bool:
        parser = ConditionParser(context, self._read_string)
        try:
            return parser.parse(evaluate)
        except ExpressionError as error:
            self.errors.report(context.name, error.line, error.message)
            return False
