from enum import Enum, auto

from mmp.context import SourceContext
from mmp.diag import ErrorLog

QUOTE = '"'
SNIPPET_OPEN_KEYWORD = "id"
SNIPPET_CLOSE_KEYWORD = "endid"


class StopReason(Enum):
    ELIF = auto()
    ELSE = auto()
    ENDIF = auto()
    END_OF_INPUT = auto()


CLOSING_KEYWORDS = {
    "elif": StopReason.ELIF,
    "else": StopReason.ELSE,
    "endif": StopReason.ENDIF,
}


def is_name_char(char: str) -> bool:
    return len(char) == 1 and char.isascii() and (char.isalnum() or char == "_")


def skip_whitespace(context: SourceContext) -> str:
    end = context.cursor
    while end < context.boundary and context.buffer[end].isspace():
        end += 1
    return context.advance_to(end)


def peek_name(context: SourceContext, offset: int = 0) -> str:
    start = min(context.cursor + offset, context.boundary)
    end = start
    while end < context.boundary and is_name_char(context.buffer[end]):
        end += 1
    return context.buffer[start:end]


def read_name(context: SourceContext) -> str:
    return context.advance(len(peek_name(context)))


def scan_name(context: SourceContext) -> str:
    skip_whitespace(context)
    return read_name(context)


def read_word(context: SourceContext) -> str:
    end = context.cursor
    while end < context.boundary and not context.buffer[end].isspace():
        end += 1
    return context.advance_to(end)


def read_quoted(context: SourceContext, errors: ErrorLog) -> str:
    """Consume a double-quoted string at the cursor and return its contents.

    A string left open runs to the end of the window and is reported against
    the line holding its opening quote.
    """
    line = context.line
    context.advance(len(QUOTE))
    end = context.buffer.find(QUOTE, context.cursor, context.boundary)
    if end < 0:
        text = context.advance_to(context.boundary)
        excerpt = text[:40].splitlines()[0] if text else ""
        errors.report(
            context.name,
            line,
            f'No closing quote for string that begins "{excerpt}..."',
        )
        return text
    text = context.advance_to(end)
    context.advance(len(QUOTE))
    return text


def scan_string(context: SourceContext, errors: ErrorLog) -> str:
    skip_whitespace(context)
    if context.startswith(QUOTE):
        return read_quoted(context, errors)
    return read_name(context)


def directive_keyword(context: SourceContext) -> str:
    if not context.startswith(context.start_marker):
        return ""
    return peek_name(context, len(context.start_marker))
