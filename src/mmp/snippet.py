from mmp.context import SourceContext
from mmp.lexer import SNIPPET_CLOSE_KEYWORD, SNIPPET_OPEN_KEYWORD, is_name_char


class SnippetError(LookupError):
    pass


def snippet_open_marker(context: SourceContext, snippet_id: str) -> str:
    return f"{context.start_marker}{SNIPPET_OPEN_KEYWORD} {snippet_id}"


def snippet_close_marker(context: SourceContext) -> str:
    return f"{context.start_marker}{SNIPPET_CLOSE_KEYWORD}"


def skip_open_delimiter(context: SourceContext) -> None:
    if not context.at_end and not context.startswith(context.start_marker):
        context.advance(1)


def _find_open_marker(context: SourceContext, marker: str) -> int:
    position = context.buffer.find(marker, 0, context.boundary)
    while position >= 0:
        end = position + len(marker)
        if end >= context.boundary or not is_name_char(context.buffer[end]):
            return position
        position = context.buffer.find(marker, position + 1, context.boundary)
    return -1


def locate_snippet(context: SourceContext, snippet_id: str) -> None:
    """Narrow a freshly pushed context to the body of snippet ``snippet_id``.

    The body starts after ``$id <name>`` and the single character ending that
    marker, and stops before the first ``$endid`` that follows. When either
    marker is missing the window is left empty and SnippetError is raised.
    """
    opener = snippet_open_marker(context, snippet_id)
    start = _find_open_marker(context, opener)
    if start < 0:
        context.narrow(context.cursor)
        raise SnippetError(f"Snippet not found: {snippet_id} in {context.name}")
    context.advance_to(start + len(opener))
    skip_open_delimiter(context)
    context.snippet_id = snippet_id
    end = context.buffer.find(snippet_close_marker(context), context.cursor, context.boundary)
    if end < 0:
        context.narrow(context.cursor)
        raise SnippetError(
            f"No {snippet_close_marker(context)} for snippet {snippet_id} in {context.name}"
        )
    context.narrow(end)
