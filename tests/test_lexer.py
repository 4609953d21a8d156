import unittest

from tests import _bootstrap  # noqa: F401
from mmp.context import SourceContext
from mmp.diag import ErrorLog
from mmp.lexer import (
    CLOSING_KEYWORDS,
    StopReason,
    directive_keyword,
    is_name_char,
    peek_name,
    read_word,
    scan_name,
    scan_string,
    skip_whitespace,
)


def _rest(context: SourceContext) -> str:
    return context.buffer[context.cursor : context.boundary]


class LexerTests(unittest.TestCase):
    def test_keywords(self) -> None:
        self.assertEqual(set(CLOSING_KEYWORDS), {"elif", "else", "endif"})
        self.assertIs(CLOSING_KEYWORDS["endif"], StopReason.ENDIF)

    def test_is_name_char(self) -> None:
        self.assertTrue(is_name_char("a"))
        self.assertTrue(is_name_char("_"))
        self.assertTrue(is_name_char("7"))
        self.assertFalse(is_name_char("-"))
        self.assertFalse(is_name_char("é"))
        self.assertFalse(is_name_char(""))

    def test_skip_whitespace_tracks_lines(self) -> None:
        context = SourceContext("t", " \n\t\nx")
        self.assertEqual(skip_whitespace(context), " \n\t\n")
        self.assertEqual(context.line, 3)
        self.assertEqual(_rest(context), "x")

    def test_scan_name_skips_leading_whitespace(self) -> None:
        context = SourceContext("t", "  foo_1 bar")
        self.assertEqual(scan_name(context), "foo_1")
        self.assertEqual(_rest(context), " bar")

    def test_scan_name_stops_at_punctuation(self) -> None:
        context = SourceContext("t", "abc.def")
        self.assertEqual(scan_name(context), "abc")
        self.assertEqual(_rest(context), ".def")

    def test_scan_name_respects_boundary(self) -> None:
        context = SourceContext("t", "abcdef", boundary=3)
        self.assertEqual(scan_name(context), "abc")
        self.assertTrue(context.at_end)

    def test_peek_name_does_not_move(self) -> None:
        context = SourceContext("t", "$endif rest")
        self.assertEqual(peek_name(context, 1), "endif")
        self.assertEqual(context.cursor, 0)

    def test_scan_string_quoted(self) -> None:
        errors = ErrorLog()
        context = SourceContext("t", '  "hello world" x')
        self.assertEqual(scan_string(context, errors), "hello world")
        self.assertEqual(_rest(context), " x")
        self.assertEqual(errors.count, 0)

    def test_scan_string_bare_token(self) -> None:
        errors = ErrorLog()
        context = SourceContext("t", "token==other")
        self.assertEqual(scan_string(context, errors), "token")
        self.assertEqual(_rest(context), "==other")

    def test_scan_string_empty_quotes(self) -> None:
        context = SourceContext("t", '""x')
        self.assertEqual(scan_string(context, ErrorLog()), "")
        self.assertEqual(_rest(context), "x")

    def test_unterminated_string_reports_opening_line(self) -> None:
        errors = ErrorLog()
        context = SourceContext("t.txt", 'x\n"abc\ndef')
        context.advance(2)
        self.assertEqual(scan_string(context, errors), "abc\ndef")
        self.assertTrue(context.at_end)
        self.assertEqual(errors.count, 1)
        diagnostic = errors.diagnostics[0]
        self.assertEqual(diagnostic.filename, "t.txt")
        self.assertEqual(diagnostic.line, 2)
        self.assertIn("No closing quote", diagnostic.message)

    def test_read_word(self) -> None:
        context = SourceContext("t", "dir/file.txt next")
        self.assertEqual(read_word(context), "dir/file.txt")
        self.assertEqual(_rest(context), " next")

    def test_directive_keyword(self) -> None:
        self.assertEqual(directive_keyword(SourceContext("t", "$endif x")), "endif")
        self.assertEqual(directive_keyword(SourceContext("t", "plain")), "")
        self.assertEqual(directive_keyword(SourceContext("t", "$ def")), "")
        self.assertEqual(directive_keyword(SourceContext("t", "#if", start_marker="#")), "if")


if __name__ == "__main__":
    unittest.main()
