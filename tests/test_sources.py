import tempfile
import unittest
from pathlib import Path

from tests import _bootstrap  # noqa: F401
from mmp.sources import FileLoader, open_output, read_source, source_dir


class SourcesTests(unittest.TestCase):
    def test_source_dir(self) -> None:
        self.assertIsNone(source_dir("<input>"))
        self.assertEqual(source_dir("docs/page.txt"), Path("docs"))

    def test_read_source_keeps_line_endings(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "crlf.txt"
            path.write_bytes(b"a\r\nb\r\n")
            self.assertEqual(read_source(path), "a\r\nb\r\n")

    def test_open_output_truncates(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "out.txt"
            path.write_text("old contents", encoding="utf-8")
            with open_output(path) as out:
                out.write("new\n")
            self.assertEqual(path.read_bytes(), b"new\n")

    def test_relative_to_including_file_first(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "sub").mkdir()
            (root / "inc").mkdir()
            (root / "sub" / "part.txt").write_text("near", encoding="utf-8")
            (root / "inc" / "part.txt").write_text("far", encoding="utf-8")
            loader = FileLoader([str(root / "inc")])
            filename, text = loader.load("part.txt", base_dir=root / "sub")
            self.assertEqual(text, "near")
            self.assertEqual(filename, str(root / "sub" / "part.txt"))

    def test_falls_back_to_include_dirs(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "sub").mkdir()
            (root / "inc").mkdir()
            (root / "inc" / "shared.txt").write_text("shared", encoding="utf-8")
            loader = FileLoader([str(root / "inc")])
            filename, text = loader.load("shared.txt", base_dir=root / "sub")
            self.assertEqual(text, "shared")
            self.assertEqual(filename, str(root / "inc" / "shared.txt"))

    def test_absolute_path(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "abs.txt"
            path.write_text("abs", encoding="utf-8")
            filename, text = FileLoader().load(str(path), base_dir=Path("elsewhere"))
            self.assertEqual((filename, text), (str(path), "abs"))

    def test_missing_file_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(FileNotFoundError):
                FileLoader().load("missing.txt", base_dir=Path(tmp))


if __name__ == "__main__":
    unittest.main()
