import unittest

from tests import _bootstrap  # noqa: F401
from mmp.options import MAX_DEPTH_LIMIT, ProcessorOptions, normalize_options


class ProcessorOptionsTests(unittest.TestCase):
    def test_defaults(self) -> None:
        options = ProcessorOptions()
        self.assertEqual(options.defines, ())
        self.assertEqual(options.include_dirs, ())
        self.assertEqual(options.start_marker, "$")
        self.assertEqual(options.macro_marker, "$")
        self.assertEqual(options.max_depth, 64)
        self.assertEqual(options.diag_format, "human")
        self.assertFalse(options.verbose)

    def test_empty_markers(self) -> None:
        with self.assertRaises(ValueError):
            ProcessorOptions(start_marker="")
        with self.assertRaises(ValueError):
            ProcessorOptions(macro_marker="")

    def test_invalid_depth(self) -> None:
        with self.assertRaises(ValueError):
            ProcessorOptions(max_depth=0)
        with self.assertRaises(ValueError):
            ProcessorOptions(max_depth=MAX_DEPTH_LIMIT + 1)
        self.assertEqual(ProcessorOptions(max_depth=MAX_DEPTH_LIMIT).max_depth, MAX_DEPTH_LIMIT)

    def test_invalid_diag_format(self) -> None:
        with self.assertRaises(ValueError):
            ProcessorOptions(diag_format="xml")  # type: ignore[arg-type]

    def test_normalize_options(self) -> None:
        self.assertEqual(normalize_options(None), ProcessorOptions())
        options = ProcessorOptions(max_depth=3)
        self.assertIs(normalize_options(options), options)


if __name__ == "__main__":
    unittest.main()
