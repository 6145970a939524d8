import os
import shutil
import tempfile
import unittest

from filecompare.core.models import (
    ContentType,
    DeltaType,
    EncodingMismatchError,
    PreconditionViolationError,
)
from filecompare.services.file_compare import FileContentComparer
from filecompare.services.file_io import FileIOService


class TestFileContentComparer(unittest.TestCase):
    def setUp(self):
        self.test_dir = tempfile.mkdtemp(prefix="filecompare_service_")
        self.comparer = FileContentComparer()

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def create_file(self, name, content):
        path = os.path.join(self.test_dir, name)
        with open(path, 'wb') as f:
            f.write(content)
        return path

    def test_expected_file_must_not_be_none(self):
        actual = self.create_file("actual.txt", b"a")
        with self.assertRaises(PreconditionViolationError) as ctx:
            self.comparer.compare_files(actual, "utf-8", None, "utf-8")
        self.assertIn("should not be None", str(ctx.exception))

    def test_expected_must_be_an_existing_file(self):
        actual = self.create_file("actual.txt", b"a")
        with self.assertRaises(PreconditionViolationError) as ctx:
            self.comparer.compare_files(actual, "utf-8", self.test_dir, "utf-8")
        self.assertIn("should be an existing file", str(ctx.exception))

    def test_actual_must_be_an_existing_file(self):
        expected = self.create_file("expected.txt", b"a")
        missing = os.path.join(self.test_dir, "missing.txt")
        with self.assertRaises(PreconditionViolationError):
            self.comparer.compare_files(missing, "utf-8", expected, "utf-8")

    def test_actual_file_must_not_be_none(self):
        expected = self.create_file("expected.txt", b"a")
        with self.assertRaises(PreconditionViolationError) as ctx:
            self.comparer.compare_files(None, "utf-8", expected, "utf-8")
        self.assertEqual(str(ctx.exception), "The actual file should not be None")

        with self.assertRaises(PreconditionViolationError) as ctx:
            self.comparer.compare_with_text(None, "a", "utf-8")
        self.assertEqual(str(ctx.exception), "The actual file should not be None")

    def test_equal_files(self):
        actual = self.create_file("actual.txt", b"line1\r\nline2")
        expected = self.create_file("expected.txt", b"line1\nline2")
        result = self.comparer.compare_files(actual, "utf-8", expected, "utf-8")
        self.assertTrue(result.is_equivalent)

    def test_different_files_are_oriented_expected_to_actual(self):
        actual = self.create_file("actual.txt", b"line1\nlineX\nline3\n")
        expected = self.create_file("expected.txt", b"line1\nline2\nline3\n")
        result = self.comparer.compare_files(actual, "utf-8", expected, "utf-8")

        self.assertEqual(result.content_type, ContentType.TEXT)
        self.assertEqual(result.original_label, expected)
        self.assertEqual(result.revised_label, actual)
        self.assertEqual(len(result.edit_script), 1)
        delta = result.edit_script[0]
        self.assertEqual(delta.delta_type, DeltaType.CHANGE)
        self.assertEqual(delta.original.texts, ["line2"])
        self.assertEqual(delta.revised.texts, ["lineX"])

    def test_each_side_uses_its_own_charset(self):
        actual = self.create_file("actual.txt", "café".encode("latin-1"))
        expected = self.create_file("expected.txt", "café".encode("utf-8"))
        result = self.comparer.compare_files(actual, "latin-1", expected, "utf-8")
        self.assertTrue(result.is_equivalent)

    def test_identical_undecodable_files_raise(self):
        actual = self.create_file("actual.bin", b"\x00\xfe")
        expected = self.create_file("expected.bin", b"\x00\xfe")
        with self.assertRaises(EncodingMismatchError) as ctx:
            self.comparer.compare_files(actual, "utf-8", expected, "utf-8")
        self.assertIn("Unable to compare contents of files", str(ctx.exception))

    def test_undecodable_files_fall_back_to_binary(self):
        actual = self.create_file("actual.bin", b"\x00\xfe")
        expected = self.create_file("expected.txt", b"")
        result = self.comparer.compare_files(actual, "utf-8", expected, "utf-8")

        self.assertEqual(result.content_type, ContentType.BINARY)
        self.assertEqual(result.divergence.offset, 0)
        self.assertIsNone(result.divergence.original_byte)
        self.assertEqual(result.divergence.revised_byte, 0)

    def test_compare_with_text(self):
        actual = self.create_file("actual.txt", b"a\nb\n")
        self.assertTrue(self.comparer.compare_with_text(actual, "a\nb", "utf-8").is_equivalent)

        result = self.comparer.compare_with_text(actual, "a\nc", "utf-8")
        self.assertEqual(result.edit_script[0].delta_type, DeltaType.CHANGE)

    def test_compare_with_text_requires_text(self):
        actual = self.create_file("actual.txt", b"a")
        with self.assertRaises(PreconditionViolationError):
            self.comparer.compare_with_text(actual, None, "utf-8")

    def test_compare_binary_content(self):
        actual = self.create_file("actual.bin", b"\x01\x02\x03")
        self.assertTrue(self.comparer.compare_binary_content(actual, b"\x01\x02\x03").is_equivalent)

        result = self.comparer.compare_binary_content(actual, b"\x01\x02")
        self.assertEqual(result.divergence.offset, 2)
        self.assertIsNone(result.divergence.original_byte)
        self.assertEqual(result.divergence.revised_byte, 3)


class TestFileIOService(unittest.TestCase):
    def setUp(self):
        self.test_dir = tempfile.mkdtemp(prefix="filecompare_io_")
        self.file_io = FileIOService()

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def create_file(self, name, content):
        path = os.path.join(self.test_dir, name)
        with open(path, 'wb') as f:
            f.write(content)
        return path

    def test_detect_content_type(self):
        text = self.create_file("plain.txt", b"hello world\n")
        binary = self.create_file("image.png", b"\x89PNG\r\n\x1a\n\x00\x00")
        self.assertEqual(self.file_io.detect_content_type(text), ContentType.TEXT)
        self.assertEqual(self.file_io.detect_content_type(binary), ContentType.BINARY)

    def test_utf16_bom_is_text(self):
        self.assertFalse(self.file_io.is_binary_content("hi".encode("utf-16")))

    def test_detect_encoding_bom(self):
        path = self.create_file("bom.txt", b"\xef\xbb\xbfhello")
        self.assertEqual(self.file_io.detect_encoding(path), "utf-8-sig")

    def test_detect_encoding_empty_uses_default(self):
        path = self.create_file("empty.txt", b"")
        self.assertEqual(self.file_io.detect_encoding(path), "utf-8")

    def test_require_file_rejects_directory(self):
        with self.assertRaises(PreconditionViolationError):
            self.file_io.require_file(self.test_dir)


if __name__ == "__main__":
    unittest.main()
