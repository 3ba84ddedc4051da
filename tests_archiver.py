import unittest
import io
import os
import shutil
import sys
import tempfile
from contextlib import redirect_stdout, redirect_stderr

import debug
from archiver import Archiver, compressed_name, recovered_name
from errors import InputUnreadableError, MalformedArchiveError
from huffman import HuffmanTree
from main import main


class TestFileNames(unittest.TestCase):
    def test_compressed_name(self):
        self.assertEqual(compressed_name("notes.txt"), "notes.txt.huf")

    def test_recovered_name_keeps_extension(self):
        self.assertEqual(recovered_name("notes.txt.huf"), "notes-recovered.txt")

    def test_recovered_name_without_extension(self):
        self.assertEqual(recovered_name("blob.huf"), "blob-recovered")

    def test_recovered_name_in_directory(self):
        path = os.path.join("some.dir", "a.b.c.huf")
        self.assertEqual(recovered_name(path), os.path.join("some.dir", "a.b-recovered.c"))

    def test_recovered_name_requires_huf(self):
        with self.assertRaises(ValueError):
            recovered_name("notes.txt")


class TestArchiver(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.archiver = Archiver()

    def tearDown(self):
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def write(self, name: str, data: bytes) -> str:
        path = os.path.join(self.temp_dir, name)
        with open(path, 'wb') as f:
            f.write(data)
        return path

    def read(self, path: str) -> bytes:
        with open(path, 'rb') as f:
            return f.read()

    def test_compress_decompress_file(self):
        data = b"Hello World! " * 100
        test_file = self.write("test.txt", data)

        with redirect_stdout(io.StringIO()):
            archive_path = self.archiver.compress_file(test_file)
            recovered_path = self.archiver.decompress_file(archive_path)

        self.assertEqual(archive_path, test_file + ".huf")
        self.assertLess(os.path.getsize(archive_path), len(data))
        self.assertEqual(recovered_path, os.path.join(self.temp_dir, "test-recovered.txt"))
        self.assertEqual(self.read(recovered_path), data)

    def test_binary_file_without_extension(self):
        data = bytes(range(256)) * 3
        test_file = self.write("blob", data)

        with redirect_stdout(io.StringIO()):
            recovered_path = self.archiver.decompress_file(self.archiver.compress_file(test_file))

        self.assertEqual(recovered_path, os.path.join(self.temp_dir, "blob-recovered"))
        self.assertEqual(self.read(recovered_path), data)

    def test_empty_file(self):
        test_file = self.write("empty.txt", b"")

        with redirect_stdout(io.StringIO()):
            archive_path = self.archiver.compress_file(test_file)
            recovered_path = self.archiver.decompress_file(archive_path)

        self.assertEqual(os.path.getsize(archive_path), 9)
        self.assertEqual(self.read(recovered_path), b"")

    def test_output_path(self):
        test_file = self.write("input.dat", b"ZZZZZ")
        archive_path = os.path.join(self.temp_dir, "out.huf")
        output_path = os.path.join(self.temp_dir, "restored.dat")

        with redirect_stdout(io.StringIO()):
            self.assertEqual(self.archiver.compress_file(test_file, archive_path), archive_path)
            self.assertEqual(self.archiver.decompress_file(archive_path, output_path), output_path)

        self.assertEqual(self.read(output_path), b"ZZZZZ")

    def test_missing_input(self):
        with self.assertRaises(InputUnreadableError):
            self.archiver.compress_file(os.path.join(self.temp_dir, "missing.txt"))

        with self.assertRaises(OSError):
            self.archiver.decompress_file(os.path.join(self.temp_dir, "missing.huf"))

    def test_malformed_archive_leaves_no_output(self):
        archive_path = self.write("broken.txt.huf", b"garbage")

        with self.assertRaises(MalformedArchiveError):
            self.archiver.decompress_file(archive_path)

        self.assertFalse(os.path.exists(os.path.join(self.temp_dir, "broken-recovered.txt")))

    def test_verbose_prints_tree(self):
        test_file = self.write("scenario.txt", b"AAAAABBBCC")
        output = io.StringIO()

        with redirect_stdout(output):
            Archiver(verbose=True).compress_file(test_file)

        text = output.getvalue()
        self.assertIn("Symbol frequencies:", text)
        self.assertIn("[C] - 2", text)
        self.assertIn("Huffman codes:", text)
        self.assertIn("[A]\t1", text)


class TestDebugOutput(unittest.TestCase):
    def setUp(self):
        self.tree = HuffmanTree.from_data(b"AAAAABBBCC")

    def test_format_symbols(self):
        self.assertEqual(debug.format_symbols(self.tree.header.to_symbols()),
                         "[C] - 2\n[B] - 3\n[A] - 5")

    def test_format_codes(self):
        self.assertEqual(debug.format_codes(self.tree.codes), "[C]\t00\n[B]\t01\n[A]\t1")

    def test_format_tree(self):
        indent = "     "
        expected = [
            indent + "    5",
            "   10",
            indent * 2 + "    3",
            indent + "    5",
            indent * 2 + "    2",
        ]
        self.assertEqual(debug.format_tree(self.tree.root).split("\n"), expected)

    def test_unprintable_symbols(self):
        tree = HuffmanTree.from_data(b"\x00\x00\xff")
        self.assertEqual(debug.format_codes(tree.codes), "[\\xff]\t0\n[\\x00]\t1")


class TestCommandLine(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.test_file = os.path.join(self.temp_dir, "file.txt")
        with open(self.test_file, 'wb') as f:
            f.write(b"Content of file\n" * 50)

    def tearDown(self):
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def run_main(self, *argv):
        with redirect_stdout(io.StringIO()), redirect_stderr(io.StringIO()) as err:
            code = main(list(argv))
        return code, err.getvalue()

    def test_compress_and_decompress(self):
        code, _ = self.run_main("-c", self.test_file)
        self.assertEqual(code, 0)
        self.assertTrue(os.path.isfile(self.test_file + ".huf"))

        code, _ = self.run_main("-d", self.test_file + ".huf")
        self.assertEqual(code, 0)

        with open(os.path.join(self.temp_dir, "file-recovered.txt"), 'rb') as f:
            self.assertEqual(f.read(), b"Content of file\n" * 50)

    def test_decompress_requires_huf(self):
        code, err = self.run_main("-d", self.test_file)
        self.assertEqual(code, 1)
        self.assertIn("Error:", err)

    def test_missing_file(self):
        code, err = self.run_main("-c", os.path.join(self.temp_dir, "nope"))
        self.assertEqual(code, 1)
        self.assertIn("Cannot read", err)

    def test_no_arguments_prints_usage(self):
        output = io.StringIO()
        with redirect_stdout(output):
            self.assertEqual(main([]), 0)
        self.assertIn("usage:", output.getvalue())

    def test_flags_are_exclusive(self):
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                main(["-c", "-d", self.test_file])


def run_tests():
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    suite.addTests(loader.loadTestsFromTestCase(TestFileNames))
    suite.addTests(loader.loadTestsFromTestCase(TestArchiver))
    suite.addTests(loader.loadTestsFromTestCase(TestDebugOutput))
    suite.addTests(loader.loadTestsFromTestCase(TestCommandLine))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    return 0 if result.wasSuccessful() else 1


if __name__ == '__main__':
    sys.exit(run_tests())
