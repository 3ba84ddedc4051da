"""
Сжатие и распаковка файлов в формат .huf.
"""

import os
from typing import Optional

import debug
from errors import InputUnreadableError
from huffman import HuffmanTree, encode_archive, read_archive


ARCHIVE_EXTENSION = '.huf'
RECOVERED_SUFFIX = '-recovered'


def compressed_name(path: str) -> str:
    return path + ARCHIVE_EXTENSION


def recovered_name(path: str) -> str:
    """
    notes.txt.huf -> notes-recovered.txt, blob.huf -> blob-recovered
    """
    if not path.endswith(ARCHIVE_EXTENSION):
        raise ValueError(f"{path} is not a {ARCHIVE_EXTENSION} archive")

    directory, name = os.path.split(path[:-len(ARCHIVE_EXTENSION)])
    base, extension = os.path.splitext(name)
    return os.path.join(directory, base + RECOVERED_SUFFIX + extension)


def read_file(path: str) -> bytes:
    try:
        with open(path, 'rb') as f:
            return f.read()
    except OSError as e:
        raise InputUnreadableError(f"Cannot read {path}: {e.strerror}") from e


class Archiver:
    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def compress_file(self, file_path: str, output_path: Optional[str] = None) -> str:
        if output_path is None:
            output_path = compressed_name(file_path)

        data = read_file(file_path)
        tree = HuffmanTree.from_data(data)

        if self.verbose:
            self.print_tree(tree)

        print(f"Compressing {file_path}...", end=" ")
        archive = encode_archive(tree, data)

        with open(output_path, 'wb') as f:
            f.write(archive)

        ratio = (len(archive) / len(data) * 100) if data else 0
        print(f"OK ({ratio:.1f}%)")
        print(f"{file_path}: {len(data)} -> {len(archive)} bytes, written to {output_path}")

        return output_path

    def decompress_file(self, file_path: str, output_path: Optional[str] = None) -> str:
        recovered = recovered_name(file_path)
        if output_path is None:
            output_path = recovered

        archive = read_file(file_path)
        tree, bitstream = read_archive(archive)

        if self.verbose:
            self.print_tree(tree)

        print(f"Extracting {file_path}...", end=" ")
        data = tree.decode(bitstream)

        with open(output_path, 'wb') as f:
            f.write(data)

        print("OK")
        print(f"{file_path}: {len(data)} bytes written to {output_path}")

        return output_path

    @staticmethod
    def print_tree(tree: HuffmanTree):
        if tree.root is None:
            print("Empty input, no Huffman tree")
            return

        print("Symbol frequencies:")
        debug.print_symbols(tree.header.to_symbols())
        print("Huffman tree:")
        debug.print_tree(tree.root)
        print("Huffman codes:")
        debug.print_codes(tree.codes)
