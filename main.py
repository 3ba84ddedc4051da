"""
Командная строка для кодека Хаффмана.
"""

import argparse
import sys
from archiver import Archiver


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='huff',
        description='Byte-level Huffman codec',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  huff -c notes.txt            -> notes.txt.huf
  huff -d notes.txt.huf        -> notes-recovered.txt
  huff -d blob.huf -o blob.bin
        """
    )

    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument('-c', '--compress', action='store_true',
                      help='compress file using Huffman codec')
    mode.add_argument('-d', '--decompress', action='store_true',
                      help='decompress .huf archive using Huffman codec')

    parser.add_argument('file', help='File to process')
    parser.add_argument('-o', '--output', help='Output path')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Print symbol table, tree and codes')
    return parser


def main(argv=None) -> int:
    parser = build_parser()

    if argv is None:
        argv = sys.argv[1:]

    if not argv:
        parser.print_help()
        return 0

    args = parser.parse_args(argv)
    archiver = Archiver(verbose=args.verbose)

    try:
        if args.compress:
            archiver.compress_file(args.file, args.output)

        elif args.decompress:
            archiver.decompress_file(args.file, args.output)

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
