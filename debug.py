"""
Отладочный вывод: таблица частот, дерево и коды Хаффмана.
"""

from typing import Iterable, List

from huffman import HuffmanCode
from symbol_list import Node


def _printable(symbol: int) -> str:
    char = chr(symbol)
    return char if char.isprintable() and symbol < 128 else f"\\x{symbol:02x}"


def format_symbols(symbols: Iterable[Node]) -> str:
    lines = []
    for node in symbols:
        lines.append(f"[{_printable(node.symbol)}] - {node.frequency}")
    return "\n".join(lines)


def format_tree(root: Node) -> str:
    """Дерево, повёрнутое на 90 градусов влево: ветка high сверху"""
    lines: List[str] = []
    stack = [(root, 0, False)]

    while stack:
        node, level, visited = stack.pop()

        if node.is_leaf or visited:
            lines.append("     " * level + f"{node.frequency:5d}")
            continue

        stack.append((node.low, level + 1, False))
        stack.append((node, level, True))
        stack.append((node.high, level + 1, False))

    return "\n".join(lines)


def format_codes(codes: Iterable[HuffmanCode]) -> str:
    return "\n".join(f"[{_printable(code.symbol)}]\t{code.bits}" for code in codes)


def print_symbols(symbols: Iterable[Node]):
    print(format_symbols(symbols))


def print_tree(root: Node):
    print(format_tree(root))


def print_codes(codes: Iterable[HuffmanCode]):
    print(format_codes(codes))
