"""
Упорядоченная последовательность символов и их частот.

Пока дерево не построено, последовательность хранит листья (символ + частота).
При построении дерева в неё вставляются внутренние узлы, и в конце
в ней остаётся только корень.
"""

from typing import Callable, Iterator, List, Optional, Tuple, Union
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Leaf:
    symbol: int
    frequency: int = 0

    is_leaf = True

    def __repr__(self):
        return f"Leaf({self.symbol:02x}, freq={self.frequency})"


@dataclass(frozen=True)
class Internal:
    low: 'Node'
    high: 'Node'
    frequency: int = field(init=False)

    # У внутреннего узла нет своего символа, при сортировке он считается нулём
    symbol = 0
    is_leaf = False

    def __post_init__(self):
        object.__setattr__(self, 'frequency', self.low.frequency + self.high.frequency)

    def __repr__(self):
        return f"Internal(freq={self.frequency})"


Node = Union[Leaf, Internal]
SortKey = Callable[[Node], Tuple]


def by_frequency(node: Node) -> Tuple[int, int]:
    """По возрастанию частоты, при равенстве - по возрастанию символа"""
    return (node.frequency, node.symbol)


def by_symbol(node: Node) -> Tuple[int]:
    return (node.symbol,)


class SymbolList:
    def __init__(self, nodes: Optional[List[Node]] = None):
        self._nodes: List[Node] = list(nodes) if nodes else []

    def __len__(self):
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes)

    def __getitem__(self, position: int) -> Node:
        return self._nodes[position]

    def __repr__(self):
        return f"SymbolList({self._nodes!r})"

    def front(self) -> Optional[Node]:
        return self._nodes[0] if self._nodes else None

    def find(self, symbol: int) -> Optional[Node]:
        for node in self._nodes:
            if node.is_leaf and node.symbol == symbol:
                return node
        return None

    def insert(self, node: Node, position: Optional[int] = None):
        if position is None:
            self._nodes.append(node)
        else:
            self._nodes.insert(position, node)

    def remove(self, position: int = 0) -> Node:
        if not self._nodes:
            raise IndexError("remove from empty SymbolList")
        return self._nodes.pop(position)

    def sort(self, key: SortKey = by_frequency):
        self._nodes = _merge_sort(self._nodes, key)

    def frequencies(self) -> List[Tuple[int, int]]:
        return [(node.symbol, node.frequency) for node in self._nodes]


def _merge_sort(nodes: List[Node], key: SortKey) -> List[Node]:
    if len(nodes) <= 1:
        return list(nodes)

    middle = len(nodes) // 2
    left = _merge_sort(nodes[:middle], key)
    right = _merge_sort(nodes[middle:], key)

    merged: List[Node] = []
    i = j = 0
    while i < len(left) and j < len(right):
        # При равенстве ключей берём из левой половины: сортировка устойчива
        if key(left[i]) <= key(right[j]):
            merged.append(left[i])
            i += 1
        else:
            merged.append(right[j])
            j += 1

    merged.extend(left[i:])
    merged.extend(right[j:])
    return merged
