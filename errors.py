"""
Исключения кодека Хаффмана.
"""


class HuffmanError(Exception):
    pass


class InputUnreadableError(HuffmanError, OSError):
    """Исходный файл не найден или не читается"""


class MalformedArchiveError(HuffmanError, ValueError):
    """Повреждённый или обрезанный архив"""


class UnsupportedInputError(HuffmanError, ValueError):
    """Данные, которые кодек не может представить"""
