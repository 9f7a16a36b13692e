"""
Presentation — Console output for the projmerge CLI
"""

from .symbols import SymbolSet, get_symbols, supports_unicode, safe_print, UNICODE, ASCII

__all__ = ["SymbolSet", "get_symbols", "supports_unicode", "safe_print", "UNICODE", "ASCII"]
