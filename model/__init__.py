"""Syntax, symbol and record models shared by the loader and the scanner."""

from .records import ConstantRecord
from .objects import SymbolOracle, SymbolTable

__all__ = ["ConstantRecord", "SymbolOracle", "SymbolTable"]
