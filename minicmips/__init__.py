"""Syntax tree, scoped symbol table and MIPS assembly generation for a small C-like language."""

__version__ = "0.1.0"
__all__ = ["syntax_tree", "symtable", "emit"]