"""Tokenize task filter expressions and match tasks against filter trees."""

__version__ = "0.1.0"

__all__ = ["filters", "lexer"]