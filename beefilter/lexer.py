"""Tokenizer for task filter expressions.

The lexer works on extended grapheme clusters rather than code points, so a
letter followed by combining marks is treated as one character.
"""

from __future__ import annotations

import logging
import unicodedata
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

import regex

logger = logging.getLogger(__name__)

_UUID_PATTERN = regex.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)
_UUID_LENGTH = 36


class TokenType(Enum):
    """Kinds of token produced by the lexer."""

    FILTER_TOK_DATE_DUE = "FilterTokDateDue"
    FILTER_TOK_DATE_DUE_BEFORE = "FilterTokDateDueBefore"
    FILTER_TOK_DATE_DUE_AFTER = "FilterTokDateDueAfter"
    FILTER_TOK_DATE_CREATED_BEFORE = "FilterTokDateCreatedBefore"
    FILTER_TOK_DATE_CREATED_AFTER = "FilterTokDateCreatedAfter"
    FILTER_TOK_DATE_END_BEFORE = "FilterTokDateEndBefore"
    FILTER_TOK_DATE_END_AFTER = "FilterTokDateEndAfter"
    DEPENDS_ON = "DependsOn"
    STRING = "String"
    WORD_STRING = "WordString"
    TAG_PLUS_PREFIX = "TagPlusPrefix"
    TAG_MINUS_PREFIX = "TagMinusPrefix"
    FILTER_STATUS = "FilterStatus"
    INT = "Int"
    UUID = "Uuid"
    EOF = "Eof"
    LEFT_PARENTHESIS = "LeftParenthesis"
    RIGHT_PARENTHESIS = "RightParenthesis"
    PROJECT_PREFIX = "ProjectPrefix"
    OPERATOR_AND = "OperatorAnd"
    OPERATOR_OR = "OperatorOr"
    OPERATOR_XOR = "OperatorXor"
    BLANK = "Blank"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Token:
    """A token: its kind and the exact text it was read from."""

    token_type: TokenType = TokenType.EOF
    literal: str = ""


# Keywords recognised as fixed prefixes, checked in this order.
_KEYWORDS: tuple[tuple[str, TokenType], ...] = (
    ("status:", TokenType.FILTER_STATUS),
    ("created.after:", TokenType.FILTER_TOK_DATE_CREATED_AFTER),
    ("created.before:", TokenType.FILTER_TOK_DATE_CREATED_BEFORE),
    ("end.after:", TokenType.FILTER_TOK_DATE_END_AFTER),
    ("end.before:", TokenType.FILTER_TOK_DATE_END_BEFORE),
    ("project:", TokenType.PROJECT_PREFIX),
    ("due:", TokenType.FILTER_TOK_DATE_DUE),
    ("due.before:", TokenType.FILTER_TOK_DATE_DUE_BEFORE),
    ("due.after:", TokenType.FILTER_TOK_DATE_DUE_AFTER),
    ("proj:", TokenType.PROJECT_PREFIX),
    ("depends:", TokenType.DEPENDS_ON),
)

_OPERATORS: tuple[tuple[str, TokenType], ...] = (
    ("and", TokenType.OPERATOR_AND),
    ("or", TokenType.OPERATOR_OR),
    ("xor", TokenType.OPERATOR_XOR),
)


def _nfc(text: str) -> str:
    return unicodedata.normalize("NFC", text)


def _is_segment_character(ch: str) -> bool:
    return ch.isspace() or ch in "()\0"


def _is_segment_grapheme(grapheme: str) -> bool:
    return all(_is_segment_character(c) for c in _nfc(grapheme))


def _ends_word(grapheme: str) -> bool:
    return all(_is_segment_character(c) or c in "-+" for c in _nfc(grapheme))


def _is_blank(grapheme: str) -> bool:
    return all(c.isspace() for c in _nfc(grapheme))


class Lexer:
    """Splits a filter expression into tokens, one call to next_token at a time."""

    def __init__(self, text: str) -> None:
        self._graphemes: list[str] = regex.findall(r"\X", text)
        self._position = 0
        self._read_position = 0
        self._ch: str | None = None
        self._read_char()

    def __iter__(self) -> Iterator[Token]:
        """Yield the remaining tokens, stopping before the end-of-input token."""
        while True:
            token = self.next_token()
            if token.token_type is TokenType.EOF:
                return
            yield token

    def _read_char(self) -> None:
        if self._read_position >= len(self._graphemes):
            self._ch = None
        else:
            self._ch = self._graphemes[self._read_position]
        self._position = self._read_position
        self._read_position += 1

    def _is_digit(self) -> bool:
        return self._ch is not None and self._ch[0] in "0123456789"

    def _read_int(self) -> str:
        digits = []
        while self._is_digit():
            digits.append(self._ch)
            self._read_char()
        return "".join(digits)

    def _uuid_candidate(self) -> str | None:
        end = self._position + _UUID_LENGTH
        if end > len(self._graphemes):
            return None
        return "".join(self._graphemes[self._position:end])

    def _is_uuid(self) -> bool:
        candidate = self._uuid_candidate()
        return candidate is not None and _UUID_PATTERN.fullmatch(candidate) is not None

    def _read_uuid(self) -> str:
        candidate = self._uuid_candidate()
        if candidate is None or _UUID_PATTERN.fullmatch(candidate) is None:
            raise ValueError("Not a valid UUID string")
        end = self._position + _UUID_LENGTH
        self._position = end
        self._read_position = end
        self._ch = self._graphemes[end] if end < len(self._graphemes) else None
        return candidate

    def _is_word_character(self) -> bool:
        return self._ch is not None and all(c.isalpha() for c in _nfc(self._ch))

    def _match_keyword(self, word: str) -> bool:
        return "".join(self._graphemes[self._position:]).startswith(word)

    def _read_next_word(self) -> str:
        chars = []
        while self._ch is not None and not _ends_word(self._ch):
            chars.append(self._ch)
            self._read_char()
        return "".join(chars)

    def _read_word(self, word: str) -> str:
        if not self._match_keyword(word):
            raise RuntimeError(f"expected {word!r} at position {self._position}")
        chars = []
        for _ in word:
            if self._ch is not None:
                chars.append(self._ch)
            self._read_char()
        return "".join(chars)

    def _read_operator(self, word: str, token_type: TokenType) -> Token:
        literal = self._read_word(word)
        if self._ch is not None and not _is_segment_grapheme(self._ch):
            literal += self._read_next_word()
            token_type = TokenType.WORD_STRING
        logger.debug("Token %r is a %s", literal, token_type)
        return Token(token_type, literal)

    def next_token(self) -> Token:
        """Read and return the next token; at the end of input return an EOF token."""
        blanks = []
        while self._ch is not None and _is_blank(self._ch):
            blanks.append(self._ch)
            self._read_char()
        if blanks:
            return Token(TokenType.BLANK, "".join(blanks))

        ch = self._ch
        if ch is None:
            return Token(TokenType.EOF, "")

        if self._is_uuid():
            return Token(TokenType.UUID, self._read_uuid())
        if self._is_digit():
            return Token(TokenType.INT, self._read_int())
        if ch == "+":
            self._read_char()
            return Token(TokenType.TAG_PLUS_PREFIX, "+")
        if ch == "-":
            self._read_char()
            return Token(TokenType.TAG_MINUS_PREFIX, "-")
        for word, token_type in _OPERATORS:
            if self._match_keyword(word):
                return self._read_operator(word, token_type)
        for word, token_type in _KEYWORDS:
            if self._match_keyword(word):
                return Token(token_type, self._read_word(word))
        if ch == ")":
            self._read_char()
            return Token(TokenType.RIGHT_PARENTHESIS, ")")
        if ch == "(":
            self._read_char()
            return Token(TokenType.LEFT_PARENTHESIS, "(")
        if self._is_word_character():
            return Token(TokenType.WORD_STRING, self._read_next_word())
        return Token(TokenType.STRING, self._read_next_word())