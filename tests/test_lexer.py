import pytest

from beefilter.lexer import Lexer, Token, TokenType

T = TokenType


def tokens(text, count):
    lexer = Lexer(text)
    return [(tok.literal, tok.token_type) for tok in (lexer.next_token() for _ in range(count))]


def test_lexer_with_accents():
    assert len("é".encode()) == 2
    assert tokens("é", 2) == [("é", T.WORD_STRING), ("", T.EOF)]


def test_combining_mark_is_one_grapheme():
    assert tokens("e\u0301", 2) == [("e\u0301", T.WORD_STRING), ("", T.EOF)]


def test_lexer_uuid():
    uid = "2c3d7839-1919-472f-858b-0534038b5463"
    assert tokens(uid, 1) == [(uid, T.UUID)]
    assert tokens("éééàå " + uid, 3) == [
        ("éééàå", T.WORD_STRING),
        (" ", T.BLANK),
        (uid, T.UUID),
    ]


def test_lexer_with_multibyte_char():
    text = (
        "ååååååååååååää∂ååååååååååååååååååååååååååååååååååååååååååååååååååååååååååä"
        " å  öööööö öööööö ööööö öööö"
    )
    result = list(Lexer(text))
    assert "".join(tok.literal for tok in result) == text
    assert [tok.literal for tok in result if tok.token_type is not T.BLANK][1:] == [
        "å",
        "öööööö",
        "öööööö",
        "ööööö",
        "öööö",
    ]


@pytest.mark.parametrize(
    "text, expected",
    [
        ("00.", [("00", T.INT), (".", T.STRING), ("", T.EOF)]),
        ("1y", [("1", T.INT), ("y", T.WORD_STRING)]),
        ("y1y", [("y1y", T.WORD_STRING)]),
        ("00", [("00", T.INT)]),
        ("+main", [("+", T.TAG_PLUS_PREFIX), ("main", T.WORD_STRING)]),
        ("-main", [("-", T.TAG_MINUS_PREFIX), ("main", T.WORD_STRING)]),
        ("- main", [("-", T.TAG_MINUS_PREFIX)]),
        ("end.after:", [("end.after:", T.FILTER_TOK_DATE_END_AFTER)]),
        ("end.before:", [("end.before:", T.FILTER_TOK_DATE_END_BEFORE)]),
        ("status:pending", [("status:", T.FILTER_STATUS), ("pending", T.WORD_STRING)]),
        (")(", [(")", T.RIGHT_PARENTHESIS), ("(", T.LEFT_PARENTHESIS)]),
        ("due:", [("due:", T.FILTER_TOK_DATE_DUE)]),
        ("due.after:", [("due.after:", T.FILTER_TOK_DATE_DUE_AFTER)]),
        ("due.before:", [("due.before:", T.FILTER_TOK_DATE_DUE_BEFORE)]),
        ("depends:", [("depends:", T.DEPENDS_ON)]),
        ("created.after:", [("created.after:", T.FILTER_TOK_DATE_CREATED_AFTER)]),
        ("created.before:", [("created.before:", T.FILTER_TOK_DATE_CREATED_BEFORE)]),
        ("project:", [("project:", T.PROJECT_PREFIX)]),
        ("proj:", [("proj:", T.PROJECT_PREFIX)]),
    ],
)
def test_lexer(text, expected):
    assert tokens(text, len(expected)) == expected


@pytest.mark.parametrize(
    "text, expected",
    [
        ("and", ("and", T.OPERATOR_AND)),
        ("or", ("or", T.OPERATOR_OR)),
        ("xor", ("xor", T.OPERATOR_XOR)),
        ("ands", ("ands", T.WORD_STRING)),
        ("ore", ("ore", T.WORD_STRING)),
        ("xore", ("xore", T.WORD_STRING)),
    ],
)
def test_lexer_single_operators(text, expected):
    assert tokens(text, 1) == [expected]


def test_lexer_operators_sequence():
    assert tokens("xore xor hand(", 7) == [
        ("xore", T.WORD_STRING),
        (" ", T.BLANK),
        ("xor", T.OPERATOR_XOR),
        (" ", T.BLANK),
        ("hand", T.WORD_STRING),
        ("(", T.LEFT_PARENTHESIS),
        ("", T.EOF),
    ]


def test_lexer_with_spaces():
    assert tokens("status:  pending", 3) == [
        ("status:", T.FILTER_STATUS),
        ("  ", T.BLANK),
        ("pending", T.WORD_STRING),
    ]
    assert tokens("\t)   (\n", 5) == [
        ("\t", T.BLANK),
        (")", T.RIGHT_PARENTHESIS),
        ("   ", T.BLANK),
        ("(", T.LEFT_PARENTHESIS),
        ("\n", T.BLANK),
    ]


def test_eof_is_repeated():
    lexer = Lexer("")
    assert lexer.next_token() == Token(T.EOF, "")
    assert lexer.next_token() == Token(T.EOF, "")


def test_iteration_stops_before_eof():
    assert list(Lexer("one +two")) == [
        Token(T.WORD_STRING, "one"),
        Token(T.BLANK, " "),
        Token(T.TAG_PLUS_PREFIX, "+"),
        Token(T.WORD_STRING, "two"),
    ]


def test_token_type_display_name():
    token = Lexer("or").next_token()
    assert str(token.token_type) == "OperatorOr"


def test_default_token_is_eof():
    assert Token() == Lexer("").next_token()