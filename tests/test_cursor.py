import pytest

from swiftdemangle.grammar.ast import Kind, node
from swiftdemangle.grammar.errors import (
    InvalidIdentifierEncoding, InvalidSubstitution, MalformedInput, SymbolTooComplex,
)
from swiftdemangle.grammar.identifier import WordTable, decode_identifier, decode_punycode
from swiftdemangle.grammar.substitution import SubstitutionTable, decode_multi_index, read_base62_index
from swiftdemangle.lex import Cursor, Guard, Limits


# ------------------------------
# Cursor
# ------------------------------

def test_cursor_peek_and_advance():
    cur = Cursor("ab")
    assert cur.peek() == "a"
    assert cur.peek_at(1) == "b"
    assert cur.peek_at(2) == ""
    assert cur.advance() == "a"
    assert cur.advance() == "b"
    assert cur.at_end()
    assert cur.peek() == ""


def test_cursor_advance_past_end_reports_offset():
    cur = Cursor("a")
    cur.advance()
    with pytest.raises(MalformedInput) as ei:
        cur.advance()
    assert ei.value.pos == 1


def test_cursor_push_back_and_next_if():
    cur = Cursor("yyF")
    assert cur.next_if("yy")
    assert not cur.next_if("y")
    cur.push_back()
    assert cur.rest() == "yF"
    with pytest.raises(MalformedInput):
        Cursor("x").push_back()


def test_cursor_expect():
    cur = Cursor("_x")
    cur.expect("_")
    with pytest.raises(MalformedInput):
        cur.expect("_")


def test_read_integer():
    cur = Cursor("123abc")
    assert cur.read_integer() == 123
    assert cur.peek() == "a"
    assert cur.read_integer_opt() is None
    assert cur.pos == 3


def test_read_integer_overflow():
    with pytest.raises(MalformedInput):
        Cursor("99999999999").read_integer()


def test_read_length_prefixed_span():
    cur = Cursor("4mainrest")
    assert cur.read_length_prefixed_span() == "main"
    assert cur.rest() == "rest"
    with pytest.raises(MalformedInput):
        Cursor("0x").read_length_prefixed_span()
    with pytest.raises(MalformedInput):
        Cursor("9ab").read_length_prefixed_span()


# ------------------------------
# Guard
# ------------------------------

def test_guard_counts_nodes():
    g = Guard(Cursor("x"), Limits(max_nodes=2))
    g.count_node()
    g.count_node()
    with pytest.raises(SymbolTooComplex):
        g.count_node()


def test_guard_recursion_depth():
    g = Guard(Cursor("x"), Limits(max_depth=2))
    with g:
        with g:
            with pytest.raises(SymbolTooComplex):
                g.enter()
    assert g.recursion == 0


# ------------------------------
# 식별자
# ------------------------------

def test_plain_identifier_records_words():
    words = WordTable()
    cur = Cursor("6FooBar")
    assert decode_identifier(cur, words) == "FooBar"
    assert len(words) == 2
    assert words[0] == "Foo"
    assert words[1] == "Bar"


def test_word_substitution_ending_with_zero():
    words = WordTable()
    decode_identifier(Cursor("6FooBar"), words)
    cur = Cursor("0bA0")
    assert decode_identifier(cur, words) == "BarFoo"
    assert cur.at_end()


def test_word_substitution_with_literal_chunk():
    words = WordTable()
    decode_identifier(Cursor("6FooBar"), words)
    cur = Cursor("0a3Baz0")
    assert decode_identifier(cur, words) == "FooBaz"
    assert cur.at_end()


def test_word_substitution_unknown_word():
    with pytest.raises(InvalidIdentifierEncoding):
        decode_identifier(Cursor("0c0"), WordTable())


def test_identifier_length_exceeds_input():
    with pytest.raises(InvalidIdentifierEncoding):
        decode_identifier(Cursor("4mai"), WordTable())


def test_punycode():
    assert decode_punycode("tda") == "ü"
    assert decode_identifier(Cursor("003tda"), WordTable()) == "ü"


def test_punycode_rejects_bad_digit():
    assert decode_punycode("t!a") is None


# ------------------------------
# 치환표
# ------------------------------

def test_substitution_table_resolve():
    subs = SubstitutionTable(Cursor("AB"))
    main = node(Kind.MODULE, "main")
    subs.record(main)
    assert subs.resolve(0) is main
    with pytest.raises(InvalidSubstitution):
        subs.resolve(1)


def test_multi_index_letters():
    assert decode_multi_index("a") == 0
    assert decode_multi_index("A") == 0
    assert decode_multi_index("c") == 2
    assert decode_multi_index("Z") == 25


def test_base62_index():
    assert read_base62_index(Cursor("_")) == 0
    assert read_base62_index(Cursor("0_")) == 1
    assert read_base62_index(Cursor("a_")) == 11
    assert read_base62_index(Cursor("10_")) == 63
    with pytest.raises(MalformedInput):
        read_base62_index(Cursor("12"))
