import pytest

import json_parser as jp
from diagnostics import Fatal, Mismatch


def test_escape_sequence_decodes():
    value, pos = jp.parse_string('"abc\\n \\u1234"', 0)
    assert value == "abc\n \u1234"
    assert pos == 14

def test_empty_string():
    assert jp.parse_string('""rest', 0) == ("", 2)

def test_every_simple_escape():
    doc = '["\\"\\\\\\/\\b\\f\\n\\r\\t"]'
    assert jp.parse(doc) == ['"\\/\b\f\n\r\t']

def test_surrogate_pair_assembles():
    assert jp.parse('["\\ud83d\\ude00"]') == ["\U0001F600"]

def test_lone_high_surrogate_rejected():
    with pytest.raises(jp.JsonSyntaxError) as ei:
        jp.parse('["\\uD800"]')
    assert "hex_char" in ei.value.contexts
    assert "a low surrogate escape" in str(ei.value)

def test_lone_low_surrogate_rejected():
    with pytest.raises(jp.JsonSyntaxError) as ei:
        jp.parse('["\\uDC00x"]')
    assert ei.value.contexts[:3] == ["hex_char", "escape", "string"]

def test_invalid_hex_escape_reports_position():
    bad = '["\\u123g"]'
    with pytest.raises(jp.JsonSyntaxError) as ei:
        jp.parse(bad)
    assert "expected 4 hex digits" in str(ei.value)
    assert ei.value.position == 4
    assert "hex_char" in ei.value.contexts

def test_invalid_single_escape():
    with pytest.raises(jp.JsonSyntaxError) as ei:
        jp.parse('["\\q"]')
    assert "expected an escape sequence, found 'q'" in str(ei.value)
    assert ei.value.contexts[0] == "escape"

def test_unterminated_string():
    with pytest.raises(jp.JsonSyntaxError) as ei:
        jp.parse('["abc')
    assert "got end of input" in str(ei.value)
    assert "string" in ei.value.contexts

def test_raw_control_character_rejected():
    with pytest.raises(jp.JsonSyntaxError) as ei:
        jp.parse('["a\tb"]')
    assert ei.value.position == 3
    assert "string" in ei.value.contexts

def test_unicode_passes_through_unescaped():
    assert jp.parse('["héllo ☃"]') == ["héllo ☃"]

def test_short_unicode_escape_at_end_is_fatal():
    with pytest.raises(jp.InternalParseError) as ei:
        jp.parse('["\\u12')
    assert str(ei.value) == "failure"

def test_short_unicode_escape_before_end_is_syntax_error():
    with pytest.raises(jp.JsonSyntaxError):
        jp.parse('["\\u12"]')

def test_trailing_backslash_direct_call():
    with pytest.raises(Fatal):
        jp.parse_string('"\\', 0)

def test_parse_string_requires_opening_quote():
    with pytest.raises(Mismatch) as ei:
        jp.parse_string("abc", 0)
    assert ei.value.position == 0
    assert ei.value.frames[-1].label == "string"
