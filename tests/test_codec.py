#!/usr/bin/env python3
"""
Tests for the localization line codec.

Tests:
1. Entry lines with and without version, annotation and comment
2. Lines that are not entries (header, comments, malformed)
3. Quotes inside text
4. Annotation interpretation
5. Serialization and parse/serialize round trip
6. File level parsing and byte-exact re-rendering
"""

import logging

import pytest

from pdxsync.codec import (
    annotation_mark,
    parse_content,
    parse_line,
    render_file,
    serialize_line,
    split_lines,
)
from pdxsync.model import EntryMark, Localization, LocalizationFile


def test_parse_simple_entry():
    """Test 1: key, version and text."""
    match = parse_line(' GREETING:0 "Hello [GetName]"')
    assert match is not None
    assert match.key == "GREETING"
    assert match.version == "0"
    assert match.text == "Hello [GetName]"
    assert match.annotation is None
    assert match.comment is None


def test_parse_without_version_and_with_tabs():
    match = parse_line('\tFAREWELL:   "Goodbye"\n')
    assert match.key == "FAREWELL"
    assert match.version is None
    assert match.text == "Goodbye"


def test_parse_annotation_and_comment():
    match = parse_line(' KEY: "Hallo" #deepl:2839273652 # reviewed\r\n')
    assert match.text == "Hallo"
    assert match.annotation == "2839273652"
    assert match.comment == "# reviewed"


def test_parse_skipped_annotation():
    match = parse_line(' KEY: "Hello" #deepl:skipped')
    assert match.annotation == "skipped"


def test_parse_annotation_directly_followed_by_comment():
    match = parse_line(' KEY: "Hello" #deepl:42#note')
    assert match.annotation == "42"
    assert match.comment == "#note"


def test_parse_plain_comment_is_not_annotation():
    match = parse_line(' KEY:1 "Hello" # TODO check wording')
    assert match.annotation is None
    assert match.comment == "# TODO check wording"


@pytest.mark.parametrize("line", [
    "l_english:",
    "\ufeffl_english:",
    "",
    "   ",
    " # KEY:0 \"commented out\"",
    " KEY:0 no quotes",
    ' KEY:0 "unterminated',
    ' :0 "no key"',
    ' KEY:0 "text" trailing garbage',
])
def test_not_an_entry(line):
    """Test 2: everything else is passed through."""
    assert parse_line(line) is None


def test_inner_quotes_are_part_of_text():
    """Test 3: game files use unescaped quotes inside text."""
    match = parse_line(' KEY:0 "He said "hi" to me"')
    assert match.text == 'He said "hi" to me'


def test_quoted_formatting_code_is_part_of_text():
    match = parse_line(' WAR:0 "The "#Y Great#!" War"')
    assert match.text == 'The "#Y Great#!" War'
    assert match.annotation is None
    assert match.comment is None


def test_quoted_formatting_code_with_annotation_and_comment():
    match = parse_line(' WAR: "Der "#Y Grosse#!" Krieg" #deepl:42 # reviewed')
    assert match.text == 'Der "#Y Grosse#!" Krieg'
    assert match.annotation == "42"
    assert match.comment == "# reviewed"


def test_quoted_formatting_code_with_plain_comment():
    match = parse_line(' WAR:0 "The "#Y Great#!" War" # title')
    assert match.text == 'The "#Y Great#!" War'
    assert match.comment == "# title"


def test_escaped_quote_inside_text():
    match = parse_line(r' KEY:0 "a \" b" #deepl:7')
    assert match.text == r'a \" b'
    assert match.annotation == "7"


def test_quotes_in_trailing_comment_do_not_extend_text():
    match = parse_line(' KEY: "text" # a "quoted" note')
    assert match.text == "text"
    assert match.comment == '# a "quoted" note'


def test_empty_text():
    match = parse_line(' EMPTY:0 ""')
    assert match.text == ""


def test_annotation_mark():
    """Test 4: token interpretation."""
    assert annotation_mark(None) == (EntryMark.MANUAL, 0)
    assert annotation_mark("skipped") == (EntryMark.SKIPPED, 0)
    assert annotation_mark("12345") == (EntryMark.TRANSLATED, 12345)
    assert annotation_mark("0") == (EntryMark.MANUAL, 0)


def test_annotation_mark_invalid_token_is_manual(caplog):
    with caplog.at_level(logging.WARNING, logger="pdxsync.codec"):
        assert annotation_mark("abc", "foo_l_german.yml") == (EntryMark.MANUAL, 0)
    assert "foo_l_german.yml" in caplog.text


def test_serialize_manual_entry_has_no_annotation():
    """Test 5: serialization."""
    line = serialize_line(Localization(key="KEY", text="Hand made"))
    assert line == ' KEY: "Hand made"'


def test_serialize_translated_entry():
    line = serialize_line(Localization(
        key="KEY", text="Hallo", mark=EntryMark.TRANSLATED, compare_checksum=99,
    ))
    assert line == ' KEY: "Hallo" #deepl:99'


def test_serialize_skipped_and_pending_entries():
    skipped = Localization(key="A", text="Hello", mark=EntryMark.SKIPPED)
    pending = Localization(key="B", text="Hello", mark=EntryMark.PENDING)
    assert serialize_line(skipped) == ' A: "Hello" #deepl:skipped'
    assert serialize_line(pending) == ' B: "Hello"'


def test_serialize_translated_zero_checksum_reads_back_as_manual():
    """0 is the reserved manual value."""
    entry = Localization(key="E", text="", mark=EntryMark.TRANSLATED, compare_checksum=0)
    assert serialize_line(entry) == ' E: ""'


def test_serialize_keeps_entry_on_one_line():
    entry = Localization(key="KEY", text="line one\nline two")
    assert serialize_line(entry) == ' KEY: "line one\\nline two"'


def test_round_trip():
    entries = [
        Localization(key="A", text="Hello [GetName]"),
        Localization(key="B", text="Cost: $VALUE$ #bold gold#!", mark=EntryMark.TRANSLATED,
                     compare_checksum=4000000000),
        Localization(key="C", text='Quote "inside"', mark=EntryMark.SKIPPED),
        Localization(key="D.with.dots", text=r"escaped \" quote and \n newline"),
        Localization(key="WAR", text='The "#Y Great#!" War', mark=EntryMark.TRANSLATED,
                     compare_checksum=17),
        Localization(key="TITLE", text='"#bold Hi#!" # not a comment'),
    ]
    for entry in entries:
        match = parse_line(serialize_line(entry))
        mark, compare_checksum = annotation_mark(match.annotation)
        parsed = Localization(key=match.key, text=match.text, mark=mark,
                              compare_checksum=compare_checksum)
        assert parsed == entry


def test_split_lines_keeps_endings():
    assert split_lines("a\r\nb\nc") == ["a\r\n", "b\n", "c"]
    assert split_lines("a\n") == ["a\n"]
    assert split_lines("") == []


SAMPLE = (
    "\ufeffl_english:\r\n"
    " # Intro texts\r\n"
    " INTRO_TITLE:0 \"The Beginning\"\r\n"
    " INTRO_DESC:1 \"[ROOT.GetName] rises\" #deepl:123 # note\r\n"
    "\r\n"
    " BROKEN line without quotes\r\n"
)


def test_parse_content_layout():
    """Test 6: file level parsing."""
    parsed = parse_content(SAMPLE, "intro_l_english.yml")
    assert parsed.bom is True
    assert parsed.newline == "\r\n"
    assert list(parsed.localizations) == ["INTRO_TITLE", "INTRO_DESC"]
    assert len(parsed.lines) == 6
    assert parsed.localizations["INTRO_DESC"].mark is EntryMark.TRANSLATED
    assert parsed.localizations["INTRO_DESC"].compare_checksum == 123


def _file_from(content):
    parsed = parse_content(content)
    return LocalizationFile(
        key="intro_",
        filename="intro_l_english.yml",
        path=None,
        localizations=parsed.localizations,
        lines=parsed.lines,
        newline=parsed.newline,
        bom=parsed.bom,
        exists=True,
    )


def test_render_unchanged_file_is_byte_identical():
    assert render_file(_file_from(SAMPLE)) == SAMPLE[1:]


def test_render_modified_entry_keeps_line_ending():
    localization_file = _file_from(SAMPLE)
    localization_file.localizations["INTRO_TITLE"].mark_translated("Der Anfang", 555)
    rendered = render_file(localization_file)
    assert ' INTRO_TITLE: "Der Anfang" #deepl:555\r\n' in rendered
    # untouched lines keep their version numbers and comments
    assert ' INTRO_DESC:1 "[ROOT.GetName] rises" #deepl:123 # note\r\n' in rendered


def test_add_inserts_after_anchor():
    localization_file = _file_from("l_german:\n A: \"a\"\n C: \"c\"\n")
    localization_file.add(
        Localization(key="B", text="b", mark=EntryMark.TRANSLATED, compare_checksum=5),
        after="A",
    )
    assert render_file(localization_file) == 'l_german:\n A: "a"\n B: "b" #deepl:5\n C: "c"\n'
    assert localization_file.modified is True


def test_add_after_last_line_without_newline():
    localization_file = _file_from('l_german:\n A: "a"')
    localization_file.add(Localization(key="B", text="b", mark=EntryMark.SKIPPED))
    assert render_file(localization_file) == 'l_german:\n A: "a"\n B: "b" #deepl:skipped\n'
