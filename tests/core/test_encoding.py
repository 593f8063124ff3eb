# tests/core/test_encoding.py
import pytest

from dsptree.core.encoding import (FileEncoding, bytes_to_byte_string, convert_encoding, convert_file_name,
                                   convert_folder_name, decode_bytes, is_canonical, to_display_name,
                                   try_convert_encoding)
from dsptree.core.models import ErrorKind

KOREAN = "한글 폴더"

def raw(text: str, codec: str) -> str:
    """Byte-preserving form of `text` encoded with `codec`."""
    return bytes_to_byte_string(text.encode(codec))

def test_same_encoding_is_identity():
    assert convert_encoding("abc", "utf8", "utf8") == "abc"
    assert convert_encoding("\xc7\xd1", "cp949", "cp949") == "\xc7\xd1"

def test_same_encoding_skips_validation_of_unknown_codec():
    outcome = try_convert_encoding("abc", "no-such-codec", "no-such-codec")
    assert outcome.value == "abc"
    assert outcome.ok

def test_empty_text_passes_through():
    assert convert_encoding("", "cp949") == ""

@pytest.mark.parametrize("encoding", [FileEncoding.CP949, FileEncoding.EUC_KR, "cp949", "euc-kr"])
def test_legacy_to_canonical(encoding):
    assert convert_encoding(raw(KOREAN, "cp949"), encoding) == KOREAN

def test_canonical_to_legacy_returns_byte_string():
    converted = convert_encoding(KOREAN, FileEncoding.UTF8, FileEncoding.CP949)
    assert converted == raw(KOREAN, "cp949")
    assert all(ord(ch) < 0x100 for ch in converted)

def test_round_trip_between_canonical_and_legacy():
    legacy = convert_encoding(KOREAN, "utf8", "cp949")
    assert convert_encoding(legacy, "cp949", "utf8") == KOREAN

    raw_text = raw(KOREAN, "euc-kr")
    canonical = convert_encoding(raw_text, "euc-kr", "utf8")
    assert convert_encoding(canonical, "utf8", "euc-kr") == raw_text

def test_foreign_to_foreign_conversion():
    # cp949 is a superset of euc-kr for these characters
    assert convert_encoding(KOREAN, "cp949", "euc-kr") == KOREAN

def test_unrepresentable_character_returns_original():
    outcome = try_convert_encoding("snow ☃ and \U0001F600", "utf8", "cp949")
    assert outcome.value == "snow ☃ and \U0001F600"
    assert outcome.has(ErrorKind.ENCODING_CONVERSION_FAILURE)

def test_invalid_byte_sequence_returns_original():
    broken = "\xc7" # Lead byte without its trail byte
    outcome = try_convert_encoding(broken, "cp949")
    assert outcome.value == broken
    assert [d.kind for d in outcome.diagnostics] == [ErrorKind.ENCODING_CONVERSION_FAILURE]

def test_unknown_codec_returns_original():
    outcome = try_convert_encoding("\xb1\xb8", "no-such-codec")
    assert outcome.value == "\xb1\xb8"
    assert not outcome.ok

def test_conversion_failure_is_logged(mocker):
    mock_logger = mocker.patch("dsptree.core.encoding.logger")
    convert_encoding("\xc7", "cp949")
    assert mock_logger.warning.call_count == 1

@pytest.mark.parametrize("name", ["utf8", "UTF-8", "utf_8", FileEncoding.UTF8])
def test_canonical_spellings(name):
    assert is_canonical(name)
    assert convert_encoding("abc", name, "utf8") == "abc"

def test_display_name_under_canonical_encoding_is_unchanged():
    assert to_display_name("\xc7\xd1", FileEncoding.UTF8) == "\xc7\xd1"

def test_display_name_decodes_raw_legacy_name():
    assert to_display_name(raw("한글", "cp949"), FileEncoding.CP949) == "한글"

def test_display_name_leaves_decoded_text_alone():
    diagnostics = []
    assert to_display_name("한글", FileEncoding.CP949, diagnostics) == "한글"
    assert diagnostics == []

def test_display_name_collects_diagnostics():
    diagnostics = []
    assert to_display_name("\xc7", FileEncoding.CP949, diagnostics) == "\xc7"
    assert len(diagnostics) == 1

def test_file_and_folder_names_follow_the_same_rule():
    name = raw("소스", "euc-kr")
    for encoding in (FileEncoding.CP949, FileEncoding.EUC_KR):
        assert convert_file_name(name, encoding) == convert_folder_name(name, encoding) == "소스"
    assert convert_file_name(name, FileEncoding.UTF8) == convert_folder_name(name, FileEncoding.UTF8) == name

def test_decode_bytes_utf8():
    outcome = decode_bytes("# Begin Group \"한글\"".encode("utf-8"), FileEncoding.UTF8)
    assert outcome.value == "# Begin Group \"한글\""
    assert outcome.ok

def test_decode_bytes_strips_utf8_bom():
    assert decode_bytes(b"\xef\xbb\xbfSOURCE=a.c", "utf8").value == "SOURCE=a.c"

def test_decode_bytes_invalid_utf8_keeps_raw_bytes():
    outcome = decode_bytes(b"SOURCE=\xff.c", FileEncoding.UTF8)
    assert outcome.value == "SOURCE=\xff.c"
    assert outcome.has(ErrorKind.ENCODING_CONVERSION_FAILURE)

def test_decode_bytes_legacy():
    assert decode_bytes(KOREAN.encode("cp949"), FileEncoding.CP949).value == KOREAN

def test_file_encoding_str_is_its_value():
    assert str(FileEncoding.EUC_KR) == "euc-kr"
    assert f"{FileEncoding.CP949}" == "cp949"
