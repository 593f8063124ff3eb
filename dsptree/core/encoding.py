# dsptree/core/encoding.py
"""
Conversion between legacy 8-bit / multi-byte charsets and canonical text.

Raw bytes travel through this module as "byte-preserving" strings: the latin-1
decoding of the bytes, where each character's code point equals one byte.
"""
from enum import Enum
from typing import List, Optional, Union
from loguru import logger

from .models import Diagnostic, ErrorKind, Outcome

class FileEncoding(str, Enum):
    UTF8 = "utf8" # Canonical
    CP949 = "cp949"
    EUC_KR = "euc-kr"

    def __str__(self) -> str:
        return self.value

CANONICAL_ENCODING = FileEncoding.UTF8.value
BYTE_PRESERVING_CODEC = "latin-1"

EncodingName = Union[FileEncoding, str]

def _name(encoding: EncodingName) -> str:
    if isinstance(encoding, FileEncoding):
        return encoding.value
    # Spellings like "UTF-8" or "utf_8" all mean the canonical encoding
    if encoding.lower().replace("-", "").replace("_", "") == CANONICAL_ENCODING:
        return CANONICAL_ENCODING
    return encoding

def is_canonical(encoding: EncodingName) -> bool:
    return _name(encoding) == CANONICAL_ENCODING

def bytes_to_byte_string(data: bytes) -> str:
    return data.decode(BYTE_PRESERVING_CODEC)

def byte_string_to_bytes(text: str) -> bytes:
    return text.encode(BYTE_PRESERVING_CODEC)

def is_byte_string(text: str) -> bool:
    """True if every character fits in one byte, i.e. the text may be raw bytes."""
    return all(ord(ch) < 0x100 for ch in text)

def try_convert_encoding(text: str, from_encoding: EncodingName,
                         to_encoding: EncodingName = CANONICAL_ENCODING) -> Outcome[str]:
    """
    Converts `text` between encodings, never raising.

    - legacy -> canonical: `text` holds raw bytes (byte-preserving), decoded as `from_encoding`.
    - canonical -> legacy: encoded to `to_encoding`, returned as a byte-preserving string.
    - legacy -> legacy: encoded as `from_encoding`, decoded as `to_encoding`.

    On failure the original text is returned with an ENCODING_CONVERSION_FAILURE diagnostic.
    """
    source, target = _name(from_encoding), _name(to_encoding)
    if not text or source == target:
        return Outcome(text)

    try:
        if target == CANONICAL_ENCODING:
            converted = byte_string_to_bytes(text).decode(source)
        elif source == CANONICAL_ENCODING:
            converted = bytes_to_byte_string(text.encode(target))
        else:
            converted = text.encode(source).decode(target)
        return Outcome(converted)
    except (UnicodeError, LookupError) as e:
        logger.warning(f"Error converting encoding {source} -> {target}: {e}")
        return Outcome(text, [Diagnostic(ErrorKind.ENCODING_CONVERSION_FAILURE,
                                         f"Could not convert {text!r} from {source} to {target}: {e}")])

def convert_encoding(text: str, from_encoding: EncodingName,
                     to_encoding: EncodingName = CANONICAL_ENCODING) -> str:
    """Total form of try_convert_encoding: returns the converted or the original text."""
    return try_convert_encoding(text, from_encoding, to_encoding).value

def decode_bytes(data: bytes, encoding: EncodingName) -> Outcome[str]:
    """Decodes file content read from disk into canonical text."""
    if not is_canonical(encoding):
        return try_convert_encoding(bytes_to_byte_string(data), encoding, CANONICAL_ENCODING)
    try:
        return Outcome(data.decode("utf-8-sig"))
    except UnicodeDecodeError as e:
        logger.warning(f"Content is not valid UTF-8, keeping raw bytes: {e}")
        return Outcome(bytes_to_byte_string(data), [Diagnostic(ErrorKind.ENCODING_CONVERSION_FAILURE,
                                                               f"Content is not valid UTF-8: {e}")])

def to_display_name(name: str, encoding: EncodingName,
                    diagnostics: Optional[List[Diagnostic]] = None) -> str:
    """
    Display name for a file or folder name under the configured encoding.

    Names already holding characters beyond one byte are canonical text and pass through.
    """
    if is_canonical(encoding) or not is_byte_string(name):
        return name
    outcome = try_convert_encoding(name, encoding, CANONICAL_ENCODING)
    if diagnostics is not None:
        diagnostics.extend(outcome.diagnostics)
    return outcome.value

def convert_file_name(name: str, encoding: EncodingName) -> str:
    return to_display_name(name, encoding)

def convert_folder_name(name: str, encoding: EncodingName) -> str:
    # Same rule as file names for every non-canonical encoding
    return to_display_name(name, encoding)
