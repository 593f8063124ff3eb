# dsptree/config/schema.py
from pydantic import BaseModel, Field, field_validator
from typing import Set

from ..core.encoding import FileEncoding

class ScanOptions(BaseModel):
    # Lowercase extensions with a leading dot, e.g. ".cpp"
    extensions: Set[str] = Field(default_factory=lambda: {
        # Workspace / project
        ".dsp", ".dsw",
        # Sources and headers
        ".c", ".cpp", ".cxx", ".h", ".hpp", ".hxx",
        # Resources
        ".rc", ".ico", ".bmp", ".cur",
        # Module definition / interface files
        ".def", ".odl", ".idl",
    })
    show_all_files: bool = False

    @field_validator("extensions", mode="before")
    @classmethod
    def _normalize_extensions(cls, value):
        if isinstance(value, str):
            value = [value]
        normalized = set()
        for ext in value or []:
            ext = str(ext).strip().lower()
            if not ext: continue
            normalized.add(ext if ext.startswith(".") else f".{ext}")
        return normalized

class AppConfig(BaseModel):
    file_encoding: FileEncoding = FileEncoding.UTF8 # Encoding of legacy names and .dsp content
    scan: ScanOptions = Field(default_factory=ScanOptions)
    log_level: str = "INFO" # DEBUG, INFO, WARNING, ...
