"""
nginxlog - nginx access log parser

Parses access log lines into typed entries using nginx-style ``$name``
format templates, supplied literally or extracted from an nginx
configuration file.
"""

__version__ = "0.1.0"

from .core.compiler import CompiledFormat, compile_format, tokenize_template
from .core.entry import Entry
from .core.exceptions import (
    FieldNotFound,
    FieldParseError,
    InvalidFormat,
    IoError,
    LineFormatMismatch,
    NginxFormatNotFound,
    NginxLogError,
)
from .core.nginx import NginxReader, extract_nginx_format, find_nginx_formats
from .core.reader import Reader, ReaderState

__all__ = [
    # Parsing
    "CompiledFormat",
    "compile_format",
    "tokenize_template",
    "Entry",
    "Reader",
    "ReaderState",
    "NginxReader",
    "extract_nginx_format",
    "find_nginx_formats",

    # Errors
    "NginxLogError",
    "FieldNotFound",
    "FieldParseError",
    "InvalidFormat",
    "IoError",
    "LineFormatMismatch",
    "NginxFormatNotFound",
]
