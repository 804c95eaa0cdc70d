"""
Identifier Parser - splits "component.control" on the first separator.
"""

from __future__ import annotations
from typing import Tuple
from binding.errors import ParseError, ParseFailure

DEFAULT_SEPARATOR = "."


def parse_identifier(raw: str, separator: str = DEFAULT_SEPARATOR) -> Tuple[str, str]:
    """
    Return (component_name, control_name).

    The separator must appear at position > 0. Everything after the first
    separator is the control name, verbatim. No trimming, no case folding.
    """
    if not separator:
        raise ValueError("separator must be a non-empty string")

    pos = raw.find(separator)
    if pos <= 0:
        raise ParseError(ParseFailure.NO_SEPARATOR, raw, separator)

    return raw[:pos], raw[pos + len(separator):]
