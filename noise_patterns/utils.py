"""Miscellaneous CSS helpers."""
import re

_UNSAFE = re.compile(r"[^A-Za-z0-9_-]")


def escape_class_name(name: str) -> str:
    """Backslash-escape characters that are not valid in a bare CSS class name."""
    return _UNSAFE.sub(lambda m: "\\" + m.group(0), name)


def class_selector(name: str) -> str:
    return "." + escape_class_name(name)


def format_opacity(percent: int) -> str:
    """Convert a 0-100 percentage to a CSS opacity value (5 -> '0.05')."""
    return f"{percent / 100:g}"
