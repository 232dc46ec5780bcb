"""
Utilities for splitting container output into lines and counting markers.
"""
import re
from typing import List

_LINE_BREAK = re.compile(r"\r\n|\n")


def split_lines(text: str) -> List[str]:
    """
    Splits text on CRLF and LF line endings, dropping empty lines.
    """
    return [line for line in _LINE_BREAK.split(text) if line]


def count_marker_lines(stdout: str, stderr: str, marker: str) -> int:
    """
    Counts the lines across both streams that contain the marker.

    :param stdout: Captured standard output.
    :param stderr: Captured standard error.
    :param marker: Substring to look for.
    :return: Number of matching lines.
    """
    lines = split_lines(stdout) + split_lines(stderr)
    return sum(1 for line in lines if marker in line)
