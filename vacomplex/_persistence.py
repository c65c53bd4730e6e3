"""
Text stream helpers shared by the cell codecs.

A saved complex is a sequence of cell blocks. Each block is the cell type
name followed by one field per line::

    InbetweenFace
        ID                : 12
        Cycles            : [ [3+ 5+ 7+ 9+] , [14+ 15+ 16+] ]
        BeforeFaces       : [ 1 , 2 ]
        AfterFaces        : [ ]

Lists are bracketed and comma separated, ``[ ]`` being the empty list.
List elements may contain brackets themselves (cycles do), so the extent of
a list is always found by counting bracket depth, never by looking for the
first closing bracket.
"""
from __future__ import annotations

import re

from vacomplex._exceptions import ParseError

INDENT = '    '
FIELD_WIDTH = 18

_HALFEDGE_TOKEN = re.compile(r'^(\d+)([+-])$')


# %% Writing
def new_field(name: str) -> str:
    """Start a new field line, e.g. ``'\\n    ID                : '``."""
    return '\n' + INDENT + name.ljust(FIELD_WIDTH) + ': '


def format_list(items) -> str:
    items = [str(item) for item in items]
    if not items:
        return '[ ]'
    return '[ ' + ' , '.join(items) + ' ]'


def format_float(x) -> str:
    # float() first: repr of a numpy scalar is not a plain number
    return repr(float(x))


def format_halfedge(edge_id: int, side: bool) -> str:
    return '{}{}'.format(edge_id, '+' if side else '-')


# %% Token parsing
def parse_int(token: str) -> int:
    try:
        return int(token)
    except ValueError:
        raise ParseError(f"Expected an integer, got {token!r}") from None


def parse_float(token: str) -> float:
    try:
        return float(token)
    except ValueError:
        raise ParseError(f"Expected a number, got {token!r}") from None


def parse_halfedge(token: str) -> tuple[int, bool]:
    """Parse ``'12+'`` into ``(12, True)`` and ``'12-'`` into ``(12, False)``."""
    match = _HALFEDGE_TOKEN.match(token)
    if match is None:
        raise ParseError(f"Expected a halfedge such as '12+', got {token!r}")
    return int(match.group(1)), match.group(2) == '+'


def parse_list(string: str) -> list[str]:
    """
    Split a bracketed, comma separated list into its raw elements.

    Commas nested inside brackets do not split. Whitespace around elements
    is stripped.

    :param string: str, e.g. ``'[ [1+ 2+] , [3] ]'``
    :return: list of str, e.g. ``['[1+ 2+]', '[3]']``
    """
    string = string.strip()
    if len(string) < 2 or string[0] != '[' or string[-1] != ']':
        raise ParseError(f"Expected a bracketed list, got {string!r}")

    items = []
    current = []
    depth = 0
    for c in string[1:-1]:
        if c == '[':
            depth += 1
        elif c == ']':
            depth -= 1
            if depth < 0:
                raise ParseError(f"Unbalanced ']' in {string!r}")
        if c == ',' and depth == 0:
            items.append(''.join(current).strip())
            current = []
        else:
            current.append(c)
    if depth != 0:
        raise ParseError(f"Unbalanced '[' in {string!r}")

    last = ''.join(current).strip()
    if last or items:
        items.append(last)
    if '' in items:
        raise ParseError(f"Empty list element in {string!r}")
    return items


def parse_id_list(string: str) -> list[int]:
    return [parse_int(item) for item in parse_list(string)]


def parse_float_list(string: str) -> list[float]:
    return [parse_float(item) for item in parse_list(string)]


def split_bracketed(string: str) -> list[str]:
    """
    Return the top level bracketed groups of a string.

    ``'[1+ 2+] [3]'`` gives ``['[1+ 2+]', '[3]']``. Only whitespace and
    commas may appear between groups.
    """
    groups = []
    depth = 0
    start = 0
    for i, c in enumerate(string):
        if c == '[':
            if depth == 0:
                start = i
            depth += 1
        elif c == ']':
            depth -= 1
            if depth < 0:
                raise ParseError(f"Unbalanced ']' at position {i} in "
                                 f"{string!r}")
            if depth == 0:
                groups.append(string[start:i + 1])
        elif depth == 0 and not (c.isspace() or c == ','):
            raise ParseError(f"Unexpected {c!r} outside brackets in "
                             f"{string!r}")
    if depth != 0:
        raise ParseError(f"Unterminated '[' in {string!r}")
    return groups


def get_attribute(element, name: str) -> str:
    """XML attribute lookup that reports a missing attribute as a ParseError."""
    value = element.get(name)
    if value is None:
        raise ParseError(f"<{element.tag}> is missing the {name!r} attribute")
    return value


# %% Reading
class TextReader:
    """Sequential reader over a text stream.

    Tokens are whitespace separated, except for bracketed lists which are
    read as a whole up to their matching closing bracket.
    """

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def _skip_whitespace(self):
        n = len(self.text)
        while self.pos < n and self.text[self.pos].isspace():
            self.pos += 1

    def at_end(self) -> bool:
        self._skip_whitespace()
        return self.pos >= len(self.text)

    def read_token(self) -> str:
        if self.at_end():
            raise ParseError("Unexpected end of stream")
        start = self.pos
        n = len(self.text)
        while self.pos < n and not self.text[self.pos].isspace():
            self.pos += 1
        return self.text[start:self.pos]

    def read_field(self, name: str):
        """Consume ``name :``, checking the field name."""
        token = self.read_token()
        if token != name:
            raise ParseError(f"Expected field {name!r}, got {token!r}")
        colon = self.read_token()
        if colon != ':':
            raise ParseError(f"Expected ':' after {name!r}, got {colon!r}")

    def read_int(self) -> int:
        return parse_int(self.read_token())

    def read_float(self) -> float:
        return parse_float(self.read_token())

    def read_halfedge(self) -> tuple[int, bool]:
        return parse_halfedge(self.read_token())

    def read_bracketed(self) -> str:
        """Read from ``[`` to its matching ``]``, counting bracket depth."""
        if self.at_end() or self.text[self.pos] != '[':
            raise ParseError(f"Expected '[' at position {self.pos}")
        start = self.pos
        depth = 0
        n = len(self.text)
        while self.pos < n:
            c = self.text[self.pos]
            self.pos += 1
            if c == '[':
                depth += 1
            elif c == ']':
                depth -= 1
                if depth == 0:
                    return self.text[start:self.pos]
        raise ParseError(f"Unterminated list starting at position {start}")

    def read_list(self) -> list[str]:
        return parse_list(self.read_bracketed())

    def read_id_list(self) -> list[int]:
        return parse_id_list(self.read_bracketed())

    def read_float_list(self) -> list[float]:
        return parse_float_list(self.read_bracketed())
