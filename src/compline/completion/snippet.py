"""
Flatten LSP snippet bodies to the text they would insert.

Only used to derive a filter word from a snippet; expansion itself belongs to
the host. Tabstops vanish, placeholders keep their default text, choices keep
their first option and variables keep their default (or nothing).
"""

import re

_INT = re.compile(r"\d+")
_VAR = re.compile(r"[_a-zA-Z][_a-zA-Z0-9]*")


class _Parser:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def parse(self, stop: str = "") -> str:
        out = []
        while self.pos < len(self.text):
            char = self.text[self.pos]
            if char in stop:
                return "".join(out)
            if char == "\\" and self.pos + 1 < len(self.text) and self.text[self.pos + 1] in "$}\\,|":
                out.append(self.text[self.pos + 1])
                self.pos += 2
            elif char == "$":
                out.append(self._dollar())
            else:
                out.append(char)
                self.pos += 1
        if stop:
            raise SnippetSyntaxError(f"unterminated snippet element at {self.pos}")
        return "".join(out)

    def _match(self, pattern: re.Pattern) -> str:
        found = pattern.match(self.text, self.pos)
        if not found:
            return ""
        self.pos = found.end()
        return found.group()

    def _expect(self, char: str):
        if self.pos >= len(self.text) or self.text[self.pos] != char:
            raise SnippetSyntaxError(f"expected {char!r} at {self.pos}")
        self.pos += 1

    def _dollar(self) -> str:
        self.pos += 1
        if self._match(_INT) or self._match(_VAR):
            return ""
        if self.pos >= len(self.text) or self.text[self.pos] != "{":
            return "$"
        self.pos += 1

        name = self._match(_INT) or self._match(_VAR)
        if not name:
            raise SnippetSyntaxError(f"expected tabstop or variable at {self.pos}")
        if self.pos < len(self.text) and self.text[self.pos] == "}":
            self.pos += 1
            return ""
        if self.pos < len(self.text) and self.text[self.pos] == ":":
            self.pos += 1
            text = self.parse(stop="}")
            self._expect("}")
            return text
        if self.pos < len(self.text) and self.text[self.pos] == "|" and name.isdigit():
            self.pos += 1
            first = self.parse(stop=",|")
            while self.pos < len(self.text) and self.text[self.pos] == ",":
                self.pos += 1
                self.parse(stop=",|")
            self._expect("|")
            self._expect("}")
            return first
        if self.pos < len(self.text) and self.text[self.pos] == "/":
            # Variable transform: the raw variable value is unknown here
            end = self.text.find("}", self.pos)
            if end == -1:
                raise SnippetSyntaxError(f"unterminated transform at {self.pos}")
            self.pos = end + 1
            return ""
        raise SnippetSyntaxError(f"unexpected character at {self.pos}")


def to_plain_text(body: str) -> str:
    """
    Render a snippet body as plain text.

    Returns the input unchanged when it is not a valid snippet.
    """
    try:
        return _Parser(body).parse()
    except SnippetSyntaxError:
        return body


# Exceptions
class SnippetSyntaxError(ValueError):
    """Raised for malformed snippet bodies"""

    pass
