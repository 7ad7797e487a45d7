from __future__ import annotations

from dataclasses import dataclass

_QUOTE = '"'
_SEPARATOR = " "


@dataclass(frozen=True)
class Token:
    text: str
    is_quoted: bool = False


def tokenize(text: str) -> list[Token]:
    """Split a capture line on ASCII spaces, keeping ``+"quoted names"`` together.

    A quote only opens a span at the very start of the text or directly after a
    ``+``; everywhere else it is an ordinary character. An unterminated span runs
    to the end of the string.
    """
    tokens: list[Token] = []
    current: list[str] = []
    quoted = False
    in_quotes = False

    for idx, char in enumerate(text):
        if char == _QUOTE and not in_quotes and (idx == 0 or text[idx - 1] == "+"):
            in_quotes = True
            quoted = True
            current.append(char)
        elif char == _QUOTE and in_quotes:
            in_quotes = False
            current.append(char)
        elif char == _SEPARATOR and not in_quotes:
            if current:
                tokens.append(Token(text="".join(current), is_quoted=quoted))
                current = []
                quoted = False
        else:
            current.append(char)

    if current:
        tokens.append(Token(text="".join(current), is_quoted=quoted))
    return tokens


def join_tokens(tokens: list[Token]) -> str:
    return _SEPARATOR.join(token.text for token in tokens)
