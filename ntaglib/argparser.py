"""Command-line and card-file option parsing."""

from __future__ import annotations

import re
import sys
from collections.abc import Iterable

from ntaglib.calculator import does_exist

_FLOAT_PREFIX = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def is_float(text: str) -> bool:
    """True if text begins (after whitespace) with a decimal number."""
    return _FLOAT_PREFIX.match(text) is not None


class ArgParser:
    """Holds a token list and derives option/value pairs from it."""

    def __init__(self, tokens: Iterable[str] | None = None) -> None:
        self.tokens: list[str] = list(tokens) if tokens is not None else []

    @classmethod
    def from_argv(cls, argv: list[str] | None = None) -> ArgParser:
        """Build from an argv list; the program name is skipped."""
        if argv is None:
            argv = sys.argv
        return cls(argv[1:])

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> ArgParser:
        """Build from card lines of the form 'option value ...'.

        Blank lines and lines starting with '#' are skipped; the first word
        of a line becomes '-word' and the rest follow as values.
        """
        tokens: list[str] = []
        for raw in lines:
            line = raw.rstrip("\n")
            if not line or line.startswith("#"):
                continue
            words = [word for word in line.split(" ") if word]
            if words:
                tokens.append("-" + words[0])
                tokens.extend(words[1:])
        return cls(tokens)

    def read_file(self, path: str) -> ArgParser:
        """Append the tokens of a card file; raise if it does not exist."""
        if not does_exist(path):
            raise FileNotFoundError(f"File does not exist: {path}")
        with open(path, encoding="utf-8") as card:
            self += ArgParser.from_lines(card)
        return self

    def __iadd__(self, other: ArgParser) -> ArgParser:
        self.tokens.extend(other.tokens)
        return self

    def option_pairs(self) -> list[tuple[str, str]]:
        """Option/value pairs; an option with no value gets 'true'.

        Tokens that do not start with '-' and numeric options are skipped.
        """
        pairs: list[tuple[str, str]] = []
        for token in self.tokens:
            if not token.startswith("-"):
                continue
            option = token[1:]
            if is_float(option):
                continue
            value = self.get_option(token)
            pairs.append((option, value if value else "true"))
        return pairs

    def get_option(self, option: str) -> str:
        """Token following the first occurrence of option, or ''."""
        try:
            index = self.tokens.index(option)
        except ValueError:
            return ""
        return self.tokens[index + 1] if index + 1 < len(self.tokens) else ""

    def option_exists(self, option: str) -> bool:
        """True if option appears among the tokens."""
        return option in self.tokens

    def dump_option_pairs(self) -> None:
        """Print every option/value pair."""
        for option, value in self.option_pairs():
            print(f"{option} {value}")

    def dump_tokens(self) -> None:
        """Print every token."""
        for token in self.tokens:
            print(token)