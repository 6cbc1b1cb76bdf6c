"""Message printer with verbosity levels, coloured tags and timers."""

from __future__ import annotations

import sys
import time
from enum import IntEnum


class Verbosity(IntEnum):
    """Message levels; a message is shown when its level <= the printer's."""

    NONE = 0
    ERROR = 1
    WARNING = 2
    DEFAULT = 3
    DEBUG = 4


class BlockSize(IntEnum):
    """Widths of the walls drawn by Printer.print_block."""

    MAIN = 60
    EVENT = 45
    SUBEVENT = 40
    CANDIDATE = 30


class PrinterError(RuntimeError):
    """Raised after an error-level message has been printed."""


_RESET = "\033[m"


class Printer:
    """Prints messages tagged with the owner's name, filtered by verbosity."""

    def __init__(
        self, class_name: str = "", verbosity: Verbosity = Verbosity.DEFAULT
    ) -> None:
        self.class_name = class_name
        self.verbosity = Verbosity(verbosity)

    def print_tag(self, verbosity: Verbosity) -> None:
        """Write the coloured tag for a message of the given level."""
        name = self.class_name
        if verbosity == Verbosity.ERROR:
            sys.stderr.write(f"\033[4;31m[Error in {name}]")
        elif verbosity == Verbosity.WARNING:
            sys.stdout.write(f"\033[4;33m[{name} WARNING] ")
        elif verbosity == Verbosity.DEFAULT:
            sys.stdout.write(f"[{name}] ")
        elif verbosity == Verbosity.DEBUG:
            sys.stdout.write(f"\033[0;34m[{name} DEBUG] ")

    def print(
        self,
        msg: object,
        verbosity: Verbosity = Verbosity.DEFAULT,
        new_line: bool = True,
    ) -> None:
        """Print a one-line message; error-level messages raise PrinterError."""
        if verbosity > self.verbosity:
            return
        self.print_tag(verbosity)
        text = str(msg)
        if verbosity == Verbosity.ERROR:
            sys.stderr.write(f"{_RESET} {text}")
            sys.stderr.flush()
            raise PrinterError(text)
        sys.stdout.write(_RESET + text + ("\n" if new_line else ""))

    def print_block(
        self,
        line: object,
        size: BlockSize = BlockSize.MAIN,
        verbosity: Verbosity = Verbosity.DEFAULT,
        new_line: bool = True,
    ) -> None:
        """Print a line framed by walls of '=' characters."""
        width = int(size)
        wall = "=" * width
        colored = f"\033[1;36m{line}{_RESET}"

        sys.stdout.write("\n")
        self.print(wall, verbosity)
        if width == BlockSize.MAIN:
            self.print("", verbosity, False)
            sys.stdout.write(colored.rjust((width + len(colored)) // 2) + "\n")
        else:
            self.print(colored, verbosity)
        self.print(wall, verbosity)

        if new_line:
            sys.stdout.write("\n")

    def print_title(self, line: object) -> None:
        """Print a title line surrounded by asterisks."""
        sys.stdout.write(f"\n\n********** {line} **********\n")

    def timer(
        self,
        msg: object,
        start: float,
        verbosity: Verbosity = Verbosity.DEFAULT,
    ) -> float:
        """Report the processor time elapsed since start; return it in seconds."""
        duration = time.process_time() - start
        if duration > 60.0:
            self.print(f"{msg} took {duration / 60.0:f} min", verbosity)
        else:
            self.print(f"{msg} took {duration:f} sec", verbosity)
        return duration