"""A small command interpreter with built-in commands and integer options."""

from __future__ import annotations

import re
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TextIO

from .report import MessageKind, Reporter, Stopwatch

PROMPT = "cmd> "
HISTORY_FILE = ".cmd_history"
MAX_QUIT_HELPERS = 10
LINE_LIMIT = 8192 - 2
LONG_MIN = -(2**63)
LONG_MAX = 2**63 - 1

CommandFunction = Callable[[list[str]], bool]
SetterFunction = Callable[[int], None]

_WHITESPACE = re.compile(r"[ \t\n\v\f\r]+")
_INTEGER = re.compile(
    r"[ \t\n\v\f\r]*(?P<sign>[+-]?)"
    r"(?:(?P<hex>0[xX][0-9a-fA-F]+)|(?P<oct>0[0-7]*)|(?P<dec>[1-9][0-9]*))"
)


def get_int(text: str) -> int:
    """Parse an integer the way ``strtol`` with base 0 does.

    Accepts decimal, ``0x`` hexadecimal and leading-zero octal. The whole
    string must be consumed; raises ValueError otherwise. An empty string
    reads as 0.
    """
    if text == "":
        return 0
    match = _INTEGER.match(text)
    if match is None or match.end() != len(text):
        raise ValueError(f"cannot parse {text!r} as integer")
    if match.group("hex"):
        value = int(match.group("hex")[2:], 16)
    elif match.group("oct") is not None:
        value = int(match.group("oct"), 8)
    else:
        value = int(match.group("dec"))
    if match.group("sign") == "-":
        value = -value
    value = max(LONG_MIN, min(LONG_MAX, value))
    if value == LONG_MIN:
        raise ValueError(f"{text!r} is out of range")
    return value


def parse_args(line: str) -> list[str]:
    """Split a command line into words separated by whitespace."""
    return [word for word in _WHITESPACE.split(line) if word]


@dataclass
class Command:
    """A named command, the function that runs it and its help text."""

    name: str
    operation: CommandFunction
    documentation: str


@dataclass
class Param:
    """An integer option; ``setter`` is called with the old value on change."""

    name: str
    value: int
    documentation: str
    setter: SetterFunction | None = None


@dataclass
class _Input:
    stream: TextIO
    owned: bool


class Console:
    """Reads command lines from files or a terminal and runs them."""

    def __init__(self, reporter: Reporter | None = None) -> None:
        self.reporter = reporter if reporter is not None else Reporter()
        self._commands: dict[str, Command] = {}
        self._params: dict[str, Param] = {}
        self._quit_helpers: list[CommandFunction] = []
        self._inputs: list[_Input] = []
        self.error_count = 0
        self.quit_flag = False
        self.has_infile = False
        self.prompt = PROMPT
        self.history_file = HISTORY_FILE
        self.history_length = 100
        self._timer = Stopwatch()

        self.add_cmd("help", self._do_help, "                | Show documentation")
        self.add_cmd(
            "option", self._do_option, " [name val]     | Display or set options"
        )
        self.add_cmd("quit", self._do_quit, "                | Exit program")
        self.add_cmd(
            "source", self._do_source, " file           | Read commands from source file"
        )
        self.add_cmd("log", self._do_log, " file           | Copy output to file")
        self.add_cmd(
            "time", self._do_time, " cmd arg ...    | Time command execution"
        )
        self.add_cmd("#", self._do_comment, " ...            | Display comment")
        self.add_param("simulation", 0, "Start/Stop simulation mode", None)
        self.add_param(
            "verbose", self.reporter.verblevel, "Verbosity level", self._sync_verbose
        )
        self.add_param("error", 5, "Number of errors until exit", None)
        self.add_param("echo", 0, "Do/don't echo commands", None)

    # Registration and option access

    def add_cmd(
        self, name: str, operation: CommandFunction, documentation: str
    ) -> None:
        """Register a command; a later command of the same name replaces it."""
        self._commands[name] = Command(name, operation, documentation)

    def add_param(
        self,
        name: str,
        value: int,
        documentation: str,
        setter: SetterFunction | None = None,
    ) -> None:
        """Register an integer option with its initial value."""
        self._params[name] = Param(name, value, documentation, setter)

    @property
    def commands(self) -> list[Command]:
        """Registered commands in name order."""
        return [self._commands[name] for name in sorted(self._commands)]

    @property
    def params(self) -> list[Param]:
        """Registered options in name order."""
        return [self._params[name] for name in sorted(self._params)]

    def __getitem__(self, name: str) -> int:
        return self._params[name].value

    def __setitem__(self, name: str, value: int) -> None:
        param = self._params[name]
        old = param.value
        param.value = value
        if param.setter is not None:
            param.setter(old)

    @property
    def echo(self) -> bool:
        return bool(self["echo"])

    @echo.setter
    def echo(self, on: bool) -> None:
        self["echo"] = 1 if on else 0

    @property
    def simulation(self) -> bool:
        return bool(self["simulation"])

    def _sync_verbose(self, old: int) -> None:
        self.reporter.verblevel = self._params["verbose"].value

    def add_quit_helper(self, helper: CommandFunction) -> None:
        """Add a function to run when the console quits."""
        if len(self._quit_helpers) >= MAX_QUIT_HELPERS:
            self.reporter.report_event(
                MessageKind.FATAL, "Exceeded limit on quit helpers"
            )
            return
        self._quit_helpers.append(helper)

    # Interpretation

    def _record_error(self) -> None:
        self.error_count += 1
        if self.error_count >= self["error"]:
            self.reporter.report(
                1, "Error limit exceeded.  Stopping command execution"
            )
            self.quit_flag = True

    def interpret_argv(self, argv: Sequence[str]) -> bool:
        """Run a command already split into words; return whether it succeeded."""
        argv = list(argv)
        if not argv:
            return True
        command = self._commands.get(argv[0])
        if command is None:
            self.reporter.report(1, f"Unknown command '{argv[0]}'")
            self._record_error()
            return False
        ok = bool(command.operation(argv))
        if not ok:
            self._record_error()
        return ok

    def interpret(self, line: str) -> bool:
        """Run one command line; always False once the console has quit."""
        if self.quit_flag:
            return False
        return self.interpret_argv(parse_args(line))

    # Built-in commands

    def _report_options(self) -> None:
        self.reporter.report(1, "Options:")
        for param in self.params:
            self.reporter.report(
                1, f"\t{param.name}\t{param.value}\t{param.documentation}"
            )

    def _do_help(self, argv: list[str]) -> bool:
        self.reporter.report(1, "Commands:")
        for command in self.commands:
            self.reporter.report(1, f"\t{command.name}\t{command.documentation}")
        self._report_options()
        return True

    def _do_option(self, argv: list[str]) -> bool:
        if len(argv) == 1:
            self._report_options()
            return True

        words = iter(argv[1:])
        for name in words:
            text = next(words, None)
            if text is None:
                self.reporter.report(1, f"No value given for parameter {name}")
                return False
            try:
                value = get_int(text)
            except ValueError:
                self.reporter.report(1, f"Cannot parse '{text}' as integer")
                return False
            if name not in self._params:
                self.reporter.report(1, f"Unknown parameter '{name}'")
                return False
            self[name] = value
        return True

    def _do_quit(self, argv: list[str]) -> bool:
        while self._inputs:
            self._pop_file()
        ok = True
        for helper in self._quit_helpers:
            ok = ok and bool(helper(argv))
        self.quit_flag = True
        return ok

    def _do_source(self, argv: list[str]) -> bool:
        if len(argv) < 2:
            self.reporter.report(1, "No source file given")
            return False
        try:
            self.push_file(argv[1])
        except OSError:
            self.reporter.report(1, f"Could not open source file '{argv[1]}'")
            return False
        return True

    def _do_log(self, argv: list[str]) -> bool:
        if len(argv) < 2:
            self.reporter.report(1, "No log file given")
            return False
        try:
            self.reporter.set_logfile(argv[1])
        except OSError:
            self.reporter.report(1, f"Couldn't open log file '{argv[1]}'")
            return False
        return True

    def _do_time(self, argv: list[str]) -> bool:
        delta = self._timer.delta()
        if len(argv) <= 1:
            self.reporter.report(
                1,
                f"Elapsed time = {self._timer.elapsed:.3f}, Delta time = {delta:.3f}",
            )
            return True
        ok = self.interpret_argv(argv[1:])
        delta = self._timer.delta()
        self.reporter.report(1, f"Delta time = {delta:.3f}")
        return ok

    def _do_comment(self, argv: list[str]) -> bool:
        if self.echo:
            return True
        self.reporter.report(1, " ".join(argv))
        return True

    # Input handling

    def push_file(self, file_name: str | None) -> None:
        """Read further commands from ``file_name``, or stdin when None.

        Raises OSError if the file cannot be opened.
        """
        self.has_infile = file_name is not None
        if file_name is None:
            self._inputs.append(_Input(sys.stdin, owned=False))
            return
        stream = open(file_name, encoding="utf-8", errors="replace")
        self._inputs.append(_Input(stream, owned=True))

    def _pop_file(self) -> None:
        if self._inputs:
            entry = self._inputs.pop()
            if entry.owned:
                entry.stream.close()

    def _readline(self) -> str | None:
        """Read a line from the innermost input; None (and pop it) at its end."""
        if not self._inputs:
            return None
        line = self._inputs[-1].stream.readline(LINE_LIMIT)
        if not line:
            self._pop_file()
            return None
        if not line.endswith("\n"):
            line += "\n"
        if self.echo:
            self.reporter.report_noreturn(1, self.prompt)
            self.reporter.report_noreturn(1, line)
        return line

    def _done(self) -> bool:
        return not self._inputs or self.quit_flag

    def _drain_sources(self) -> None:
        while (
            self._inputs and self._inputs[-1].owned and not self.quit_flag
        ):
            line = self._readline()
            if line is not None:
                self.interpret(line)

    def completion(self, buf: str) -> list[str]:
        """Return the commands, or ``option`` names, that extend ``buf``."""
        if buf.startswith("option "):
            candidates = [f"option {param.name}" for param in self.params]
        else:
            candidates = [command.name for command in self.commands]
        return [candidate for candidate in candidates if candidate.startswith(buf)]

    def finish(self) -> bool:
        """Quit if not done already; return whether no errors occurred."""
        ok = True
        if not self.quit_flag:
            ok = self._do_quit([])
        self.has_infile = False
        return ok and self.error_count == 0

    def _interactive(self) -> None:
        try:
            import readline
        except ImportError:
            readline = None

        if readline is not None:
            readline.set_history_length(self.history_length)
            try:
                readline.read_history_file(self.history_file)
            except OSError:
                pass

        while True:
            try:
                line = input(self.prompt)
            except EOFError:
                break
            self.interpret(line)
            self._drain_sources()
            if readline is not None:
                try:
                    readline.write_history_file(self.history_file)
                except OSError:
                    pass

    def run(self, infile_name: str | None = None) -> bool:
        """Run commands from ``infile_name``, or interactively when None.

        Returns whether no errors occurred.
        """
        try:
            self.push_file(infile_name)
        except OSError:
            self.reporter.report(
                1, f"ERROR: Could not open source file '{infile_name}'"
            )
            return False

        if not self.has_infile:
            self._interactive()
        else:
            while not self._done():
                line = self._readline()
                if line is not None:
                    self.interpret(line)
        return self.error_count == 0