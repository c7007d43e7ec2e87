"""Command-line parsing for the shell: tokens, command trees and cd."""

from dataclasses import dataclass, field
from typing import Optional, Union

from .constants import OpenFlag

__all__ = [
    "ShellSyntaxError",
    "ExecCmd",
    "RedirCmd",
    "PipeCmd",
    "ListCmd",
    "BackCmd",
    "Scanner",
    "parse_cmd",
    "cd_target",
]

MAXARGS = 10

WHITESPACE = " \t\r\n\v"
SYMBOLS = "<|>&;()"
_SINGLE = "|();&<"


class ShellSyntaxError(ValueError):
    """Raised when a command line cannot be parsed."""


@dataclass
class ExecCmd:
    """Run a program with arguments; an empty argv does nothing."""

    argv: list = field(default_factory=list)


@dataclass
class RedirCmd:
    """Run cmd with descriptor fd reopened on file with the given mode."""

    cmd: "Command"
    file: str
    mode: OpenFlag
    fd: int


@dataclass
class PipeCmd:
    """Connect the output of left to the input of right."""

    left: "Command"
    right: "Command"


@dataclass
class ListCmd:
    """Run left to completion, then right."""

    left: "Command"
    right: "Command"


@dataclass
class BackCmd:
    """Run cmd without waiting for it."""

    cmd: "Command"


Command = Union[ExecCmd, RedirCmd, PipeCmd, ListCmd, BackCmd]


class Scanner:
    """Splits a command line into shell tokens.

    Tokens are "" at the end of input, "a" for a word, "+" for ">>",
    and the symbol itself for any other operator.
    """

    def __init__(self, text):
        self.text = text
        self.pos = 0

    @property
    def at_end(self):
        return self.pos >= len(self.text)

    @property
    def rest(self):
        """The unconsumed part of the line."""
        return self.text[self.pos:]

    def _skip_whitespace(self):
        while not self.at_end and self.text[self.pos] in WHITESPACE:
            self.pos += 1

    def peek(self, toks):
        """Skip whitespace; report whether the next character is in toks."""
        self._skip_whitespace()
        return not self.at_end and self.text[self.pos] in toks

    def gettoken(self):
        """Consume one token and return (token, text of the token)."""
        self._skip_whitespace()
        start = self.pos
        text = self.text
        if self.at_end:
            tok = ""
        else:
            c = text[self.pos]
            if c in _SINGLE:
                self.pos += 1
                tok = c
            elif c == ">":
                self.pos += 1
                if not self.at_end and text[self.pos] == ">":
                    self.pos += 1
                    tok = "+"
                else:
                    tok = ">"
            else:
                tok = "a"
                while not self.at_end and text[self.pos] not in WHITESPACE + SYMBOLS:
                    self.pos += 1
        word = text[start:self.pos]
        self._skip_whitespace()
        return tok, word


def _parse_line(sc):
    cmd = _parse_pipe(sc)
    while sc.peek("&"):
        sc.gettoken()
        cmd = BackCmd(cmd)
    if sc.peek(";"):
        sc.gettoken()
        cmd = ListCmd(cmd, _parse_line(sc))
    return cmd


def _parse_pipe(sc):
    cmd = _parse_exec(sc)
    if sc.peek("|"):
        sc.gettoken()
        cmd = PipeCmd(cmd, _parse_pipe(sc))
    return cmd


def _parse_redirs(cmd, sc):
    while sc.peek("<>"):
        tok, _ = sc.gettoken()
        kind, name = sc.gettoken()
        if kind != "a":
            raise ShellSyntaxError("missing file for redirection")
        if tok == "<":
            cmd = RedirCmd(cmd, name, OpenFlag.RDONLY, 0)
        else:
            cmd = RedirCmd(cmd, name, OpenFlag.WRONLY | OpenFlag.CREATE, 1)
    return cmd


def _parse_block(sc):
    if not sc.peek("("):
        raise ShellSyntaxError("parseblock")
    sc.gettoken()
    cmd = _parse_line(sc)
    if not sc.peek(")"):
        raise ShellSyntaxError("syntax - missing )")
    sc.gettoken()
    return _parse_redirs(cmd, sc)


def _parse_exec(sc):
    if sc.peek("("):
        return _parse_block(sc)
    exec_cmd = ExecCmd()
    ret = _parse_redirs(exec_cmd, sc)
    while not sc.peek("|)&;"):
        tok, word = sc.gettoken()
        if tok == "":
            break
        if tok != "a":
            raise ShellSyntaxError("syntax")
        exec_cmd.argv.append(word)
        if len(exec_cmd.argv) >= MAXARGS:
            raise ShellSyntaxError("too many args")
        ret = _parse_redirs(ret, sc)
    return ret


def parse_cmd(text):
    """Parse a command line into a command tree."""
    text = text.split("\0", 1)[0]
    sc = Scanner(text)
    cmd = _parse_line(sc)
    sc.peek("")
    if not sc.at_end:
        raise ShellSyntaxError(f"syntax: leftovers: {sc.rest}")
    return cmd


def cd_target(line) -> Optional[str]:
    """Directory named by a "cd " line as read (newline last), else None."""
    if not line.startswith("cd "):
        return None
    return line[3:len(line) - 1]