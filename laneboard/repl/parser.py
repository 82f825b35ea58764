"""
FILE: laneboard/repl/parser.py
PURPOSE: Turn a REPL line into a command, positional args and typed flags
EXPORTS:
  - ParseResult (dataclass for parsed commands)
  - FLAG_SPECS: flags each command accepts, with their value types
  - flags_for(command) -> List[str]
  - parse_command(input_str) -> ParseResult
DEPENDENCIES:
  - shlex (for shell-like parsing with quotes)
  - dataclasses (for ParseResult)
NOTES:
  - Flags are typed per command: int (--wip 3), str (--after qa) or switch (--backlog)
  - Switches never consume the next token, so `use Web --backlog Sprint` keeps "Sprint"
  - Both "--wip 3" and "--wip=3" are accepted
  - Unknown flags, missing values and bad numbers go to ParseResult.errors;
    the REPL reports them and does not run the command
  - Unclosed quotes fall back to whitespace splitting
"""

import shlex
from dataclasses import dataclass, field
from typing import Dict, List, Union

FlagValue = Union[str, int, bool]

FLAG_SPECS: Dict[str, Dict[str, type]] = {
    "use": {"sprint": int, "backlog": bool},
    "lane": {
        "after": str,
        "color": str,
        "objective": str,
        "title": str,
        "wip": int,
        "no-wip": bool,
    },
}


@dataclass
class ParseResult:
    """
    Result of parsing a REPL command.

    Attributes:
        command: Lower-cased command name (e.g., "board", "mv", "lane")
        args: Positional arguments (e.g., ["add", "Design Review"])
        flags: Typed flag values (e.g., {"wip": 3, "backlog": True})
        errors: Problems found in the flags, empty when the line is usable
        raw_input: Original input string
    """
    command: str
    args: List[str] = field(default_factory=list)
    flags: Dict[str, FlagValue] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)
    raw_input: str = ""

    @property
    def ok(self) -> bool:
        return not self.errors


def flags_for(command: str) -> List[str]:
    """Flag names, with dashes, accepted by command (for completion)."""
    return [f"--{name}" for name in FLAG_SPECS.get(command, {})]


def _tokenize(input_str: str) -> List[str]:
    try:
        return shlex.split(input_str)
    except ValueError:
        return input_str.split()


def _convert(name: str, kind: type, raw: str, errors: List[str]):
    if kind is int:
        try:
            return int(raw)
        except ValueError:
            errors.append(f"--{name} expects a number, got '{raw}'")
            return None
    return raw


def parse_command(input_str: str) -> ParseResult:
    """
    Parse REPL input into command, args, and typed flags.

    Examples:
        >>> parse_command('lane add "Design Review" --after inprogress --wip 3')
        ParseResult(command="lane", args=["add", "Design Review"], flags={"after": "inprogress", "wip": 3})

        >>> parse_command("mv 4 --fast qa").errors
        ["Unknown option --fast for 'mv'"]
    """
    input_str = input_str.strip()
    tokens = _tokenize(input_str)
    if not tokens:
        return ParseResult(command="", raw_input=input_str)

    command = tokens[0].lower()
    spec = FLAG_SPECS.get(command, {})
    result = ParseResult(command=command, raw_input=input_str)

    i = 1
    while i < len(tokens):
        token = tokens[i]
        i += 1
        if not token.startswith("--") or token == "--":
            result.args.append(token)
            continue

        name, has_inline, inline = token[2:].partition("=")
        kind = spec.get(name)
        if kind is None:
            result.errors.append(f"Unknown option --{name} for '{command}'")
            continue

        if kind is bool:
            if has_inline:
                result.errors.append(f"--{name} takes no value")
            result.flags[name] = True
            continue

        if has_inline:
            raw = inline
        elif i < len(tokens) and not tokens[i].startswith("--"):
            raw = tokens[i]
            i += 1
        else:
            result.errors.append(f"--{name} needs a value")
            continue

        value = _convert(name, kind, raw, result.errors)
        if value is not None:
            result.flags[name] = value

    return result
