"""Parsing and checking of commands typed into the repl."""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass, field


class CommandError(ValueError):
    """A repl command has the wrong arguments or flags."""


@dataclass
class ReplCommand:
    """Positional arguments and --flags from one line of repl input."""

    args: list[str] = field(default_factory=list)
    flags: dict[str, str] = field(default_factory=dict)

    def get_bool_value(self, key: str) -> bool:
        """True if the flag is "true" or present without a value."""
        if key not in self.flags:
            return False
        return self.flags[key] in ("true", "")

    def check_args(
        self,
        min_args: int,
        max_args: int,
        allowed_flags: Collection[str] | None = None,
    ) -> None:
        """Raise CommandError if the argument count or any flag is not allowed."""
        if min_args == max_args:
            if len(self.args) != min_args:
                raise CommandError(f"Expected {min_args} args")
        elif not min_args <= len(self.args) <= max_args:
            raise CommandError(f"Expected between {min_args} and {max_args} args")

        allowed = allowed_flags or ()
        for key in self.flags:
            if key not in allowed:
                raise CommandError(f"Flag {key} not recognized")


def parse_repl_inputs(text: str) -> ReplCommand:
    """Split a line on spaces into args and --key[=value] flags.

    The first component is always an argument, even if it starts with "--".
    """
    command = ReplCommand()
    for position, component in enumerate(text.split(" ")):
        if not component:
            continue
        if position > 0 and component.startswith("--"):
            key, _, value = component.partition("=")
            command.flags[key[2:]] = value
        else:
            command.args.append(component)
    return command