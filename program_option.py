"""
Program Option Contract

Describes the options a program accepts through its argument vector and
configuration file.

Callers declare a closed set of options by subclassing ProgramOption, an
Enum whose members each carry an OptionSpec:

    class AppOption(ProgramOption):
        VERBOSE = OptionSpec(
            short_flag="v",
            long_flag="verbose",
            description="Print more output",
            default_value="false",
        )
        HELP = HELP_OPTION

Precondition: no two members of one enumeration may share a short flag or a
long flag. This is not checked; the first declared match wins on lookup.
"""

from enum import Enum
from typing import TypeVar

import pydantic

# =============================================================================
# DATA STRUCTURES
# =============================================================================


class OptionSpec(pydantic.BaseModel, frozen=True):
    """
    Declaration of a single program option.

    Flags are stored without their dash prefix: short flags are used as
    `-v`, long flags as `--verbose`.
    """

    short_flag: str = pydantic.Field(min_length=1, max_length=1)
    long_flag: str = pydantic.Field(min_length=1)
    description: str
    default_value: str
    takes_argument: bool = True

    @pydantic.field_validator("short_flag", "long_flag")
    @classmethod
    def reject_dash_prefix(cls, flag: str) -> str:
        """Flags are declared bare, the dashes are added when matching."""
        if flag.startswith("-"):
            raise ValueError(f"flag must not start with '-': {flag!r}")
        return flag


HELP_OPTION = OptionSpec(
    short_flag="h",
    long_flag="help",
    description="Show this help message and exit",
    default_value="false",
    takes_argument=False,
)


# =============================================================================
# OPTION ENUMERATION BASE
# =============================================================================


class ProgramOption(Enum):
    """
    Base class for a closed enumeration of program options.

    Member values must be OptionSpec instances.
    """

    @property
    def spec(self) -> OptionSpec:
        return self.value

    @property
    def short_flag(self) -> str:
        return self.spec.short_flag

    @property
    def long_flag(self) -> str:
        return self.spec.long_flag

    @property
    def description(self) -> str:
        return self.spec.description

    @property
    def default_value(self) -> str:
        return self.spec.default_value

    @property
    def takes_argument(self) -> bool:
        return self.spec.takes_argument

    @property
    def is_help(self) -> bool:
        """True for the option that prints usage instead of setting a value."""
        return self.long_flag == "help"

    def matches(self, token: str) -> bool:
        """
        Check whether a token names this option.

        Exact, case-sensitive comparison against `-<short>` and `--<long>`.
        Prefixes and abbreviations never match.
        """
        return token == f"-{self.short_flag}" or token == f"--{self.long_flag}"

    def help_description(self) -> str:
        """Usage text printed for this option when help is requested."""
        return f"-{self.short_flag}, --{self.long_flag}\n\t{self.description}\n"


OptionT = TypeVar("OptionT", bound=ProgramOption)


# =============================================================================
# LOOKUP
# =============================================================================


def lookup_option(option_type: type[OptionT], token: str) -> OptionT | None:
    """Find the member of option_type matching token, or None."""

    for option in option_type:
        if option.matches(token):
            return option
    return None
