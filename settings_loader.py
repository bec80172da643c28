"""
Settings Loader

Resolves the value of every declared program option from three sources, in
ascending priority:

1. The default value declared on each option
2. A `key=value` configuration file (optional)
3. The command line argument vector

Loading never terminates the process on its own. Invalid input raises a
SettingsLoaderError carrying an ErrorKind and an exit code; load_or_exit
wraps the whole sequence for program entry points that want the classic
print-and-exit behaviour.
"""

import sys
from collections.abc import Mapping, Sequence
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import ClassVar, Generic

from loguru import logger
from rich.console import Console

from config import settings
from program_option import OptionT, lookup_option

stderr_console = Console(stderr=True)

# Silent until an entry point configures logging (see inspect_settings.setup_logging)
logger.disable(__name__)

# =============================================================================
# EXCEPTIONS
# =============================================================================


class ErrorKind(str, Enum):
    """Category of invalid user input, keyed into `exit_codes` settings."""

    UNKNOWN_FLAG = "unknown_flag"
    MISSING_ARGUMENT = "missing_argument"
    MALFORMED_CONFIG_LINE = "malformed_config_line"
    UNREADABLE_CONFIG_FILE = "unreadable_config_file"


DEFAULT_EXIT_CODES = {
    ErrorKind.UNKNOWN_FLAG: 1,
    ErrorKind.MALFORMED_CONFIG_LINE: 2,
    ErrorKind.MISSING_ARGUMENT: 3,
    ErrorKind.UNREADABLE_CONFIG_FILE: 4,
}


class SettingsLoaderError(Exception):
    """Base class for invalid flags, keys and configuration lines."""

    kind: ClassVar[ErrorKind]

    @property
    def exit_code(self) -> int:
        """Process exit status for this error, as configured."""
        return int(
            settings.get(  # pyright: ignore[reportUnknownMemberType, reportUnknownArgumentType]
                f"exit_codes.{self.kind.value}", DEFAULT_EXIT_CODES[self.kind]
            )
        )


class UnknownFlagError(SettingsLoaderError):
    """Raised when an argument does not name any declared option."""

    kind = ErrorKind.UNKNOWN_FLAG

    def __init__(self, flag: str, message: str | None = None) -> None:
        self.flag = flag
        super().__init__(
            message or f"Argument {flag} is not a valid flag. See --help for options."
        )


class UnknownConfigKeyError(UnknownFlagError):
    """Raised when a configuration file key does not name any declared option."""

    def __init__(self, key: str, path: Path, line_number: int) -> None:
        self.key = key
        self.path = path
        self.line_number = line_number
        super().__init__(
            f"--{key}",
            f"{path}:{line_number}: key '{key}' is not a valid option. "
            "See --help for options.",
        )


class MissingArgumentError(SettingsLoaderError):
    """Raised when a flag that takes a value is the last token."""

    kind = ErrorKind.MISSING_ARGUMENT

    def __init__(self, flag: str) -> None:
        self.flag = flag
        super().__init__(f"Flag {flag} requires an argument.")


class MalformedConfigLineError(SettingsLoaderError):
    """Raised when a configuration file line has no `=` separator."""

    kind = ErrorKind.MALFORMED_CONFIG_LINE

    def __init__(self, path: Path, line_number: int, line: str) -> None:
        self.path = path
        self.line_number = line_number
        self.line = line
        super().__init__(
            f"{path}:{line_number}: expected 'key=value', got {line!r}"
        )


class ConfigFileReadError(SettingsLoaderError):
    """Raised when a configuration file exists but cannot be read as text."""

    kind = ErrorKind.UNREADABLE_CONFIG_FILE

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read configuration file {path}: {reason}")


class HelpRequested(Exception):
    """
    Raised when the help option appears in the argument vector.

    Not an error: the caller prints help_text and exits successfully.
    """

    exit_code = 0

    def __init__(self, help_text: str) -> None:
        self.help_text = help_text
        super().__init__("help requested")


# =============================================================================
# SETTINGS LOADER
# =============================================================================


class SettingsLoader(Generic[OptionT]):
    """
    Holds the current string value of every option in option_type.

    The key set is fixed at construction. read_config and
    apply_argument_vector only replace values, and each call either applies
    completely or, when it raises, leaves the settings untouched. Call
    read_config before apply_argument_vector so arguments take priority.
    """

    def __init__(self, option_type: type[OptionT]) -> None:
        self.option_type = option_type
        self._settings: dict[OptionT, str] = {
            option: option.default_value for option in option_type
        }
        logger.debug(
            f"Seeded {len(self._settings)} {option_type.__name__} defaults"
        )

    def lookup(self, token: str) -> OptionT | None:
        """Find the declared option whose `-short` or `--long` form is token."""
        return lookup_option(self.option_type, token)

    def help_text(self) -> str:
        """Help description of every declared option, in declaration order."""
        return "".join(option.help_description() for option in self.option_type)

    # -------------------------------------------------------------------------
    # Configuration file
    # -------------------------------------------------------------------------

    def read_config(self, path: str | Path) -> bool:
        """
        Read and apply a `key=value` configuration file.

        Keys are case-insensitive long flag names without dashes. Values are
        trimmed of surrounding whitespace and otherwise taken verbatim.
        Blank lines are skipped; a repeated key keeps its last value.

        Returns:
            False if no file exists at path, True once the file is applied

        Raises:
            MalformedConfigLineError: a line has no `=`
            UnknownConfigKeyError: a key names no declared option
            ConfigFileReadError: the path is not a readable text file in the
                configured encoding
        """
        config_path = Path(path)
        if not config_path.exists():
            logger.debug(f"No configuration file at {config_path}, keeping defaults")
            return False

        encoding = settings.get("config_file.encoding")  # pyright: ignore[reportUnknownMemberType, reportUnknownVariableType]
        staged: dict[OptionT, str] = {}

        try:
            with open(config_path, encoding=encoding) as f:  # pyright: ignore[reportUnknownArgumentType]
                for line_number, line in enumerate(f, start=1):
                    if not line.strip():
                        continue
                    option, value = self._parse_line(config_path, line_number, line)
                    staged[option] = value
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Cannot read {config_path}: {e}")
            raise ConfigFileReadError(config_path, str(e)) from e

        self._commit(staged, source=str(config_path))
        return True

    def _parse_line(
        self, path: Path, line_number: int, line: str
    ) -> tuple[OptionT, str]:
        """Split one configuration line on its first `=` and resolve the key."""

        key, separator, value = line.partition("=")
        if not separator:
            logger.warning(f"Malformed line {line_number} in {path}")
            raise MalformedConfigLineError(path, line_number, line.rstrip("\r\n"))

        key = key.lower().strip()
        option = self.lookup(f"--{key}")
        if option is None:
            logger.warning(f"Unknown key '{key}' on line {line_number} in {path}")
            raise UnknownConfigKeyError(key, path, line_number)

        return option, value.strip()

    # -------------------------------------------------------------------------
    # Argument vector
    # -------------------------------------------------------------------------

    def apply_argument_vector(self, args: Sequence[str]) -> None:
        """
        Apply `flag value` pairs from an argument vector.

        Options declared with takes_argument=False are switches: they consume
        no value token and are set to the configured switch value.

        Raises:
            UnknownFlagError: a flag names no declared option
            MissingArgumentError: a flag that takes a value ends the vector
            HelpRequested: the help option was given; nothing is applied
        """
        switch_value = str(settings.get("switches.value", "true"))  # pyright: ignore[reportUnknownMemberType, reportUnknownArgumentType]
        staged: dict[OptionT, str] = {}

        i = 0
        while i < len(args):
            flag = args[i]
            option = self.lookup(flag)
            if option is None:
                logger.warning(f"Unknown flag {flag}")
                raise UnknownFlagError(flag)

            if option.is_help:
                raise HelpRequested(self.help_text())

            if not option.takes_argument:
                staged[option] = switch_value
                i += 1
                continue

            if i + 1 >= len(args):
                logger.warning(f"Flag {flag} is missing its value")
                raise MissingArgumentError(flag)

            staged[option] = args[i + 1]
            i += 2

        self._commit(staged, source="argument vector")

    def _commit(self, staged: Mapping[OptionT, str], source: str) -> None:
        for option, value in staged.items():
            logger.debug(f"{option.name} = {value!r} (from {source})")
            self._settings[option] = value

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    def get_settings(self) -> Mapping[OptionT, str]:
        """Read-only live view of the resolved settings."""
        return MappingProxyType(self._settings)


# =============================================================================
# PROCESS ENTRY POINT
# =============================================================================


def load_or_exit(
    option_type: type[OptionT],
    args: Sequence[str],
    config_path: str | Path | None = None,
) -> Mapping[OptionT, str]:
    """
    Resolve settings for a program entry point, exiting on invalid input.

    Prints help to stdout and exits 0 when the help option is given. Prints
    the error to stderr and exits with its configured status otherwise.
    """
    loader = SettingsLoader(option_type)
    try:
        if config_path is not None:
            _ = loader.read_config(config_path)
        loader.apply_argument_vector(args)
    except HelpRequested as e:
        print(e.help_text, end="")
        sys.exit(e.exit_code)
    except SettingsLoaderError as e:
        stderr_console.print(str(e), markup=False, highlight=False, soft_wrap=True)
        sys.exit(e.exit_code)

    return loader.get_settings()
