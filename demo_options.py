"""
Example option enumeration.

Used as the default `--options` target of inspect_settings and as a fixture
in the test suite. Copy it as a starting point for a program's own options.
"""

from program_option import HELP_OPTION, OptionSpec, ProgramOption


class DemoOption(ProgramOption):
    VERBOSE = OptionSpec(
        short_flag="v",
        long_flag="verbose",
        description="Print progress information",
        default_value="false",
    )
    PORT = OptionSpec(
        short_flag="p",
        long_flag="port",
        description="TCP port to listen on",
        default_value="8080",
    )
    OUTPUT = OptionSpec(
        short_flag="o",
        long_flag="output",
        description="Directory for generated files",
        default_value="out",
    )
    DRY_RUN = OptionSpec(
        short_flag="n",
        long_flag="dry-run",
        description="Report what would be done without doing it",
        default_value="false",
        takes_argument=False,
    )
    HELP = HELP_OPTION
