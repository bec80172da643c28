from pathlib import Path

from dynaconf import Dynaconf

settings = Dynaconf(
    envvar_prefix="ARGLOADER",
    root_path=str(Path(__file__).parent),
    settings_files=[
        "settings.toml",  # Application defaults
        "user.toml",  # Local overrides (optional)
    ],
    merge_enabled=True,  # Merge nested tables instead of replacing
)

# `envvar_prefix` = export envvars with `export ARGLOADER_EXIT_CODES__MISSING_ARGUMENT=4`.
# `settings_files` = Load these files in the order, missing files are skipped.
# user.toml is loaded after settings.toml so local config overrides defaults
# Every lookup in the code carries its own fallback value.
