"""Reading bibliographies and persisting query configurations."""

from .config_store import dump_config, load_config, load_config_file, save_config
from .parser import EntryParser, parse_entries

__all__ = [
    "EntryParser",
    "parse_entries",
    "dump_config",
    "load_config",
    "save_config",
    "load_config_file",
]
