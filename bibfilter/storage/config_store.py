"""Query configuration persistence.

Configurations are stored as JSON with the camelCase keys used by saved
query files (``blocks``, ``operators``, ``caseInsensitive``,
``searchFields``, ``isRegex``). Loading a saved file reproduces the same
matching behaviour.
"""

import logging
from pathlib import Path

import msgspec

from bibfilter.core.exceptions import ConfigError
from bibfilter.core.models import QueryConfig

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("blocks", "operators")


def dump_config(config: QueryConfig) -> bytes:
    """Serialize a configuration to indented JSON."""
    return msgspec.json.format(msgspec.json.encode(config), indent=2)


def load_config(data: bytes | str, source: str = "<string>") -> QueryConfig:
    """Deserialize a configuration.

    Args:
        data: JSON document
        source: Name used in error messages

    Returns:
        Decoded configuration

    Raises:
        ConfigError: If the document is not a valid configuration
    """
    try:
        raw = msgspec.json.decode(data)
    except msgspec.DecodeError as e:
        raise ConfigError(source, str(e)) from e

    if not isinstance(raw, dict):
        raise ConfigError(source, "expected a JSON object")
    missing = [key for key in REQUIRED_KEYS if key not in raw]
    if missing:
        raise ConfigError(source, f"missing {', '.join(missing)}")

    try:
        config = msgspec.convert(raw, QueryConfig)
    except msgspec.ValidationError as e:
        raise ConfigError(source, str(e)) from e

    if not config.is_consistent():
        logger.warning(
            "%s: %d blocks but %d operators",
            source,
            len(config.blocks),
            len(config.operators),
        )
    return config


def save_config(config: QueryConfig, path: Path) -> None:
    """Write a configuration file, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(dump_config(config))
    logger.debug("Saved query configuration to %s", path)


def load_config_file(path: Path) -> QueryConfig:
    """Read a configuration file."""
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ConfigError(str(path), f"cannot read file: {e}") from e
    return load_config(data, source=str(path))
