# services/config.py

from pathlib import Path

from pydantic import ValidationError

import services.util as u
import services.logger as log
import services.config_io as config_io
from services.config_schema import AppConfig

l = log.get_logger()


def load_app_config(path: str | Path | None = None) -> AppConfig:
    """
    Load and validate the application config.

    With no *path*, the data directory is searched for
    ``config.json`` / ``.yaml`` / ``.yml`` / ``.toml``; when none exists the
    defaults are used.  The data directory comes from ``ATTACHKIT_DATA_PATH``
    only.

    :raises FileNotFoundError: an explicit *path* does not exist.
    :raises ValueError: the file cannot be parsed or fails validation.
    """
    if path is None:
        path = config_io.find_config(Path(u.get_data_path()))
        if path is None:
            l.debug(f"No config file in {u.get_data_path()}, using defaults")
            return _finish(AppConfig())
    path = Path(path)

    if not path.is_file():
        raise FileNotFoundError(f"File not found: {path}")

    try:
        raw = config_io.load_config(path)
    except ValueError:
        raise
    except Exception as e:
        raise ValueError(f"Read config failed: {path}, Error: {e}") from e

    try:
        config = AppConfig.model_validate(raw)
    except ValidationError as e:
        raise ValueError(f"Config error in {path}:\n{e}") from e

    l.info(f"Loaded config from: {path}")
    return _finish(config)


def _finish(config: AppConfig) -> AppConfig:
    log.register_sensitive(config.sensitive_values())
    return config
