# services/util.py

import os


def get_data_path():
    path = get_env('ATTACHKIT_DATA_PATH')
    return path.strip() if path else 'data'


def get_env(env: str, default: str | None = None):
    return os.environ.get(env, default)


def get_extension(name: str) -> str:
    """Lower-cased text after the last dot of *name*, or ``""``."""
    base = name.replace('\\', '/').rsplit('/', 1)[-1]
    if '.' not in base:
        return ''
    return base.rsplit('.', 1)[-1].lower()
