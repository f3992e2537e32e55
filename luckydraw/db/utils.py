import os
from pathlib import Path

_TRUTHY = {"1", "true", "yes", "on"}


def resolve_sqlite_url(url: str, project_root: Path) -> str:
    """Resolve 'sqlite:///./relative/path' to an absolute sqlite:/// URL.

    Keeps other URL forms unchanged.
    """
    prefix = "sqlite:///./"
    if not url.startswith(prefix):
        return url
    rel = url[len(prefix) :]
    return f"sqlite:///{(project_root / rel).resolve()}"


def env_flag(name: str, default: bool = False) -> bool:
    """Read a boolean switch such as ``ALLOW_DRAWING_RESET`` from the environment."""
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY

