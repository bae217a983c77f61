"""Configuration management.

``Settings`` is a **metaclass-based singleton**: the first call to
``Settings.load()`` creates the instance; every later call returns
the same object.  Use ``update()`` to change values at runtime, or
``reload()`` to re-read everything from disk.

All user-editable configuration lives under ``.metadata/``:

* ``reviewer.yaml``  – signed-in reviewer (id + display name)
* ``lookup.yaml``    – Semantic Scholar API key, timeout, debounce

On first run, missing files are copied from ``.metadata.example/``.
"""

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
DEFAULT_DEBOUNCE_MS = 300
DEFAULT_FORM_TTL_MINUTES = 60


# ---------------------------------------------------------------------------
# Singleton metaclass
# ---------------------------------------------------------------------------

class _SettingsMeta(type):
    """Metaclass that enforces a process-wide singleton for *Settings*.

    * First ``Settings(...)`` creates and caches the instance.
    * Later ``Settings(...)`` calls return the cached instance (args ignored).
    """

    _instances: dict[type, Any] = {}

    def __call__(cls, *args: Any, **kwargs: Any) -> Any:
        if cls not in cls._instances:
            cls._instances[cls] = super().__call__(*args, **kwargs)
        return cls._instances[cls]


# ---------------------------------------------------------------------------
# Settings dataclass (singleton)
# ---------------------------------------------------------------------------

@dataclass
class Settings(metaclass=_SettingsMeta):
    """Application settings — singleton with runtime-mutable fields.

    Usage::

        settings = Settings.load()          # first call → create
        settings = Settings.load()          # later → same object
        settings.update(db_path=Path(...))  # runtime change
        settings = Settings.reload()        # re-read from disk
    """

    reviewer_id: str = "local"
    reviewer_name: str = "Anonymous"
    api_key: Optional[str] = None
    lookup_timeout: float = DEFAULT_TIMEOUT
    debounce_ms: int = DEFAULT_DEBOUNCE_MS
    form_ttl_minutes: int = DEFAULT_FORM_TTL_MINUTES
    db_path: Path = Path("reviews.db")
    metadata_dir: Path = Path(".metadata")
    upload_dir: Path = Path("uploads")

    # ── Computed properties ────────────────────────────────────────────

    @property
    def debounce_wait(self) -> float:
        """Debounce window in seconds."""
        return self.debounce_ms / 1000.0

    @property
    def form_ttl(self) -> float:
        """Idle form session lifetime in seconds."""
        return self.form_ttl_minutes * 60.0

    # ── Runtime helpers ───────────────────────────────────────────────

    def update(self, **kwargs: Any) -> None:
        """Mutate settings fields at runtime.

        >>> Settings.load().update(db_path=Path("/tmp/test.db"))
        """
        for key, value in kwargs.items():
            if not hasattr(self, key):
                raise AttributeError(f"Settings has no field '{key}'")
            setattr(self, key, value)

    # ── Factory / lifecycle ───────────────────────────────────────────

    @classmethod
    def load(cls, base_dir: Optional[Path] = None) -> "Settings":
        """Load or return the singleton Settings instance.

        On first call the singleton is created; subsequent calls return
        the cached instance.  Pass *base_dir* to override the project
        root (defaults to the repository root one level above ``paperreview/``).
        """
        if cls in _SettingsMeta._instances:
            return _SettingsMeta._instances[cls]  # type: ignore[return-value]

        if base_dir is None:
            base_dir = Path(__file__).resolve().parent.parent

        metadata_dir = base_dir / ".metadata"
        cls._ensure_default_files(base_dir, metadata_dir)

        reviewer_id, reviewer_name = _load_reviewer(metadata_dir / "reviewer.yaml")
        form_ttl_minutes = _load_form_ttl(metadata_dir / "reviewer.yaml")
        lookup = _load_lookup(metadata_dir / "lookup.yaml")

        return cls(
            reviewer_id=reviewer_id,
            reviewer_name=reviewer_name,
            api_key=lookup["api_key"],
            lookup_timeout=lookup["timeout"],
            debounce_ms=lookup["debounce_ms"],
            form_ttl_minutes=form_ttl_minutes,
            db_path=base_dir / "reviews.db",
            metadata_dir=metadata_dir,
            upload_dir=base_dir / "uploads",
        )

    @classmethod
    def reload(cls, base_dir: Optional[Path] = None) -> "Settings":
        """Discard the current singleton and re-load from disk."""
        cls.reset()
        return cls.load(base_dir)

    @classmethod
    def reset(cls) -> None:
        """Discard the singleton so the next ``load()`` re-creates it."""
        _SettingsMeta._instances.pop(cls, None)

    # ── Private ───────────────────────────────────────────────────────

    @staticmethod
    def _ensure_default_files(base_dir: Path, metadata_dir: Path) -> None:
        """Copy ``.metadata.example/`` templates when real files are missing."""
        metadata_dir.mkdir(parents=True, exist_ok=True)

        example_dir = base_dir / ".metadata.example"
        if not example_dir.exists():
            return

        for example_file in example_dir.iterdir():
            if example_file.is_file():
                target = metadata_dir / example_file.name
                if not target.exists():
                    shutil.copy2(example_file, target)
                    logger.info("Created .metadata/%s from template", example_file.name)


# ---------------------------------------------------------------------------
# YAML loaders
# ---------------------------------------------------------------------------

def _read_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML mapping; anything unreadable counts as empty."""
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def _load_reviewer(path: Path) -> tuple[str, str]:
    """Load the signed-in reviewer from ``reviewer.yaml``."""
    data = _read_yaml(path)
    reviewer_id = str(data.get("reviewer_id") or "local")
    reviewer_name = str(data.get("reviewer_name") or "Anonymous")
    return reviewer_id, reviewer_name


def _load_form_ttl(path: Path) -> int:
    """Idle form lifetime (minutes) from ``reviewer.yaml``; non-positive values fall back."""
    data = _read_yaml(path)
    try:
        minutes = int(data.get("form_ttl_minutes", DEFAULT_FORM_TTL_MINUTES))
    except (TypeError, ValueError):
        return DEFAULT_FORM_TTL_MINUTES
    return minutes if minutes > 0 else DEFAULT_FORM_TTL_MINUTES


def save_reviewer(path: Path, reviewer_id: str, reviewer_name: str) -> None:
    """Persist the signed-in reviewer to ``reviewer.yaml``, keeping other keys."""
    data = _read_yaml(path)
    data.update(reviewer_id=reviewer_id, reviewer_name=reviewer_name)
    with open(path, "w", encoding="utf-8") as f:
        f.write("# Reviewer identity used as createdBy / reviewerName\n")
        yaml.dump(
            data,
            f,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
        )


def _load_lookup(path: Path) -> dict[str, Any]:
    """Load lookup options from ``lookup.yaml``.

    Returns:
        Dict with ``api_key``, ``timeout`` and ``debounce_ms``
    """
    data = _read_yaml(path)
    api_key = data.get("api_key") or None
    try:
        timeout = float(data.get("timeout", DEFAULT_TIMEOUT))
    except (TypeError, ValueError):
        timeout = DEFAULT_TIMEOUT
    try:
        debounce_ms = int(data.get("debounce_ms", DEFAULT_DEBOUNCE_MS))
    except (TypeError, ValueError):
        debounce_ms = DEFAULT_DEBOUNCE_MS
    return {
        "api_key": str(api_key) if api_key else None,
        "timeout": timeout,
        "debounce_ms": debounce_ms,
    }
