"""Image storage for review photos."""

import base64
import re
from pathlib import Path

_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9._-]+")


def safe_filename(filename: str) -> str:
    """Reduce an uploaded file name to a safe single path component."""
    name = Path(filename or "").name
    name = _UNSAFE_CHARS_RE.sub("_", name).strip("._")
    return name or "image"


def to_data_url(content: bytes, content_type: str) -> str:
    """Encode image bytes as a ``data:`` URL for inline preview."""
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


class ImageStore:
    """Stores review images on disk, one directory per review id."""

    def __init__(self, upload_dir: Path, public_base: str = "/uploads"):
        """Initialize the store.

        Args:
            upload_dir: Directory the files are written to
            public_base: URL prefix under which ``upload_dir`` is served
        """
        self.upload_dir = upload_dir
        self.public_base = public_base.rstrip("/")
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def upload_image(self, filename: str, content: bytes, record_id: str) -> str:
        """Write an image keyed by *record_id* and return its URL.

        Raises:
            OSError: When the file cannot be written
        """
        name = safe_filename(filename)
        record_dir = self.upload_dir / safe_filename(record_id)
        record_dir.mkdir(parents=True, exist_ok=True)
        with open(record_dir / name, "wb") as f:
            f.write(content)
        return f"{self.public_base}/{record_dir.name}/{name}"
