"""File utilities."""
from __future__ import annotations

from pathlib import Path

# Extensions accepted at the upload boundary. Only JSON and YAML decode;
# everything else is still attempted as JSON/YAML by the decoder.
SUPPORTED_EXTENSIONS = (
    ".json",
    ".yaml",
    ".yml",
    ".toml",
    ".xml",
    ".config",
    ".conf",
    ".properties",
    ".env",
    ".tf",
    ".hcl",
    ".dockerfile",
)

_SIZE_UNITS = ("B", "KB", "MB", "GB")


def ensure_dir(path: str) -> Path:
    """Ensure directory exists and return Path."""
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


def is_supported_file_type(filename: str) -> bool:
    lowered = (filename or "").lower()
    return any(lowered.endswith(ext) for ext in SUPPORTED_EXTENSIONS)


def format_file_size(num_bytes: int) -> str:
    """Human readable size, e.g. ``1.5 KB``."""
    if num_bytes <= 0:
        return "0 B"
    idx = 0
    value = float(num_bytes)
    while value >= 1024 and idx < len(_SIZE_UNITS) - 1:
        value /= 1024
        idx += 1
    text = f"{value:.1f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[idx]}"


def read_text_file(path: str) -> str:
    """Safely read a file as UTF-8 with fallbacks.

    - Missing files raise FileNotFoundError, directories raise ValueError.
    - Tries a strict UTF-8 read first, then falls back to UTF-8 with errors="ignore".
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Missing file: {path}")
    if p.is_dir():
        raise ValueError(f"Not a file: {p.name}")
    try:
        return p.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError:
        return p.read_text(encoding="utf-8-sig", errors="ignore")


def decode_upload(data: bytes) -> str:
    """Decode uploaded bytes, dropping a UTF-8 BOM and undecodable bytes."""
    return data.decode("utf-8-sig", errors="ignore")
