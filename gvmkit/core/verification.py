"""
Hash verification for downloaded archives.

This module provides:
- SHA256, SHA512, SHA1, MD5 file hash computation
- Case-insensitive, timing-attack resistant comparison
- Parsing of published checksum files (bare digest or SHA256SUMS format)
"""

import hashlib
import logging
import secrets
from pathlib import Path
from typing import Callable, Optional

logger = logging.getLogger(__name__)

_EXPECTED_LENGTHS = {"md5": 32, "sha1": 40, "sha256": 64, "sha512": 128}


class HashFormatError(Exception):
    """Exception raised when hash format is invalid."""

    pass


def normalize_algorithm(algorithm: str) -> str:
    """
    Normalize an algorithm name ('SHA256', 'sha-256', 'sha256') to hashlib's form.

    Raises:
        ValueError: If algorithm is not supported
    """
    name = algorithm.lower().replace("-", "").replace("_", "")
    if name not in _EXPECTED_LENGTHS:
        raise ValueError(f"Unsupported hash algorithm: {algorithm}")
    return name


def compute_file_hash(
    file_path: Path,
    algorithm: str = "sha256",
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> str:
    """
    Compute cryptographic hash of file.

    Args:
        file_path: Path to file
        algorithm: Hash algorithm ('sha256', 'sha512', 'sha1', 'md5')
        progress_callback: Optional progress callback (bytes_read, total_bytes)

    Returns:
        Lowercase hex string of hash

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If algorithm is not supported

    Example:
        >>> hash_value = compute_file_hash(Path('go1.21.5.linux-amd64.tar.gz'))
    """
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    algorithm = normalize_algorithm(algorithm)
    if algorithm in ("md5", "sha1"):
        logger.warning(
            f"{algorithm.upper()} is cryptographically weak and should not be "
            "used for security. Use SHA256 or SHA512 instead."
        )
    hasher = hashlib.new(algorithm)

    file_size = file_path.stat().st_size
    bytes_read = 0

    with open(file_path, "rb") as f:
        while chunk := f.read(8192):
            hasher.update(chunk)
            bytes_read += len(chunk)

            if progress_callback:
                progress_callback(bytes_read, file_size)

    return hasher.hexdigest()


def hashes_match(actual: str, expected: str) -> bool:
    """Compare two hex digests case-insensitively in constant time."""
    return secrets.compare_digest(
        actual.strip().lower().encode("utf-8"),
        expected.strip().lower().encode("utf-8"),
    )


def validate_hash_format(hash_str: str, algorithm: str) -> str:
    """
    Validate a hex digest for an algorithm and return it lowercased.

    Raises:
        HashFormatError: If the digest is empty, not hex, or the wrong length
    """
    value = hash_str.strip().lower()
    algorithm = normalize_algorithm(algorithm)

    if not value or not all(c in "0123456789abcdef" for c in value):
        raise HashFormatError(f"Invalid hash format for {algorithm}: {hash_str!r}")

    expected_len = _EXPECTED_LENGTHS[algorithm]
    if len(value) != expected_len:
        raise HashFormatError(
            f"Hash length {len(value)} doesn't match expected "
            f"{expected_len} for {algorithm}"
        )
    return value


def parse_checksum_text(text: str, file_name: Optional[str] = None) -> str:
    """
    Extract a digest from the body of a published checksum file.

    Supports a bare digest ("abc123") and listing formats
    ("abc123  file.tar.gz", "abc123 *file.tar.gz"). With a multi-entry listing
    only the entry for `file_name` is accepted.

    Raises:
        HashFormatError: If no digest can be found
    """
    entries = []
    for line in text.splitlines():
        line = line.strip()

        # Skip empty lines and comments
        if not line or line.startswith("#"):
            continue

        parts = line.split(maxsplit=1)
        listed = parts[1].strip().lstrip("*").strip() if len(parts) == 2 else None
        entries.append((parts[0], listed))

    if not entries:
        raise HashFormatError("Checksum file is empty")

    if file_name:
        for digest, listed in entries:
            if listed == file_name:
                return digest
        if len(entries) > 1:
            raise HashFormatError(f"Checksum file has no entry for {file_name}")

    return entries[0][0]
