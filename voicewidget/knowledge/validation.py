"""
Caller-side validation for knowledge uploads

URLs are validated as a batch before the store is touched. Files are checked
one by one: an oversized or unsupported file is rejected on its own and the
rest of the batch still goes through.
"""

import logging
from typing import Iterable, List, Sequence, Tuple

from yarl import URL

from ..errors import InvalidUrlError, ValidationError
from .models import FileDescriptor

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 10 * 1024 * 1024
ALLOWED_TYPES = ("pdf", "word", "text/plain")


def validate_url(url: str) -> str:
    """Return the stripped URL or raise InvalidUrlError"""
    if not isinstance(url, str):
        raise InvalidUrlError(repr(url))

    candidate = url.strip()
    if not candidate:
        raise InvalidUrlError(url, "Please enter a valid URL.")

    try:
        parsed = URL(candidate)
    except (ValueError, TypeError) as e:
        raise InvalidUrlError(url, f"Invalid URL {url!r}: {e}") from e

    if not parsed.is_absolute() or not parsed.scheme or not parsed.host:
        raise InvalidUrlError(url, f"Invalid URL {url!r}: expected scheme and host")

    return candidate


def validate_urls(urls: Iterable[str]) -> List[str]:
    """Validate every URL; the first bad one aborts the whole batch"""
    return [validate_url(url) for url in urls]


def validate_file(descriptor: FileDescriptor,
                  max_size: int = MAX_FILE_SIZE,
                  allowed_types: Sequence[str] = ALLOWED_TYPES) -> FileDescriptor:
    """Raise ValidationError if the file is too large or of an unsupported type"""
    if not descriptor.name:
        raise ValidationError("File name is required.")

    if descriptor.size_bytes < 0:
        raise ValidationError(f"File {descriptor.name} has a negative size.")

    if descriptor.size_bytes > max_size:
        limit_mb = max_size // (1024 * 1024)
        raise ValidationError(f"File {descriptor.name} exceeds the {limit_mb}MB limit.")

    mime_type = descriptor.mime_type.lower()
    if allowed_types and not any(pattern in mime_type for pattern in allowed_types):
        raise ValidationError(f"File {descriptor.name} is not a supported format (PDF, DOCX, TXT).")

    return descriptor


def partition_files(descriptors: Iterable[FileDescriptor],
                    max_size: int = MAX_FILE_SIZE,
                    allowed_types: Sequence[str] = ALLOWED_TYPES
                    ) -> Tuple[List[FileDescriptor], List[Tuple[FileDescriptor, ValidationError]]]:
    """Split descriptors into accepted files and (file, error) rejections"""
    accepted: List[FileDescriptor] = []
    rejected: List[Tuple[FileDescriptor, ValidationError]] = []

    for descriptor in descriptors:
        try:
            accepted.append(validate_file(descriptor, max_size, allowed_types))
        except ValidationError as e:
            logger.info(f"Rejected file {descriptor.name!r}: {e}")
            rejected.append((descriptor, e))

    return accepted, rejected
