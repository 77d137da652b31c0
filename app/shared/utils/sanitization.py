"""Input sanitization for identifiers and uploaded filenames."""

import os
import re
from typing import ClassVar


class InputSanitizer:
    """Allowlist validation for values that end up in storage keys.

    Association and document ids are interpolated into object keys, so they
    are restricted to a path-safe character set.
    """

    IDENTIFIER_MAX_LENGTH: ClassVar[int] = 64
    IDENTIFIER_PATTERN: ClassVar[re.Pattern[str]] = re.compile(
        r"^[a-zA-Z0-9_-]{1," + str(IDENTIFIER_MAX_LENGTH) + r"}$"
    )
    # Windows reserved device names; rejected so blobs can be mirrored to any filesystem.
    RESERVED_FILENAMES: ClassVar[frozenset[str]] = frozenset(
        {"con", "prn", "aux", "nul"}
        | {f"com{i}" for i in range(1, 10)}
        | {f"lpt{i}" for i in range(1, 10)}
    )

    @classmethod
    def sanitize_identifier(cls, value: str) -> str:
        """Return value if it is a path-safe identifier.

        Raises:
            ValueError: If format or length is invalid.
        """
        if not value or not cls.IDENTIFIER_PATTERN.match(value):
            raise ValueError("Invalid identifier format")
        return value

    @classmethod
    def sanitize_filename(cls, filename: str) -> str:
        """Strip path components, NUL bytes and leading/trailing dots and spaces.

        Raises:
            ValueError: If nothing usable is left or the name is reserved.
        """
        name = os.path.basename(filename.replace("\\", "/"))
        name = name.replace("\x00", "").strip(". ")
        if not name:
            raise ValueError("Filename is empty or invalid after sanitization")
        stem = name.split(".", 1)[0].lower()
        if stem in cls.RESERVED_FILENAMES:
            raise ValueError(f"Reserved filename: {name}")
        return name


def validate_identifier(value: str) -> str:
    """Validate and return identifier; raises ValueError if invalid."""
    return InputSanitizer.sanitize_identifier(value)


def sanitize_filename(filename: str) -> str:
    """Return a safe basename for filename; raises ValueError if invalid."""
    return InputSanitizer.sanitize_filename(filename)
