"""ID generators (CUID2) for document identifiers."""

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Document ids are produced here by the upload service, not by the
    database, so the storage key can be derived before the record exists.

    Returns:
        A new CUID string (lowercase alphanumeric, safe inside object keys).
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result
