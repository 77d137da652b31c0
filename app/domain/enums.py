"""Domain enumerations for the document management service.

Enums name the stages of the upload and delete sequences so that logs and
failure details say exactly how far a sequence got.
"""

from enum import Enum


class UploadStage(str, Enum):
    """Stage of the upload sequence.

    VALIDATING -> STORING_BLOB -> PERSISTING_METADATA -> DONE, with
    ROLLING_BACK entered when a step after the blob write fails.
    """

    VALIDATING = "validating"
    STORING_BLOB = "storing_blob"
    PERSISTING_METADATA = "persisting_metadata"
    ISSUING_URL = "issuing_url"
    ROLLING_BACK = "rolling_back"
    DONE = "done"


class DeleteStage(str, Enum):
    """Stage of the delete sequence: FOUND -> BLOB_DELETED -> METADATA_DELETED."""

    FOUND = "found"
    BLOB_DELETED = "blob_deleted"
    METADATA_DELETED = "metadata_deleted"
