import enum
import logging
import os
import uuid
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from fastapi import UploadFile

from lingodrill.core.config import settings
from lingodrill.core.exceptions import BadRequestError

logger = logging.getLogger(__name__)


class ExerciseFileType(str, enum.Enum):
    AUDIO = "audio"
    IMAGE = "images"


MEDIA_TYPES = {
    ExerciseFileType.AUDIO: "audio/mpeg",
    ExerciseFileType.IMAGE: "image/jpeg",
}

# Exercise column holding the stored filename for each kind
URL_COLUMNS = {
    ExerciseFileType.AUDIO: "audio_url",
    ExerciseFileType.IMAGE: "image_url",
}


@dataclass
class FileDeletionOutcome:
    file_type: ExerciseFileType
    filename: str
    deleted: bool
    error: Optional[str] = None


class FileStorage:
    """Stores exercise media under ``root/audio`` and ``root/images``."""

    def __init__(self, root: str = None):
        self.root = root or settings.UPLOAD_DIR

    def max_size(self, file_type: ExerciseFileType) -> int:
        if file_type == ExerciseFileType.AUDIO:
            return settings.MAX_AUDIO_FILE_SIZE
        return settings.MAX_IMAGE_FILE_SIZE

    def path_for(self, file_type: ExerciseFileType, filename: str) -> str:
        # filenames are generated by us; reject anything that could escape the folder
        if os.path.basename(filename) != filename or filename in ("", ".", ".."):
            raise BadRequestError("Invalid filename")
        return os.path.join(self.root, file_type.value, filename)

    @staticmethod
    def generate_unique_filename(original_name: str, content_type: Optional[str] = None) -> str:
        extension = os.path.splitext(original_name or "")[1].lstrip(".")
        if not extension and content_type and "/" in content_type:
            extension = content_type.split("/")[1]
        return f"{uuid.uuid4()}.{extension}" if extension else str(uuid.uuid4())

    def save(self, file_type: ExerciseFileType, upload: UploadFile) -> str:
        content = upload.file.read()
        limit = self.max_size(file_type)
        if len(content) > limit:
            raise BadRequestError(f"{file_type.name.lower()} file exceeds the {limit} byte limit")

        filename = self.generate_unique_filename(upload.filename, upload.content_type)
        path = self.path_for(file_type, filename)
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, "wb") as fh:
                fh.write(content)
        except OSError as e:
            logger.error("File upload failed: %s", e)
            raise BadRequestError(f"File upload failed: {e}")
        return filename

    def delete(self, file_type: ExerciseFileType, filename: str) -> FileDeletionOutcome:
        try:
            os.remove(self.path_for(file_type, filename))
        except (OSError, BadRequestError) as e:
            logger.warning("Failed to delete file %s: %s", filename, e)
            return FileDeletionOutcome(file_type, filename, deleted=False, error=str(e))
        return FileDeletionOutcome(file_type, filename, deleted=True)

    def delete_many(self, files: Iterable[Tuple[ExerciseFileType, str]]) -> List[FileDeletionOutcome]:
        """Delete every file independently; failures are reported, never raised."""
        outcomes = [self.delete(file_type, filename) for file_type, filename in files]
        failed = sum(1 for o in outcomes if not o.deleted)
        if failed:
            logger.warning("Media cleanup finished with %s of %s failures", failed, len(outcomes))
        return outcomes


def exercise_media(exercises) -> List[Tuple[ExerciseFileType, str]]:
    files = []
    for exercise in exercises:
        if exercise.audio_url:
            files.append((ExerciseFileType.AUDIO, exercise.audio_url))
        if exercise.image_url:
            files.append((ExerciseFileType.IMAGE, exercise.image_url))
    return files


def get_file_storage() -> FileStorage:
    return FileStorage()
