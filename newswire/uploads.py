"""
Image Upload Handling for NewsWire

This module validates untrusted image uploads and stores them on disk:
- Extension, declared content type and size checks
- Magic-number sniffing of the first bytes of the stream
- Storage under a random name inside a logical folder ("News", "Profiles", ...)
- Deletion of superseded images, skipping shared default assets

Nothing raised by the filesystem or the upload stream escapes this module;
failures are logged and reported as False/None so callers can fall back to
an existing or default image path.
"""

import enum
import logging
import os
import uuid
from pathlib import Path

from django.conf import settings

logger = logging.getLogger(__name__)


NEWS_FOLDER = 'News'
PROFILES_FOLDER = 'Profiles'
TEAM_MEMBERS_FOLDER = 'TeamMembers'

ALLOWED_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.gif', '.webp')

ALLOWED_CONTENT_TYPES = (
    'image/jpeg',
    'image/jpg',
    'image/png',
    'image/gif',
    'image/webp',
)

# Bytes needed to tell every supported format apart
SIGNATURE_PEEK_SIZE = 12


class ImageFormat(enum.Enum):
    JPEG = 'jpeg'
    PNG = 'png'
    GIF = 'gif'
    WEBP = 'webp'


# Each format lists (offset, bytes) pairs that must all match
IMAGE_SIGNATURES = (
    (ImageFormat.JPEG, ((0, b'\xff\xd8'),)),
    (ImageFormat.PNG, ((0, b'\x89PNG'),)),
    (ImageFormat.GIF, ((0, b'GIF'),)),
    (ImageFormat.WEBP, ((0, b'RIFF'), (8, b'WEBP'))),
)


def sniff_image_format(header):
    """
    Identify an image format from the leading bytes of a file.

    Args:
        header: Bytes read from the start of the file

    Returns:
        The matching ImageFormat, or None when no known signature matches
    """
    for image_format, parts in IMAGE_SIGNATURES:
        if all(header[offset:offset + len(magic)] == magic for offset, magic in parts):
            return image_format
    return None


def get_extension(file_name):
    """Lowercased extension of a file name, including the dot."""
    return os.path.splitext(file_name or '')[1].lower()


class ImageUploadService:
    """
    Validate, store and delete uploaded images.

    Storage roots and the default-asset marker are injected at construction;
    omitted values are read from Django settings:
    - UPLOADS_ROOT: directory holding one subdirectory per logical folder
    - UPLOADS_URL: public URL prefix for stored images
    - WEB_ROOT: legacy root for images referenced outside UPLOADS_URL
    - DEFAULT_ASSET_MARKER: substring identifying shared default images
    - MAX_IMAGE_UPLOAD_SIZE: per-file size ceiling in bytes
    """

    def __init__(self, uploads_root=None, web_root=None, uploads_url=None,
                 default_marker=None, max_file_size=None):
        self.uploads_root = uploads_root if uploads_root is not None else getattr(settings, 'UPLOADS_ROOT', None)
        self.web_root = web_root if web_root is not None else getattr(settings, 'WEB_ROOT', None)
        self.uploads_url = uploads_url or getattr(settings, 'UPLOADS_URL', '/uploads/')
        self.default_marker = default_marker or getattr(settings, 'DEFAULT_ASSET_MARKER', 'default')
        self.max_file_size = max_file_size or getattr(settings, 'MAX_IMAGE_UPLOAD_SIZE', 5 * 1024 * 1024)

    # ===== VALIDATION =====

    def validate_image_file(self, file):
        """
        Decide whether an upload is an acceptable image.

        Rejects missing or empty files, files above the size ceiling,
        unknown extensions or content types, and streams whose leading
        bytes match no known image signature.

        Args:
            file: Django UploadedFile (or any object with size, name,
                content_type, read and seek)

        Returns:
            Boolean indicating if the file may be stored
        """
        if file is None or not getattr(file, 'size', 0):
            logger.warning("Rejected upload: file is missing or empty")
            return False

        if file.size > self.max_file_size:
            logger.warning(f"Rejected upload '{file.name}': {file.size} bytes exceeds {self.max_file_size}")
            return False

        extension = get_extension(file.name)
        if extension not in ALLOWED_EXTENSIONS:
            logger.warning(f"Rejected upload '{file.name}': extension '{extension}' is not allowed")
            return False

        content_type = (getattr(file, 'content_type', None) or '').lower()
        if content_type not in ALLOWED_CONTENT_TYPES:
            logger.warning(f"Rejected upload '{file.name}': content type '{content_type}' is not allowed")
            return False

        if self._sniff(file) is None:
            logger.warning(f"Rejected upload '{file.name}': content does not match an image signature")
            return False

        return True

    def _sniff(self, file):
        # The stream is read again when the file is written, so rewind it
        try:
            file.seek(0)
            header = file.read(SIGNATURE_PEEK_SIZE)
            file.seek(0)
        except Exception as e:
            logger.error(f"Error reading signature of '{file.name}': {str(e)}")
            return None
        return sniff_image_format(header or b'')

    # ===== STORAGE =====

    def upload_image(self, file, folder):
        """
        Store a validated image under a fresh random name.

        Args:
            file: Uploaded image file
            folder: Logical folder name, e.g. "News" or "Profiles"

        Returns:
            Public path "/uploads/<folder>/<name>" or None on any failure
        """
        if not self.validate_image_file(file):
            return None

        if not self.uploads_root:
            logger.error("UPLOADS_ROOT is not configured; cannot store upload")
            return None

        file_name = f"{uuid.uuid4().hex}{get_extension(file.name)}"
        file_path = None
        created = False

        try:
            folder_path = Path(self.uploads_root) / folder
            folder_path.mkdir(parents=True, exist_ok=True)
            file_path = folder_path / file_name

            # Exclusive create: an existing file is never overwritten
            with open(file_path, 'xb') as destination:
                created = True
                for chunk in file.chunks():
                    destination.write(chunk)
                destination.flush()

            if not file_path.is_file():
                logger.error(f"File was not created: {file_path}")
                return None

        except Exception as e:
            logger.error(f"Error uploading file '{file.name}' to '{folder}': {str(e)}", exc_info=True)
            if created:
                self._discard_partial(file_path)
            return None

        public_path = f"{self.uploads_url.rstrip('/')}/{folder}/{file_name}"
        logger.info(f"Stored upload '{file.name}' as {public_path}")
        return public_path

    def _discard_partial(self, file_path):
        """Remove a file left incomplete by a failed write."""
        try:
            file_path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Could not remove partial upload {file_path}: {str(e)}")

    def is_default_asset(self, path):
        """Check if a path points at a shared default image."""
        return bool(path) and self.default_marker in path

    def resolve_path(self, path):
        """
        Map a public image path to its location on disk.

        Paths under UPLOADS_URL resolve against UPLOADS_ROOT; anything else
        resolves against the legacy WEB_ROOT.

        Returns:
            Absolute Path, or None when no root applies or the path escapes it
        """
        prefix = self.uploads_url.rstrip('/') + '/'
        if path.lower().startswith(prefix.lower()):
            root = self.uploads_root
            relative = path[len(prefix):]
        else:
            root = self.web_root
            relative = path.lstrip('/')

        if not root:
            return None

        root = Path(root).resolve()
        full_path = (root / relative).resolve()
        if full_path != root and root not in full_path.parents:
            logger.warning(f"Refusing to resolve path outside storage root: {path}")
            return None
        return full_path

    def delete_image(self, path):
        """
        Delete a previously stored image.

        Empty paths and default assets are left alone and reported as success.

        Args:
            path: Public image path stored on the owning record

        Returns:
            Boolean indicating if the file is gone (False when it could not
            be located or removed)
        """
        if not path or self.is_default_asset(path):
            return True

        try:
            full_path = self.resolve_path(path)
            if full_path is None:
                return False

            if not full_path.is_file():
                logger.warning(f"Image to delete does not exist: {path}")
                return False

            full_path.unlink()
            logger.info(f"Deleted image: {path}")
            return True

        except Exception as e:
            logger.error(f"Error deleting file '{path}': {str(e)}", exc_info=True)
            return False

    # ===== RECORD IMAGE FLOWS =====

    def store_image(self, file, folder, default_path):
        """
        Pick the image path for a newly created record.

        Returns:
            The stored upload's path, or default_path when there is no
            file or it was rejected or could not be written
        """
        if file is None:
            return default_path
        return self.upload_image(file, folder) or default_path

    def replace_image(self, file, current_path, folder, default_path):
        """
        Pick the image path for an updated record.

        The old image is deleted only after the new one has been written,
        so a failed upload leaves the record pointing at a file that still
        exists.

        Args:
            file: New upload, or None to keep the current image
            current_path: Image path currently stored on the record
            folder: Logical folder for the new image
            default_path: Fallback when the record has no image at all

        Returns:
            Path to store on the record (never empty)
        """
        kept_path = current_path or default_path

        if file is None:
            return kept_path

        new_path = self.upload_image(file, folder)
        if not new_path:
            logger.info(f"Keeping existing image {kept_path}; replacement upload failed")
            return kept_path

        if current_path and not self.is_default_asset(current_path):
            self.delete_image(current_path)

        return new_path
