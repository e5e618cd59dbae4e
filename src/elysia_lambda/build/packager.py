"""
Package assembler.
Wraps the bundle into the ZIP archive uploaded to Lambda.
"""
import logging
import os
import tempfile
import zipfile

logger = logging.getLogger(__name__)

HANDLER_FILENAME = "index.js"


class PackageAssembler:
    """Builds a single-entry archive around the bundle."""

    def __init__(self, handler_filename: str = HANDLER_FILENAME):
        self.handler_filename = handler_filename

    def assemble(self, bundle_path: str, archive_path: str) -> str:
        """
        Write ``bundle_path`` into ``archive_path`` as the handler file.

        The archive is written next to its destination and moved into place,
        so an existing file at ``archive_path`` survives a failed write.

        Args:
            bundle_path: Path to the bundled script
            archive_path: Destination of the ZIP archive

        Returns:
            The archive path
        """
        directory = os.path.dirname(os.path.abspath(archive_path))
        fd, partial_path = tempfile.mkstemp(prefix=".elysia-lambda-", suffix=".zip", dir=directory)
        os.close(fd)
        try:
            with zipfile.ZipFile(partial_path, "w", zipfile.ZIP_DEFLATED) as zipf:
                zipf.write(bundle_path, arcname=self.handler_filename)
            # mkstemp creates the file owner-only
            os.chmod(partial_path, 0o644)
            os.replace(partial_path, archive_path)
        except Exception:
            os.remove(partial_path)
            raise

        logger.info(f"Wrote archive {archive_path}")
        return archive_path
