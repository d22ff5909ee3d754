"""ZIP extraction for the dataset archive."""

import os
import zipfile

from dcprecalc.errors import ErrorCode, FileSystemError


class ZipExtractor:

    def __init__(self, logger=None):
        self.logger = logger

    def extract(self, archive_path: str, dest_dir: str) -> int:
        """Extract ``archive_path`` into ``dest_dir`` and return the member count.

        Members that would land outside ``dest_dir`` are refused.

        Raises:
            FileSystemError: Corrupt archive, unsafe member path or write failure.
        """
        if self.logger:
            self.logger.status(f"Extracting {archive_path} to {dest_dir}...")
        os.makedirs(dest_dir, exist_ok=True)
        root = os.path.realpath(dest_dir)

        try:
            with zipfile.ZipFile(archive_path) as archive:
                members = archive.infolist()
                for member in members:
                    target = os.path.realpath(os.path.join(root, member.filename))
                    if os.path.commonpath([root, target]) != root:
                        raise FileSystemError(f"Archive member escapes the target directory: {member.filename}",
                                              path=archive_path, operation="extract",
                                              code=ErrorCode.FS_INVALID_STRUCTURE)
                archive.extractall(root)
        except zipfile.BadZipFile as e:
            raise FileSystemError(f"Corrupt archive: {e}", path=archive_path, operation="extract",
                                  code=ErrorCode.FS_INVALID_STRUCTURE) from e
        except OSError as e:
            raise FileSystemError.from_os_error(e, dest_dir, "extract into") from e

        if self.logger:
            self.logger.verbose(f"Extracted {len(members)} archive members")
        return len(members)
