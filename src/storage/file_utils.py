"""
File utility functions for staging builds on the local filesystem.

Small writes go through aiofiles; whole-tree copies and removals are
blocking shutil calls pushed onto a worker thread.
"""

import asyncio
import json
import mimetypes
import shutil
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

import aiofiles
import structlog

logger = structlog.get_logger(__name__)

PathLike = Union[str, Path]


class FileUtils:
    """Utility class for file operations used while staging builds."""

    # WebGL output and model formats that mimetypes does not know about
    CUSTOM_MIME_TYPES: Dict[str, str] = {
        '.wasm': 'application/wasm',
        '.data': 'application/octet-stream',
        '.unityweb': 'application/octet-stream',
        '.fbx': 'model/fbx',
        '.gltf': 'model/gltf+json',
        '.glb': 'model/gltf-binary',
        '.obj': 'model/obj',
    }

    def __init__(self):
        mimetypes.init()
        for extension, mime_type in self.CUSTOM_MIME_TYPES.items():
            mimetypes.add_type(mime_type, extension)

    def get_content_type(self, file_path: PathLike) -> str:
        """
        Get MIME content type for a file.

        Args:
            file_path: Path to the file

        Returns:
            MIME content type string
        """
        content_type, _ = mimetypes.guess_type(str(file_path))
        return content_type or 'application/octet-stream'

    def sanitize_filename(self, filename: str) -> str:
        """
        Sanitize filename for safe storage.

        Args:
            filename: Original filename

        Returns:
            Sanitized filename, never empty
        """
        unsafe_chars = '<>:"/\\|?*'
        for char in unsafe_chars:
            filename = filename.replace(char, '_')

        # Control characters never belong in a path
        filename = ''.join(c if ord(c) >= 32 else '_' for c in filename)

        filename = filename.strip(' .')

        if len(filename) > 255:
            path = Path(filename)
            name = path.stem[:200]
            filename = f"{name}{path.suffix}"

        return filename or 'unnamed'

    @staticmethod
    async def ensure_directory(path: PathLike) -> Path:
        directory = Path(path)
        await asyncio.to_thread(directory.mkdir, parents=True, exist_ok=True)
        return directory

    async def write_text(self, path: PathLike, content: str) -> Path:
        """Write a UTF-8 text file, creating parent directories."""
        target = Path(path)
        await self.ensure_directory(target.parent)
        async with aiofiles.open(target, 'w', encoding='utf-8') as f:
            await f.write(content)
        return target

    async def write_bytes(self, path: PathLike, content: bytes) -> Path:
        target = Path(path)
        await self.ensure_directory(target.parent)
        async with aiofiles.open(target, 'wb') as f:
            await f.write(content)
        return target

    async def write_json(self, path: PathLike, data: Any) -> Path:
        return await self.write_text(path, json.dumps(data, indent=2, default=str))

    async def copy_file(self, source: PathLike, destination: PathLike) -> Path:
        target = Path(destination)
        await self.ensure_directory(target.parent)
        await asyncio.to_thread(shutil.copy2, str(source), str(target))
        return target

    async def copy_tree(self, source: PathLike, destination: PathLike) -> Path:
        """
        Recursively copy a directory tree.

        Args:
            source: Existing directory to copy
            destination: Target directory; merged into if it already exists

        Returns:
            The destination path
        """
        target = Path(destination)
        await asyncio.to_thread(shutil.copytree, str(source), str(target), dirs_exist_ok=True)
        return target

    async def copy_path(self, source: PathLike, destination: PathLike) -> Path:
        """Copy a file or a directory, whichever source is."""
        if Path(source).is_dir():
            return await self.copy_tree(source, destination)
        return await self.copy_file(source, destination)

    async def remove_tree(self, path: PathLike) -> bool:
        """
        Remove a directory tree, best effort.

        Returns:
            True if the tree was removed, False if it was missing or removal failed
        """
        target = Path(path)
        if not target.exists():
            return False
        try:
            await asyncio.to_thread(shutil.rmtree, str(target))
            return True
        except OSError as e:
            logger.warning("Failed to remove directory", path=str(target), error=str(e))
            return False

    def iter_files(self, root: PathLike) -> Iterator[Tuple[Path, str]]:
        """Yield (absolute path, posix path relative to root) for every file under root."""
        base = Path(root)
        for file_path in sorted(base.rglob('*')):
            if file_path.is_file():
                yield file_path, file_path.relative_to(base).as_posix()

    async def read_tail(self, path: PathLike, max_lines: int = 20) -> List[str]:
        """Last lines of a text file, or an empty list if it cannot be read."""
        target = Path(path)
        if not target.exists():
            return []
        try:
            async with aiofiles.open(target, 'r', encoding='utf-8', errors='replace') as f:
                lines = (await f.read()).splitlines()
        except OSError:
            return []
        return lines[-max_lines:]


_default_file_utils: Optional[FileUtils] = None


def get_file_utils() -> FileUtils:
    """Shared FileUtils instance."""
    global _default_file_utils
    if _default_file_utils is None:
        _default_file_utils = FileUtils()
    return _default_file_utils
