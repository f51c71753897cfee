"""
Writes a generated file map to disk, either as a directory tree or a ZIP archive.
"""

import logging
import shutil
import zipfile
from pathlib import Path
from typing import Optional, Union

from ..core.models import BinaryFileRef, FileMap

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _resolve_binary(ref: BinaryFileRef, font_root: Optional[PathLike]) -> Optional[Path]:
    """Local file backing a binary reference, or None when it is not available."""
    candidates = []
    source = Path(ref.source)
    if source.is_absolute():
        candidates.append(source)
    if font_root is not None:
        root = Path(font_root)
        candidates.append(root / ref.source.lstrip('/'))
        candidates.append(root / source.name)
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


def _safe_relative(path: str) -> Path:
    relative = Path(path)
    if relative.is_absolute() or '..' in relative.parts:
        raise ValueError(f"Refusing to write outside the package: {path}")
    return relative


def write_directory(files: FileMap, out_dir: PathLike, font_root: Optional[PathLike] = None) -> int:
    """
    Write every entry of ``files`` below ``out_dir``.

    Text entries are written as UTF-8. Binary references are copied from
    ``font_root``; missing sources are skipped with a warning.

    Returns:
        Number of files written.
    """
    out_path = Path(out_dir)
    written = 0
    for path in sorted(files):
        content = files[path]
        target = out_path / _safe_relative(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, BinaryFileRef):
            source = _resolve_binary(content, font_root)
            if source is None:
                logger.warning(f"Skipping {path}: source {content.source} not found")
                continue
            shutil.copyfile(source, target)
        else:
            with open(target, 'w', encoding='utf-8', newline='\n') as f:
                f.write(content)
        written += 1
    logger.info(f"Wrote {written} files to {out_path}")
    return written


def write_zip(files: FileMap, zip_path: PathLike, font_root: Optional[PathLike] = None) -> int:
    """Write ``files`` into a deflated ZIP archive. Returns the number of entries."""
    zip_path = Path(zip_path)
    zip_path.parent.mkdir(parents=True, exist_ok=True)
    written = 0
    with zipfile.ZipFile(zip_path, 'w', zipfile.ZIP_DEFLATED) as zf:
        for path in sorted(files):
            content = files[path]
            arcname = _safe_relative(path).as_posix()
            if isinstance(content, BinaryFileRef):
                source = _resolve_binary(content, font_root)
                if source is None:
                    logger.warning(f"Skipping {path}: source {content.source} not found")
                    continue
                zf.write(source, arcname)
            else:
                zf.writestr(arcname, content.encode('utf-8'))
            written += 1
    logger.info(f"Wrote {written} entries to {zip_path}")
    return written
