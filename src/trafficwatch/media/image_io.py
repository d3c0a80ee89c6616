from __future__ import annotations

from pathlib import Path
from typing import Iterator

from PIL import Image, UnidentifiedImageError

SUPPORTED_EXTENSIONS = {
    ".jpg",
    ".jpeg",
    ".jpe",
}


def _exts_from_mask(mask: str) -> set[str]:
    if "{" in mask and "}" in mask:
        brace = mask[mask.index("{") + 1 : mask.index("}")]
        items = [x.strip().lower() for x in brace.split(",") if x.strip()]
        return {f".{i.lstrip('.')}" for i in items}

    ext = Path(mask).suffix.lower()
    if ext:
        return {ext}
    return set(SUPPORTED_EXTENSIONS)


def iter_image_files(root: Path, mask: str = "**/*.{jpg,jpeg}") -> Iterator[Path]:
    exts = _exts_from_mask(mask) or set(SUPPORTED_EXTENSIONS)
    for p in sorted(root.rglob("*")):
        if not p.is_file():
            continue
        if p.suffix.lower() not in exts:
            continue
        yield p


def expand_paths(paths: list[Path], mask: str = "**/*.{jpg,jpeg}") -> list[Path]:
    out: list[Path] = []
    for p in paths:
        if p.is_dir():
            out.extend(iter_image_files(p, mask))
        else:
            out.append(p)
    return out


def read_image_bytes(path: Path) -> bytes:
    with path.open("rb") as f:
        return f.read()


def read_dimensions(path: Path) -> tuple[int | None, int | None]:
    try:
        with Image.open(path) as img:
            width, height = img.size
    except (UnidentifiedImageError, OSError):
        return None, None
    return width, height
