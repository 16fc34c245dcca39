"""
Synacor VM — Program Image Loader

Image format: a flat sequence of little-endian 16-bit words, no
header. Word 0 is loaded at address 0. Images shorter than the
address space are zero padded; longer ones are rejected.
"""

import logging
import struct
from pathlib import Path
from typing import List

from .config import MEMORY_SIZE
from .errors import ImageError
from .mem.memory import Memory

log = logging.getLogger(__name__)


def words_from_bytes(data: bytes) -> List[int]:
    """Decode little-endian 16-bit words.

    A trailing odd byte cannot form a word and is dropped.
    """
    count = len(data) // 2
    if len(data) % 2:
        log.warning("Image has odd length (%d bytes); ignoring last byte", len(data))
    if count > MEMORY_SIZE:
        raise ImageError(f"Image has {count} words; address space holds {MEMORY_SIZE}")
    return list(struct.unpack(f'<{count}H', data[:count * 2]))


def read_image(path) -> List[int]:
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ImageError(f"Cannot read {path}: {e}") from e
    words = words_from_bytes(data)
    log.info("Read %d words from %s", len(words), path)
    return words


def load_image(path) -> Memory:
    """Read an image file into a fresh zero-padded Memory."""
    return Memory(read_image(path))


def image_info(words: List[int]) -> dict:
    """Size summary of an image for `synvm info`."""
    return {
        'words': len(words),
        'bytes': len(words) * 2,
        'padding': MEMORY_SIZE - len(words),
        'nonzero': sum(1 for w in words if w),
        'max_word': max(words) if words else 0,
    }
