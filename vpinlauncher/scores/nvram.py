"""
PinMAME NVRAM score storage.

The launcher only needs two operations from score storage: read the raw
bytes for a store id, and decode a score from them. ``ScoreStore`` is that
contract; ``NVRamScoreStore`` implements it over a PinMAME ``nvram``
directory using per-ROM field layouts from the config file.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

logger = logging.getLogger(__name__)


class ScoreStoreError(Exception):
    """Base exception for score storage errors."""
    pass


class NVRamNotFoundError(ScoreStoreError):
    """NVRAM file for a store id does not exist."""
    pass


class NVRamReadError(ScoreStoreError):
    """NVRAM file exists but could not be read."""
    pass


class ScoreFormatError(ScoreStoreError):
    """NVRAM bytes could not be decoded into a score."""
    pass


@dataclass(frozen=True)
class ScoreLayout:
    """Location and encoding of the grand champion score in an NVRAM image."""
    offset: int
    size: int
    encoding: str = "bcd"           # 'bcd' or 'uint'
    endian: str = "be"              # 'be' or 'le' (uint only)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ScoreLayout":
        return cls(
            offset=int(data['offset']),
            size=int(data['size']),
            encoding=str(data.get('encoding', 'bcd')),
            endian=str(data.get('endian', 'be')),
        )


def decode_bcd(raw: bytes) -> Optional[int]:
    """
    Decode packed BCD bytes (two decimal digits per byte).

    Returns:
        Decoded integer, or None if any nibble is not a decimal digit
    """
    value = 0
    for b in raw:
        hi, lo = (b >> 4) & 0xF, b & 0xF
        if hi > 9 or lo > 9:
            return None
        value = value * 100 + hi * 10 + lo
    return value


class ScoreStore:
    """Interface for persisted score storage."""

    def read(self, store_id: str) -> bytes:
        """
        Read the raw score record for a store id.

        Raises:
            ScoreStoreError: If the record cannot be read
        """
        raise NotImplementedError

    def parse(self, store_id: str, data: bytes) -> int:
        """
        Decode the high score from a raw record.

        Raises:
            ScoreStoreError: If the bytes cannot be decoded
        """
        raise NotImplementedError


class NVRamScoreStore(ScoreStore):
    """
    Score storage backed by a PinMAME nvram directory.

    Example:
        store = NVRamScoreStore("~/.pinmame/nvram", {
            "bk_l4.nv": {"offset": 0x700, "size": 4, "encoding": "bcd"},
        })
        score = store.parse("bk_l4.nv", store.read("bk_l4.nv"))
    """

    def __init__(
        self,
        nvram_dir: Union[str, Path],
        layouts: Optional[Mapping[str, Any]] = None
    ):
        """
        Initialize NVRAM store

        Args:
            nvram_dir: PinMAME nvram directory
            layouts: Store id -> ScoreLayout (or layout dict from config)
        """
        self.nvram_dir = Path(nvram_dir).expanduser()
        self.layouts: Dict[str, ScoreLayout] = {}
        for store_id, layout in (layouts or {}).items():
            if not isinstance(layout, ScoreLayout):
                layout = ScoreLayout.from_dict(layout)
            self.layouts[store_id] = layout

    def read(self, store_id: str) -> bytes:
        nv_path = self.nvram_dir / store_id
        try:
            return nv_path.read_bytes()
        except FileNotFoundError:
            raise NVRamNotFoundError(f"NVRAM file not found: {nv_path}")
        except OSError as e:
            raise NVRamReadError(f"Failed to read {nv_path}: {e}")

    def parse(self, store_id: str, data: bytes) -> int:
        layout = self.layouts.get(store_id)
        if layout is None:
            raise ScoreFormatError(f"No score layout configured for {store_id}")

        end = layout.offset + layout.size
        if end > len(data):
            raise ScoreFormatError(
                f"{store_id}: score field {layout.offset}..{end} beyond "
                f"NVRAM size {len(data)}"
            )
        window = data[layout.offset:end]

        if layout.encoding == "bcd":
            value = decode_bcd(window)
            if value is None:
                raise ScoreFormatError(f"{store_id}: score field is not valid BCD: {window.hex()}")
            return value

        if layout.encoding == "uint":
            byteorder = "little" if layout.endian == "le" else "big"
            return int.from_bytes(window, byteorder, signed=False)

        raise ScoreFormatError(f"{store_id}: unknown encoding '{layout.encoding}'")
