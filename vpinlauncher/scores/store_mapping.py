"""
Title to NVRAM store id resolution.

PinMAME persists each machine's NVRAM under its ROM set name (``bk_l4.nv``),
which has no fixed relationship to the table file name. A static table of
title prefixes bridges the two.
"""

import logging
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)


# Stock mapping for the tested Williams/Bally tables. Keys are matched
# against the first word of the title, cut at the first underscore.
DEFAULT_STORE_MAPPING: Dict[str, str] = {
    "barracora": "barra_l1.nv",
    "black": "bk_l4.nv",
    "elektra": "elektra.nv",
    "fathom": "fathom.nv",
    "firepower": "frpwr_b7.nv",
    "scorpion": "scrpn_l1.nv",
    "seawitch": "seawitch.nv",
    "viper": "viper.nv",
    "warlok": "wrlok_l3.nv",
}


class ScoreStoreMapping:
    """
    Immutable title prefix -> store id table.

    Prefixes are stored lowercase. Instances are safe to share between
    threads; nothing mutates them after construction.
    """

    def __init__(self, entries: Mapping[str, str]):
        self._entries = MappingProxyType(
            {prefix.lower(): store_id for prefix, store_id in entries.items()}
        )

    @classmethod
    def from_dict(cls, entries: Optional[Mapping[str, str]] = None) -> "ScoreStoreMapping":
        """
        Build a mapping, falling back to DEFAULT_STORE_MAPPING.

        Args:
            entries: Prefix -> store id pairs, or None for the stock table
        """
        if entries is None:
            entries = DEFAULT_STORE_MAPPING
        return cls(entries)

    def items(self) -> Iterable[Tuple[str, str]]:
        return self._entries.items()

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, prefix: object) -> bool:
        return prefix in self._entries

    def __repr__(self) -> str:
        return f"ScoreStoreMapping({dict(self._entries)!r})"


def title_token(display_title: str) -> str:
    """
    Extract the token matched against store mapping prefixes.

    Takes the first whitespace-separated word, then the part of it before the
    first underscore, lowercased.

    Examples:
        >>> title_token("Black Knight (Williams 1980)")
        'black'
        >>> title_token("Warlok_VPW (Williams 1982)")
        'warlok'
    """
    words = display_title.split()
    if not words:
        return ""
    return words[0].split("_")[0].lower()


def unreachable_prefixes(entries: Mapping[str, str]) -> List[str]:
    """
    List prefixes that can never match a title token.

    Tokens never contain underscores or whitespace, so neither may a
    usable prefix.
    """
    return sorted(
        prefix for prefix in entries
        if "_" in prefix or any(ch.isspace() for ch in prefix)
    )


class TitleToStoreResolver:
    """
    Resolve a table's display title to its NVRAM store id.

    When several prefixes match, the longest one wins.
    """

    def __init__(self, mapping: Optional[ScoreStoreMapping] = None):
        self.mapping = mapping if mapping is not None else ScoreStoreMapping.from_dict()

    def resolve(self, display_title: str) -> Optional[str]:
        """
        Find the store id for a title.

        Args:
            display_title: Title as shown in the table list

        Returns:
            Store id, or None if the table is unsupported
        """
        token = title_token(display_title)
        if not token:
            return None

        best: Optional[Tuple[str, str]] = None
        for prefix, store_id in self.mapping.items():
            if not prefix or not token.startswith(prefix):
                continue
            if best is None or len(prefix) > len(best[0]):
                best = (prefix, store_id)

        if best is None:
            logger.debug(f"No store mapping for '{display_title}' (token '{token}')")
            return None

        return best[1]
