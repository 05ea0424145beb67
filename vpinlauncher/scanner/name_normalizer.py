"""
Table file name normalization.

A Visual Pinball table file name such as ``Fathom (Bally 1981).vpx`` carries
two derived names:

- a lookup key (``fathom_bally_1981``) used to find the snapshot image
- a display title (``Fathom (Bally 1981)``) shown in the table list
"""

from typing import Tuple

TABLE_EXTENSION = ".vpx"
RECOGNIZED_EXTENSIONS: Tuple[str, ...] = (TABLE_EXTENSION,)


def strip_extension(
    raw_filename: str,
    extensions: Tuple[str, ...] = RECOGNIZED_EXTENSIONS
) -> str:
    """
    Remove the longest recognized table extension from a file name.

    Names without a recognized extension are returned unchanged, so both
    helpers below are idempotent unless the stem itself ends in an
    extension.

    Args:
        raw_filename: On-disk file name
        extensions: Recognized extensions (case-sensitive)

    Returns:
        File name stem
    """
    for ext in sorted(extensions, key=len, reverse=True):
        if raw_filename.endswith(ext):
            return raw_filename[:-len(ext)]
    return raw_filename


def normalize_key(raw_filename: str) -> str:
    """
    Derive the snapshot lookup key for a table.

    Parentheses are dropped (only when an opening one is present), spaces
    become underscores, and the result is lowercased. Snapshot images are
    expected to be named with the same transformation.

    Examples:
        >>> normalize_key("Fathom (Williams 1981).vpx")
        'fathom_williams_1981'
        >>> normalize_key("Viper.vpx")
        'viper'

    Only one extension is stripped, so a stem that itself ends in ".vpx"
    (e.g. "Table.vpx.vpx") is not a fixed point: a second pass strips again.
    """
    stem = strip_extension(raw_filename)
    if "(" in stem:
        stem = stem.replace("(", "").replace(")", "")
    return stem.replace(" ", "_").lower()


def display_title(raw_filename: str) -> str:
    """
    Derive the title shown in the table list.

    When the stem contains ``(``, everything after the first ``)`` is dropped
    and a ``)`` is appended to what remains. An opening parenthesis without
    a closing one therefore gains a ``)``; a ``)`` that precedes the ``(``
    truncates the title there.

    Examples:
        >>> display_title("Fathom (Williams 1981).vpx")
        'Fathom (Williams 1981)'
        >>> display_title("Firepower (Williams 1980) VPW 1.2.vpx")
        'Firepower (Williams 1980)'
        >>> display_title("Viper.vpx")
        'Viper'
    """
    stem = strip_extension(raw_filename)
    if "(" not in stem:
        return stem
    return stem.split(")", 1)[0] + ")"
