"""Destination path resolution from wildcard masks."""

from __future__ import annotations

import os
import posixpath

from csv_converter.types import PathLike

DIRECTORY_WILDCARD = "*/"
BASENAME_WILDCARD = "*"


def _to_slash(path: str) -> str:
    if os.sep == "/":
        return path
    return path.replace(os.sep, "/")


def _from_slash(path: str) -> str:
    if os.sep == "/":
        return path
    return path.replace("/", os.sep)


def resolve_destination(mask: str, source_path: PathLike) -> str:
    """Compute the destination path for ``source_path`` under ``mask``.

    The first ``*/`` in the mask becomes the source directory (with a
    trailing separator) and the first remaining ``*`` becomes the source
    basename without its extension. Missing tokens are left out of the
    substitution, so a mask without wildcards is returned unchanged.

    Parameters
    ----------
    mask : str
        Destination template, e.g. ``"*/converted/raw-*-out.csv"``.
    source_path : str | os.PathLike
        Source workbook path.

    Returns
    -------
    str
        Destination path using platform-native separators.
    """
    source = _to_slash(os.fspath(source_path))
    template = _to_slash(mask)

    directory = posixpath.dirname(source) or "."
    if not directory.endswith("/"):
        directory += "/"
    stem, _ext = posixpath.splitext(posixpath.basename(source))

    result = template.replace(DIRECTORY_WILDCARD, directory, 1)
    result = result.replace(BASENAME_WILDCARD, stem, 1)
    return _from_slash(result)
