"""
Relative module specifier resolution.

Maps ``(base_dir, './x')`` to a concrete file on disk the way bundlers do for
extension-less imports: suffix candidates first, then ``index`` files, then
the specifier verbatim.
"""

import logging
import os
from typing import Optional, Sequence

logger = logging.getLogger(__name__)


def is_relative_specifier(specifier: str) -> bool:
    """Check if a module specifier is relative (``./x``, ``../x``, ``.``)."""
    return specifier.startswith(".")


class ModuleResolver:
    """Resolve relative specifiers against a directory using ordered suffixes.

    Args:
        suffixes: Default candidate suffixes, tried in order (first hit wins).
    """

    def __init__(self, suffixes: Sequence[str]):
        self.suffixes = tuple(suffixes)

    def resolve(
        self,
        base_dir: str,
        specifier: str,
        suffixes: Optional[Sequence[str]] = None,
    ) -> Optional[str]:
        """Locate the file ``specifier`` refers to from ``base_dir``.

        Args:
            base_dir: Directory of the importing module.
            specifier: Relative module specifier.
            suffixes: Candidate suffixes overriding the resolver's default.

        Returns:
            Absolute normalized path of an existing file, or None.
        """
        candidates = self.suffixes if suffixes is None else tuple(suffixes)
        target = os.path.normpath(os.path.join(base_dir, specifier))

        for suffix in candidates:
            path = target + suffix
            if os.path.isfile(path):
                return os.path.abspath(path)

        for suffix in candidates:
            path = os.path.join(target, "index" + suffix)
            if os.path.isfile(path):
                return os.path.abspath(path)

        if os.path.isfile(target):
            return os.path.abspath(target)

        logger.debug("Could not resolve %s from %s", specifier, base_dir)
        return None
