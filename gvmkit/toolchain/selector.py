"""
Package selection.

A release may publish several archives for the same platform. The selector
picks exactly one, delegating real choices to an injected strategy so that
interactive menus and scripted picks are interchangeable.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from gvmkit.core.exceptions import NoCompatiblePackageError, SelectionError
from gvmkit.toolchain.models import PackageDescriptor, VersionDescriptor

logger = logging.getLogger(__name__)


class SelectionStrategy(ABC):
    """Chooses one package among several candidates."""

    @abstractmethod
    def choose(self, candidates: Sequence[PackageDescriptor]) -> int:
        """
        Return the index of the chosen candidate.

        The first candidate is the default choice.
        """
        pass


class FirstCandidateStrategy(SelectionStrategy):
    """Always picks the default (first) candidate."""

    def choose(self, candidates: Sequence[PackageDescriptor]) -> int:
        return 0


class IndexStrategy(SelectionStrategy):
    """Always picks a fixed index."""

    def __init__(self, index: int):
        self.index = index

    def choose(self, candidates: Sequence[PackageDescriptor]) -> int:
        return self.index


class PackageSelector:
    """
    Chooses one concrete package for the current platform.

    Example:
        >>> selector = PackageSelector(FirstCandidateStrategy())
        >>> package = selector.select(version, candidates)
    """

    def __init__(self, strategy: Optional[SelectionStrategy] = None):
        self.strategy = strategy or FirstCandidateStrategy()

    def select(
        self,
        version: VersionDescriptor,
        candidates: Sequence[PackageDescriptor],
    ) -> PackageDescriptor:
        """
        Select a package.

        Raises:
            NoCompatiblePackageError: If there are no candidates
            SelectionError: If the strategy fails or returns an invalid index
        """
        candidates = list(candidates)

        if not candidates:
            raise NoCompatiblePackageError(version.name, version.os, version.arch)

        if len(candidates) == 1:
            logger.debug(f"Auto-selected package: {candidates[0].file_name}")
            return candidates[0]

        try:
            index = self.strategy.choose(candidates)
        except SelectionError:
            raise
        except Exception as e:
            raise SelectionError(f"Package selection failed: {e}") from e

        if not isinstance(index, int) or not 0 <= index < len(candidates):
            raise SelectionError(
                f"Invalid package selection {index!r} "
                f"(expected 0..{len(candidates) - 1})"
            )

        selected = candidates[index]
        logger.debug(f"Selected package: {selected.file_name}")
        return selected
