"""
Module graph traversal.

A FIFO worklist of module files is drained one file at a time; each file is
analyzed at most once and the modules it reveals are queued behind it.
"""

import logging
from collections import deque
from typing import Callable, Deque, Iterable, Optional, Set

from core.analyzer_config import AnalyzerConfig
from surface.context import AnalysisContext
from surface.models import ExtractionResult
from surface.report import ReportBuilder
from surface.syntax_extractor import extract_value_module
from surface.type_extractor import extract_typed_module

logger = logging.getLogger(__name__)

Extractor = Callable[[str, AnalysisContext], ExtractionResult]


def select_extractor(file_path: str, config: AnalyzerConfig) -> Optional[Extractor]:
    """Pick the extractor for a module by its suffix (typed suffixes first)."""
    if config.is_typed_path(file_path):
        return extract_typed_module
    if config.is_value_path(file_path):
        return extract_value_module
    return None


class GraphWalker:
    """Drive extraction over every module reachable from the seeded files.

    Args:
        context: Run context handed to each extractor.
        builder: Report builder receiving every extraction result.
    """

    def __init__(self, context: AnalysisContext, builder: ReportBuilder):
        self.context = context
        self.builder = builder
        self._queue: Deque[str] = deque()
        self._queued: Set[str] = set()
        self.processed: Set[str] = set()

    @property
    def pending(self) -> int:
        return len(self._queue)

    def enqueue(self, paths: Iterable[str]) -> int:
        """Queue files not yet processed or queued; returns how many were added."""
        added = 0
        for path in paths:
            if path in self.processed or path in self._queued:
                continue
            self._queue.append(path)
            self._queued.add(path)
            added += 1
        return added

    def _analyze(self, file_path: str) -> None:
        extractor = select_extractor(file_path, self.context.config)
        if extractor is None:
            self.builder.add_error(f"Unrecognized module type: {file_path}")
            return

        try:
            result = extractor(file_path, self.context)
        except Exception as e:
            logger.error("Unexpected error analyzing %s: %s", file_path, e, exc_info=True)
            self.builder.add_error(f"Unexpected error analyzing {file_path}: {e}")
            return

        self.builder.merge(result)
        added = self.enqueue(result.discovered)
        if added:
            logger.debug("%s revealed %d new modules", file_path, added)

    def run(self) -> int:
        """Drain the worklist; returns the number of files analyzed."""
        analyzed = 0
        while self._queue:
            file_path = self._queue.popleft()
            self._queued.discard(file_path)
            if file_path in self.processed:
                continue
            self.processed.add(file_path)
            self.builder.mark_processed(file_path)
            analyzed += 1
            logger.debug("Analyzing %s (%d pending)", file_path, len(self._queue))
            self._analyze(file_path)

        logger.info("Traversal complete: %d modules analyzed", analyzed)
        return analyzed
