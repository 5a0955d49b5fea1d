"""
Single-writer aggregator of the index artifact.

Emit workers never touch the index: they put their descriptors on the
aggregator's queue, and the aggregator alone writes the index once the
whole partition has been emitted.
"""

from __future__ import annotations

import logging
import queue
from pathlib import Path

from ..analyzer.ir_nodes import ModuleDescriptor
from ..backends.base import CodeBackend
from .filesystem import FileSystemWriter

logger = logging.getLogger(__name__)


class IndexAggregator:
    """Collects descriptors and finalizes the index of one directory."""

    def __init__(
        self,
        path: Path,
        backend: CodeBackend,
        writer: FileSystemWriter,
        generation_comment: str = "",
    ):
        """
        Initialize the aggregator.

        Args:
            path: Path of the index artifact
            backend: Backend rendering the index
            writer: File-system writer
            generation_comment: Comment line placed at the top of the index
        """
        self.path = path
        self.backend = backend
        self.writer = writer
        self.generation_comment = generation_comment
        self.queue: queue.Queue[tuple[int, ModuleDescriptor]] = queue.Queue()
        self.finalized = False

    def submit(self, position: int, descriptor: ModuleDescriptor) -> None:
        """Hand over the descriptor emitted at a given position; safe from any thread."""
        self.queue.put((position, descriptor))

    def drain(self) -> list[ModuleDescriptor]:
        """Take every queued descriptor, ordered by emission position."""
        received = []
        while True:
            try:
                received.append(self.queue.get_nowait())
            except queue.Empty:
                break
        received.sort(key=lambda item: item[0])
        return [descriptor for _, descriptor in received]

    def existing_lines(self) -> list[str]:
        """Entry lines of an index already on disk, comments and blanks dropped."""
        if not self.path.exists():
            return []
        lines = self.path.read_text(encoding="utf-8").splitlines()
        return [line for line in lines if line.strip() and not line.lstrip().startswith("#")]

    def finalize(self) -> list[ModuleDescriptor]:
        """
        Write the index with every submitted descriptor.

        Must only be called once all emit workers have succeeded; an aborted
        partition never reaches this point, so its index stays untouched.

        Returns:
            The descriptors, in emission order
        """
        if self.finalized:
            raise RuntimeError(f"Index {self.path} already finalized")

        descriptors = self.drain()
        content = self.backend.render_index(descriptors, self.existing_lines(), self.generation_comment)
        self.writer.write(self.path, content)
        self.finalized = True
        logger.info("Wrote index %s (%d modules)", self.path, len(descriptors))
        return descriptors
