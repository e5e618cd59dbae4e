"""
Entry transformer.

Swaps the user's ``lambda`` plugin for the ``hijack`` plugin so the service
instance is captured instead of started. The rewrite is text based: ``lambda``
is replaced only where it is bounded by ``(``, ``,`` or a space on the left and
by ``(``, ``)``, ``,`` or a space on the right. Matches are found left to right
without overlap, so a delimiter consumed by one match cannot start another.
Occurrences inside strings or comments are rewritten as well.
"""
import logging
import os
import re
from dataclasses import dataclass
from typing import Tuple

from elysia_lambda.errors import TransformError

logger = logging.getLogger(__name__)

RESERVED_TOKEN = "lambda"
REPLACEMENT_TOKEN = "hijack"

_TOKEN_PATTERN = re.compile(r"([, (])" + RESERVED_TOKEN + r"([,() ])")


@dataclass(frozen=True)
class TransformResult:
    path: str
    rewrites: int


def rewrite_source(text: str) -> Tuple[str, int]:
    """Return the rewritten text and the number of replaced tokens."""
    return _TOKEN_PATTERN.subn(lambda m: m.group(1) + REPLACEMENT_TOKEN + m.group(2), text)


class EntryTransformer:
    """Writes a rewritten copy of the entry file next to the original."""

    suffix = ".ts"

    def mutated_path(self, entry_path: str, timestamp: int) -> str:
        return os.path.join(os.path.dirname(os.path.abspath(entry_path)), f"{timestamp}{self.suffix}")

    def transform(self, entry_path: str, timestamp: int) -> TransformResult:
        """
        Rewrite the entry file into a new file named after the timestamp.

        Args:
            entry_path: Path to the user's entry file
            timestamp: Millisecond timestamp of the run

        Returns:
            TransformResult with the mutated file path and the rewrite count

        Raises:
            TransformError: If the entry cannot be read or the copy cannot be written
        """
        try:
            with open(entry_path, "r", encoding="utf-8", newline="") as f:
                source = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise TransformError(f"Unable to read entry file {entry_path}: {e}") from e

        rewritten, count = rewrite_source(source)
        target = self.mutated_path(entry_path, timestamp)
        try:
            with open(target, "w", encoding="utf-8", newline="") as f:
                f.write(rewritten)
        except OSError as e:
            raise TransformError(f"Unable to write {target}: {e}") from e

        logger.debug(f"Rewrote {count} occurrence(s) of '{RESERVED_TOKEN}' into {target}")
        return TransformResult(path=target, rewrites=count)
