"""Append-only training corpus persisted as a JSON snapshot."""
import json
import logging
import os
import tempfile
import threading
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Tuple, Union

from models.training import TrainingExample
from services.errors import ValidationError, PersistenceError
from config import TRAINING_DATA_PATH

logger = logging.getLogger(__name__)


class TrainingCorpus:
    """
    Ordered collection of input/output exemplars.

    Insertion order is preserved and is the order used when the most recent
    examples are selected for a prompt. Every successful ``add`` rewrites the
    whole snapshot on disk.
    """

    def __init__(self, path: Union[str, Path] = TRAINING_DATA_PATH):
        """
        Initialize an empty corpus bound to a snapshot file.

        Args:
            path: Location of the JSON snapshot; the parent directory is
                created on first write
        """
        self.path = Path(path)
        self._examples: List[TrainingExample] = []
        self._lock = threading.Lock()
        self._last_id = 0

    @property
    def count(self) -> int:
        return len(self._examples)

    def load(self) -> int:
        """
        Load the persisted snapshot, if any.

        A missing, unreadable or malformed file leaves the corpus empty.

        Returns:
            Number of examples loaded
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            examples = [TrainingExample.from_dict(item) for item in raw]
        except FileNotFoundError:
            logger.info(f"No training data found at {self.path}, starting with empty dataset")
            examples = []
        except (OSError, ValueError, TypeError, KeyError) as e:
            logger.warning(f"Could not read training data from {self.path}: {e}; starting with empty dataset")
            examples = []

        with self._lock:
            self._examples = examples
            self._last_id = max((ex.id for ex in examples), default=0)

        logger.info(f"Loaded {len(examples)} training examples")
        return len(examples)

    def add(self, input: str, output: str, category: str = "general") -> int:
        """
        Append a training example and persist the snapshot.

        Args:
            input: Example user message
            output: Desired assistant reply
            category: Free-form label, stored but not used for prompting

        Returns:
            Total number of examples after the append

        Raises:
            ValidationError: If input or output is blank
            PersistenceError: If the snapshot could not be written; the
                example is not kept in that case
        """
        input = (input or "").strip()
        output = (output or "").strip()
        if not input or not output:
            raise ValidationError("Both input and output are required")

        with self._lock:
            example = TrainingExample(
                id=self._next_id(),
                input=input,
                output=output,
                category=category or "general",
                timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            )
            self._examples.append(example)

            try:
                self._save()
            except PersistenceError:
                self._examples.pop()
                raise

            total = len(self._examples)

        logger.info(f"Added training example {example.id} (category={example.category}, total={total})")
        return total

    def list_examples(self) -> Tuple[List[TrainingExample], int]:
        """Return a copy of all examples in insertion order, and their count."""
        with self._lock:
            examples = list(self._examples)
        return examples, len(examples)

    def recent(self, n: int) -> List[TrainingExample]:
        """Return the ``n`` most recently added examples in insertion order."""
        if n <= 0:
            return []
        with self._lock:
            return self._examples[-n:]

    def _next_id(self) -> int:
        candidate = int(time.time() * 1000)
        self._last_id = max(candidate, self._last_id + 1)
        return self._last_id

    def _save(self) -> None:
        """
        Atomically rewrite the snapshot.

        Writes to a temporary file beside the target and renames it into
        place, so a failed write leaves the previous snapshot untouched.
        """
        payload = [ex.to_dict() for ex in self._examples]
        tmp_name = None

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error saving training data to {self.path}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to save training data: {e}") from e
        finally:
            if tmp_name is not None:
                try:
                    os.remove(tmp_name)
                except OSError:
                    pass
