"""
In-memory corpus provider, optionally loaded from a JSON snapshot file.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional, Union

from pydantic import ValidationError

from ..common.errors import CorpusLoadError
from ..common.schemas.corpus import (
    FAQ,
    Competitor,
    CorpusSnapshot,
    Discussion,
    LopSession,
    Person,
    PulseSignal,
    Resource,
)
from .base import CorpusProvider

logger = logging.getLogger("cafe_finder.providers.memory")


class InMemoryCorpusProvider(CorpusProvider):
    """Serves a fixed corpus snapshot held in memory"""

    def __init__(self, snapshot: Optional[CorpusSnapshot] = None):
        self._snapshot = snapshot or CorpusSnapshot()

    @classmethod
    def from_dict(cls, data: dict) -> "InMemoryCorpusProvider":
        """Validate a raw snapshot dict.

        Raises:
            CorpusLoadError: If any record fails validation
        """
        try:
            snapshot = CorpusSnapshot.model_validate(data)
        except ValidationError as e:
            raise CorpusLoadError(f"Invalid corpus snapshot: {e}") from e
        return cls(snapshot)

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "InMemoryCorpusProvider":
        """Load and validate a JSON snapshot file.

        Raises:
            CorpusLoadError: If the file is missing, unreadable or invalid
        """
        path = Path(path).expanduser()
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CorpusLoadError(f"Failed to read corpus file {path}: {e}") from e

        if not isinstance(data, dict):
            raise CorpusLoadError(f"Corpus file {path} must contain a JSON object")

        provider = cls.from_dict(data)
        s = provider._snapshot
        logger.info(
            "Loaded corpus from %s: %d people, %d resources, %d faqs, %d discussions, "
            "%d lop sessions, %d signals, %d competitors",
            path, len(s.people), len(s.resources), len(s.faqs), len(s.discussions),
            len(s.lop_sessions), len(s.pulse_signals), len(s.competitors),
        )
        return provider

    def list_people(self) -> List[Person]:
        return list(self._snapshot.people)

    def list_resources(self) -> List[Resource]:
        return list(self._snapshot.resources)

    def list_faqs(self) -> List[FAQ]:
        return list(self._snapshot.faqs)

    def list_discussions(self) -> List[Discussion]:
        return list(self._snapshot.discussions)

    def list_lop_sessions(self) -> List[LopSession]:
        return list(self._snapshot.lop_sessions)

    def list_pulse_signals(self) -> List[PulseSignal]:
        return list(self._snapshot.pulse_signals)

    def list_competitors(self) -> List[Competitor]:
        return list(self._snapshot.competitors)
