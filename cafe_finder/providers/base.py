"""
Corpus Provider

Abstract interface for the external data providers the engine reads from.
Providers are pull-based: the engine lists current records at index-build
time and never writes back.
"""

from abc import ABC, abstractmethod
from typing import List

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


class CorpusProvider(ABC):
    """
    Abstract base class for corpus providers.

    Each provider must implement one "list current records" accessor per
    corpus category. Accessors may raise CorpusLoadError; the engine converts
    it at its boundary.
    """

    @abstractmethod
    def list_people(self) -> List[Person]:
        pass

    @abstractmethod
    def list_resources(self) -> List[Resource]:
        pass

    @abstractmethod
    def list_faqs(self) -> List[FAQ]:
        pass

    @abstractmethod
    def list_discussions(self) -> List[Discussion]:
        pass

    @abstractmethod
    def list_lop_sessions(self) -> List[LopSession]:
        pass

    @abstractmethod
    def list_pulse_signals(self) -> List[PulseSignal]:
        pass

    @abstractmethod
    def list_competitors(self) -> List[Competitor]:
        pass

    def snapshot(self) -> CorpusSnapshot:
        """Read every category once"""
        return CorpusSnapshot(
            people=self.list_people(),
            resources=self.list_resources(),
            faqs=self.list_faqs(),
            discussions=self.list_discussions(),
            lop_sessions=self.list_lop_sessions(),
            pulse_signals=self.list_pulse_signals(),
            competitors=self.list_competitors(),
        )
