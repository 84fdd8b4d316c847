"""
Corpus Record Schemas

Records owned by the external data providers. Validated with pydantic when a
provider snapshot is loaded; field names accept both snake_case and the
camelCase used by the upstream JSON feeds.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CorpusRecord(BaseModel):
    """Base for every corpus record"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    id: str


# ============================================================================
# Records
# ============================================================================

class Person(CorpusRecord):
    """Directory entry"""
    display_name: str
    email: str = ""
    title: str = ""
    team: str = ""
    location: str = ""
    avatar_url: str = ""
    expertise_areas: List[str] = Field(default_factory=list)
    can_help_with: List[str] = Field(default_factory=list)
    teams_deep_link: Optional[str] = None
    slack_handle: Optional[str] = None
    is_active: bool = True


class Resource(CorpusRecord):
    """Library document, page or tool"""
    title: str
    description: str = ""
    url: str = ""
    category: str = ""
    pillar: str = ""
    content_type: str = ""   # "tool" marks entries served by the tools index
    tags: List[str] = Field(default_factory=list)
    owner: Optional[str] = None
    is_archived: bool = False
    view_count: int = 0
    created_at: str = ""
    updated_at: str = ""
    # Tool-only fields
    request_url: Optional[str] = None
    guide_url: Optional[str] = None
    status: str = "available"


class FAQStep(BaseModel):
    """One step of a procedural FAQ answer"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    order: int
    instruction: str
    link_url: Optional[str] = None
    link_text: Optional[str] = None
    note: Optional[str] = None


class FAQ(CorpusRecord):
    """Support question with a curated answer"""
    question: str
    alternate_questions: List[str] = Field(default_factory=list)
    answer_summary: str = ""
    answer: str = ""
    answer_steps: List[FAQStep] = Field(default_factory=list)
    category: str = ""
    tags: List[str] = Field(default_factory=list)
    related_resource_ids: List[str] = Field(default_factory=list)
    expert_ids: List[str] = Field(default_factory=list)
    view_count: int = 0
    helpful_count: int = 0

    @property
    def step_texts(self) -> List[str]:
        return [s.instruction for s in sorted(self.answer_steps, key=lambda s: s.order)]


class Discussion(CorpusRecord):
    """Community discussion thread"""
    title: str
    body: str = ""
    author_id: str = ""
    author_name: str = ""
    status: str = "open"
    reply_count: int = 0
    upvote_count: int = 0
    accepted_reply_id: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    created_at: str = ""


class LopSession(CorpusRecord):
    """Love of Product learning session"""
    title: str
    description: str = ""
    date: str   # ISO date or datetime
    speaker_ids: List[str] = Field(default_factory=list)
    recording_url: Optional[str] = None
    slides_url: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


class PulseSignal(CorpusRecord):
    """Market-intelligence signal"""
    title: str
    summary: str = ""
    url: str = ""
    domain: str = ""
    priority: str = "medium"
    source: str = ""
    published_at: str = ""
    companies: List[str] = Field(default_factory=list)
    topics: List[str] = Field(default_factory=list)
    is_read: bool = False


class Competitor(CorpusRecord):
    """Competitor registry entry"""
    name: str
    tier: int = Field(ge=1, le=3, default=3)
    category: str = ""
    description: str = ""
    website: Optional[str] = None
    markets: List[str] = Field(default_factory=list)
    signal_count: int = 0
    watchlisted: bool = False


class CorpusSnapshot(BaseModel):
    """Every category of the corpus at one point in time"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    people: List[Person] = Field(default_factory=list)
    resources: List[Resource] = Field(default_factory=list)
    faqs: List[FAQ] = Field(default_factory=list)
    discussions: List[Discussion] = Field(default_factory=list)
    lop_sessions: List[LopSession] = Field(default_factory=list)
    pulse_signals: List[PulseSignal] = Field(default_factory=list)
    competitors: List[Competitor] = Field(default_factory=list)
