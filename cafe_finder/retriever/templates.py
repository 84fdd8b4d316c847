"""
Answer Templates

One generator per answer shape. Each decides its own AnswerType, confidence,
wording, actions and sources; the synthesizer decides whether to call it.
"""

from datetime import date
from urllib.parse import quote

from ..common.schemas.query import IntentType, Query
from ..common.schemas.results import (
    AnswerAction,
    AnswerSource,
    AnswerType,
    FAQResult,
    LopSessionResult,
    PersonResult,
    ResultType,
    SynthesizedAnswer,
    ToolResult,
)


def person_answer(query: Query, person: PersonResult) -> SynthesizedAnswer:
    return SynthesizedAnswer(
        type=AnswerType.PERSON_CARD,
        confidence=0.95,
        text=f"Here is the contact information for {person.name}.",
        featured_result=person,
        actions=[
            AnswerAction(label="Start Chat", url=person.teams_deep_link or "#", icon="message", primary=True),
            AnswerAction(label="View Profile", url=f"/profile/{person.id}", icon="user"),
            AnswerAction(label="Email", url=f"mailto:{person.email}", icon="mail"),
        ],
    )


def tool_answer(query: Query, tool: ToolResult) -> SynthesizedAnswer:
    """Tool card; access requests get the request flow instead of the launch link"""
    text = f"{tool.name}: {tool.description}"
    actions = [AnswerAction(label="Launch Tool", url=tool.access_url, icon="external-link", primary=True)]

    if query.intent.primary == IntentType.TOOL_ACCESS:
        text = f"You can request access to {tool.name} through the Identity Portal."
        actions = [AnswerAction(label="Request Access", url=tool.request_url or "#", icon="key", primary=True)]
        if tool.guide_url:
            actions.append(AnswerAction(label="Access Guide", url=tool.guide_url, icon="book"))
    elif tool.status == "unavailable":
        text = f"{tool.name} is currently undergoing maintenance."

    return SynthesizedAnswer(
        type=AnswerType.TOOL_CARD,
        confidence=0.9,
        text=text,
        featured_result=tool,
        actions=actions,
    )


def faq_answer(faq: FAQResult) -> SynthesizedAnswer:
    url = f"/support/faq/{faq.id}"
    return SynthesizedAnswer(
        type=AnswerType.INSTANT_ANSWER,
        confidence=0.85,
        text=faq.answer_summary or faq.answer,
        steps=list(faq.steps) or None,
        actions=[AnswerAction(label="Read Full FAQ", url=url, icon="help-circle")],
        sources=[AnswerSource(title=faq.question, url=url, type=ResultType.FAQ)],
    )


def concept_answer(query: Query, faq: FAQResult) -> SynthesizedAnswer:
    # Tags stand in for related concepts
    return SynthesizedAnswer(
        type=AnswerType.CONCEPT_EXPLANATION,
        confidence=0.9,
        text=faq.answer,
        key_points=list(faq.tags),
        sources=[AnswerSource(title=faq.question, url=f"/library/concept/{faq.id}", type=ResultType.FAQ)],
    )


def _display_date(value: str) -> str:
    try:
        d = date.fromisoformat(value[:10])
    except ValueError:
        return value
    return f"{d.strftime('%B')} {d.day}, {d.year}"


def lop_answer(query: Query, session: LopSessionResult) -> SynthesizedAnswer:
    if query.intent.primary == IntentType.LOP_NEXT:
        text = f'The next Love of Product session is "{session.title}" on {_display_date(session.session_date)}.'
    else:
        text = f'Searching for LOP sessions about "{query.normalized}".'

    return SynthesizedAnswer(
        type=AnswerType.LOP_SESSION,
        confidence=0.95,
        text=text,
        featured_result=session,
        actions=[
            AnswerAction(label="Watch Recording", url=session.video_url or "#", icon="video", primary=True),
            AnswerAction(label="View Slides", url=session.slides_url or "#", icon="presentation"),
        ],
    )


def zero_results_answer(query: Query) -> SynthesizedAnswer:
    return SynthesizedAnswer(
        type=AnswerType.ZERO_RESULTS,
        confidence=1.0,
        text=f'I couldn\'t find any exact matches for "{query.raw}".',
        steps=[
            "Try checking your spelling",
            "Try simpler keywords",
            "Browse by category in the Library",
        ],
        actions=[
            AnswerAction(
                label="Start a Discussion",
                url=f"/discuss/new?topic={quote(query.raw, safe='')}",
                icon="message-square",
                primary=True,
            ),
            AnswerAction(label="Browse Resource Library", url="/library", icon="book-open"),
        ],
    )
