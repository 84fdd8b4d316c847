"""
Domain Synonyms

Static dictionaries mapping canonical concepts (tools, topics, actions,
resource types, teams, pillars) to their aliases. Pure data plus lookups.
"""

from typing import Dict, List


# ============================================================================
# Synonym tables: canonical -> aliases
# ============================================================================

TOOL_SYNONYMS: Dict[str, List[str]] = {
    "jira": ["atlassian", "issue tracker", "ticket system", "bug tracker", "issue management"],
    "confluence": ["atlassian", "wiki", "documentation", "docs", "knowledge base"],
    "smartsheet": ["spreadsheet", "project tracker", "timeline", "gantt"],
    "slack": ["messaging", "chat", "im", "instant message"],
    "teams": ["microsoft teams", "ms teams", "video call", "meeting"],
    "outlook": ["email", "mail", "calendar", "microsoft outlook"],
    "sharepoint": ["microsoft sharepoint", "file storage", "document library"],
    "figma": ["design", "prototype", "mockup", "ui design", "wireframe"],
    "miro": ["whiteboard", "brainstorm", "diagram", "flowchart"],
    "notion": ["notes", "wiki", "documentation", "workspace"],
    "github": ["git", "code", "repository", "repo", "source control", "version control"],
    "azure": ["azure devops", "ado", "microsoft azure", "cloud"],
    "servicenow": ["itsm", "it service", "service desk", "snow"],
}

TOPIC_SYNONYMS: Dict[str, List[str]] = {
    "cob": ["coordination of benefits", "coordination", "multiple coverage", "dual coverage"],
    "rcm": ["revenue cycle management", "revenue cycle", "billing", "collections"],
    "claims": ["claim processing", "claim adjudication", "claims management"],
    "eligibility": ["member eligibility", "coverage verification", "enrollment"],
    "enrollment": ["member enrollment", "signup", "registration", "onboarding"],
    "compliance": ["regulatory", "regulation", "audit", "hipaa", "cms"],
    "hipaa": ["privacy", "security", "phi", "protected health information"],
    "medicare": ["cms", "government program", "senior", "part a", "part b", "part d"],
    "medicaid": ["state program", "magi", "low income"],
    "subrogation": ["recovery", "third party liability", "tpl", "accident"],
    "eob": ["explanation of benefits", "benefit explanation", "member statement"],
    "era": ["electronic remittance advice", "remittance", "835"],
    "edi": ["electronic data interchange", "837", "270", "271", "x12"],
    "npi": ["national provider identifier", "provider id", "provider number"],
    "prd": ["product requirements", "product spec", "requirements document", "spec"],
    "okr": ["objectives key results", "objectives", "goals", "kpi"],
    "lop": ["love of product", "product talk", "presentation", "session"],
}

ACTION_SYNONYMS: Dict[str, List[str]] = {
    "access": ["get access", "permission", "login", "account", "request access"],
    "request": ["submit", "apply", "ask for", "get"],
    "find": ["search", "look for", "locate", "discover", "where is"],
    "learn": ["understand", "study", "know about", "read about"],
    "contact": ["reach out", "message", "email", "talk to", "connect with"],
    "help": ["assist", "support", "guidance", "how to"],
    "create": ["make", "new", "add", "start", "build"],
    "update": ["edit", "modify", "change", "revise"],
    "delete": ["remove", "cancel", "revoke"],
    "approve": ["accept", "sign off", "confirm", "authorize"],
    "review": ["check", "look at", "examine", "assess"],
}

RESOURCE_TYPE_SYNONYMS: Dict[str, List[str]] = {
    "template": ["boilerplate", "starter", "example", "sample"],
    "guide": ["how to", "tutorial", "walkthrough", "instructions", "documentation"],
    "faq": ["frequently asked", "common questions", "q&a", "questions"],
    "video": ["recording", "watch", "tutorial video", "demo"],
    "presentation": ["slides", "deck", "ppt", "powerpoint", "keynote"],
    "document": ["doc", "file", "paper", "article"],
    "checklist": ["list", "steps", "procedure", "process"],
    "playbook": ["runbook", "handbook", "manual", "guide"],
}

TEAM_SYNONYMS: Dict[str, List[str]] = {
    "platform": ["platform team", "infrastructure", "core platform", "engineering"],
    "rcm": ["revenue cycle", "rcm team", "billing team"],
    "analytics": ["data", "data team", "bi", "business intelligence", "reporting"],
    "product": ["product team", "pm", "product management"],
    "design": ["ux", "ui", "design team", "user experience"],
    "engineering": ["development", "dev", "developers", "software"],
    "it": ["information technology", "tech support", "helpdesk", "it support"],
    "hr": ["human resources", "people team", "people ops"],
    "legal": ["compliance", "legal team", "counsel"],
}

# Later tables win on a shared canonical key ("rcm" resolves to the team entry)
ALL_SYNONYMS: Dict[str, List[str]] = {
    **TOOL_SYNONYMS,
    **TOPIC_SYNONYMS,
    **ACTION_SYNONYMS,
    **RESOURCE_TYPE_SYNONYMS,
    **TEAM_SYNONYMS,
}


def _reverse(table: Dict[str, List[str]]) -> Dict[str, str]:
    reverse: Dict[str, str] = {}
    for canonical, aliases in table.items():
        for alias in aliases:
            reverse[alias.lower()] = canonical
    return reverse


REVERSE_SYNONYMS: Dict[str, str] = _reverse(ALL_SYNONYMS)


# ============================================================================
# Entity dictionaries: alias -> canonical
# ============================================================================

def _entity_table(table: Dict[str, List[str]]) -> Dict[str, str]:
    entities: Dict[str, str] = {}
    for canonical, aliases in table.items():
        entities[canonical] = canonical
        for alias in aliases:
            entities[alias.lower()] = canonical
    return entities


TOOL_ENTITIES: Dict[str, str] = _entity_table(TOOL_SYNONYMS)
TOPIC_ENTITIES: Dict[str, str] = _entity_table(TOPIC_SYNONYMS)
TEAM_ENTITIES: Dict[str, str] = _entity_table(TEAM_SYNONYMS)

RESOURCE_TYPE_KEYWORDS: Dict[str, str] = {
    "template": "template",
    "templates": "template",
    "guide": "guide",
    "guides": "guide",
    "document": "document",
    "documents": "document",
    "doc": "document",
    "docs": "document",
    "faq": "faq",
    "faqs": "faq",
    "video": "video",
    "videos": "video",
    "presentation": "presentation",
    "presentations": "presentation",
    "slides": "presentation",
    "deck": "presentation",
    "checklist": "checklist",
    "checklists": "checklist",
    "playbook": "playbook",
    "playbooks": "playbook",
    "runbook": "playbook",
}

ACTION_KEYWORDS: Dict[str, str] = {
    "access": "access",
    "request": "request",
    "find": "find",
    "search": "find",
    "get": "get",
    "learn": "learn",
    "understand": "learn",
    "contact": "contact",
    "message": "contact",
    "email": "contact",
    "create": "create",
    "new": "create",
    "add": "create",
    "update": "update",
    "edit": "update",
    "modify": "update",
    "delete": "delete",
    "remove": "delete",
    "approve": "approve",
    "review": "review",
}

# Values match Resource.pillar in the library
PILLAR_KEYWORDS: Dict[str, str] = {
    "product craft": "product-craft",
    "product-craft": "product-craft",
    "craft": "product-craft",
    "healthcare": "healthcare",
    "healthcare domain": "healthcare",
    "healthcare-domain": "healthcare",
    "domain": "healthcare",
    "playbook": "internal-playbook",
    "internal playbook": "internal-playbook",
    "internal-playbook": "internal-playbook",
    "internal": "internal-playbook",
    "tools access": "tools-access",
    "tool access": "tools-access",
    "tools-access": "tools-access",
}


# ============================================================================
# Lookups
# ============================================================================

def get_canonical(term: str) -> str:
    """Canonical form of a term; known canonicals map to themselves"""
    normalized = term.lower().strip()
    if normalized in ALL_SYNONYMS:
        return normalized
    return REVERSE_SYNONYMS.get(normalized, normalized)


def get_synonyms(term: str) -> List[str]:
    """The canonical form followed by all of its aliases"""
    canonical = get_canonical(term)
    aliases = ALL_SYNONYMS.get(canonical)
    if aliases is None:
        return [canonical]
    return [canonical] + [a.lower() for a in aliases]


def are_synonyms(term1: str, term2: str) -> bool:
    return get_canonical(term1) == get_canonical(term2)
