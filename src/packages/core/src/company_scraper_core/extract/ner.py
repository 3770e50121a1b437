"""Entity recognition over page text."""
import re
import threading
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Protocol

import structlog

from company_scraper_core.util.errors import ExtractionError

logger = structlog.get_logger()

MIN_TEXT_LENGTH = 50
MAX_TEXT_LENGTH = 100_000

EMAIL_PATTERN = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")

ORGANIZATION_LABELS = frozenset({"ORG"})
PLACE_LABELS = frozenset({"GPE", "LOC"})
PERSON_LABELS = frozenset({"PERSON"})


@dataclass
class Entities:
    """Entity candidates in document order."""

    organizations: list[str] = field(default_factory=list)
    places: list[str] = field(default_factory=list)
    people: list[str] = field(default_factory=list)


@dataclass
class EntityScan:
    """Entities plus email addresses found in the same capped text."""

    organizations: list[str] = field(default_factory=list)
    places: list[str] = field(default_factory=list)
    people: list[str] = field(default_factory=list)
    emails: list[str] = field(default_factory=list)


class EntityRecognizer(Protocol):
    def recognize(self, text: str) -> Entities: ...


# One pipeline per process, shared by all worker threads; calls into it are serialized.
_nlp_lock = threading.Lock()


@lru_cache
def get_nlp(model_name: str):
    """Get or load a spaCy pipeline (cached per process)."""
    import spacy

    logger.info("loading_spacy_model", model=model_name)
    return spacy.load(model_name)


class SpacyRecognizer:
    """Recognizer backed by a spaCy pipeline, loaded on first use."""

    def __init__(self, model_name: str = "en_core_web_sm"):
        self.model_name = model_name

    def recognize(self, text: str) -> Entities:
        nlp = get_nlp(self.model_name)
        with _nlp_lock:
            doc = nlp(text)
        entities = Entities()
        for ent in doc.ents:
            value = ent.text.strip()
            if ent.label_ in ORGANIZATION_LABELS:
                entities.organizations.append(value)
            elif ent.label_ in PLACE_LABELS:
                entities.places.append(value)
            elif ent.label_ in PERSON_LABELS:
                entities.people.append(value)
        return entities


def find_emails(text: str) -> list[str]:
    """All email-looking substrings, in order, duplicates kept."""
    return EMAIL_PATTERN.findall(text)


def scan_entities(text: str, recognizer: EntityRecognizer) -> EntityScan:
    """Run entity recognition and email matching over collapsed page text."""
    if not text or len(text) < MIN_TEXT_LENGTH:
        return EntityScan()
    text = text[:MAX_TEXT_LENGTH]
    try:
        entities = recognizer.recognize(text)
    except Exception as e:
        raise ExtractionError(f"Entity recognition failed: {e}") from e
    return EntityScan(
        organizations=entities.organizations,
        places=entities.places,
        people=entities.people,
        emails=find_emails(text),
    )
