"""Three-layer extraction waterfall.

Each field has an ordered list of probes: structured markup, then fallback
markup, then (for name and location) entity recognition. The first probe
that returns a value wins, so a later layer never overrides an earlier one.
Contacts follow the same scheme with structured cards first.

Extraction is total: a failing probe contributes nothing, and a failure of
the whole call yields an empty CompanyData.
"""
import re
from collections.abc import Callable
from functools import cached_property
from typing import Any

import structlog
from bs4 import BeautifulSoup
from bs4.element import NavigableString
from soupsieve import SelectorSyntaxError

from company_scraper_core.extract.ner import (
    EntityRecognizer,
    EntityScan,
    SpacyRecognizer,
    scan_entities,
)
from company_scraper_core.extract.rules import (
    CONTACT_CARD,
    CONTACT_FIELDS,
    FALLBACK_RULES,
    PRIMARY_RULES,
    SelectorRule,
)
from company_scraper_core.jobs.models import CompanyData, Contact
from company_scraper_core.settings import get_settings

logger = structlog.get_logger()

MAX_FALLBACK_LENGTH = 500
UNKNOWN_TITLE = "Unknown"
SKIPPED_TAGS = frozenset({"script", "style", "noscript", "template"})

_WHITESPACE = re.compile(r"\s+")


def parse_document(html: str) -> BeautifulSoup:
    """Parse markup into a document the layers can probe."""
    return BeautifulSoup(html, "lxml")


def body_text(soup: BeautifulSoup) -> str:
    """Visible body text with whitespace collapsed."""
    root = soup.body or soup
    parts = [
        s
        for s in root.find_all(string=True)
        if type(s) is NavigableString and s.parent.name not in SKIPPED_TAGS
    ]
    return _WHITESPACE.sub(" ", " ".join(parts)).strip()


def _in_length_band(value: str) -> bool:
    return 1 < len(value) < 100


class PageContext:
    """A parsed document and its entity scan, alive for one extract call.

    The scan is computed at most once and is dropped with the context.
    """

    def __init__(self, soup: BeautifulSoup, recognizer: EntityRecognizer):
        self.soup = soup
        self.recognizer = recognizer

    @cached_property
    def entities(self) -> EntityScan:
        try:
            return scan_entities(body_text(self.soup), self.recognizer)
        except Exception as e:
            logger.warning("entity_scan_failed", error=str(e))
            return EntityScan()


Probe = Callable[[PageContext], Any]


def _structured(field: str) -> Probe:
    rule = PRIMARY_RULES[field]

    def probe(page: PageContext) -> str | None:
        value = rule.apply(page.soup)
        if not value:
            return None
        return value.strip() or None

    probe.__name__ = f"structured_{field}"
    return probe


def first_rule_value(soup: BeautifulSoup, rules: tuple[SelectorRule, ...]) -> str | None:
    """First trimmed value that is non-empty and shorter than MAX_FALLBACK_LENGTH."""
    for rule in rules:
        try:
            value = rule.apply(soup)
        except SelectorSyntaxError:
            logger.debug("invalid_selector_skipped", selector=rule.css)
            continue
        if value:
            cleaned = value.strip()
            if 0 < len(cleaned) < MAX_FALLBACK_LENGTH:
                return cleaned
    return None


def _fallback(field: str) -> Probe:
    rules = FALLBACK_RULES[field]

    def probe(page: PageContext) -> str | None:
        return first_rule_value(page.soup, rules)

    probe.__name__ = f"fallback_{field}"
    return probe


def entity_organization(page: PageContext) -> str | None:
    return next((o for o in page.entities.organizations if _in_length_band(o)), None)


def entity_place(page: PageContext) -> str | None:
    return next((p for p in page.entities.places if _in_length_band(p)), None)


def structured_contacts(page: PageContext) -> list[Contact] | None:
    """Contact cards with all three fields present; partial cards are dropped."""
    contacts = []
    for card in page.soup.select(CONTACT_CARD):
        values = {}
        for key, css in CONTACT_FIELDS.items():
            element = card.select_one(css)
            values[key] = element.get_text().strip() if element is not None else ""
        if all(values.values()):
            contacts.append(Contact(**values))
    return contacts or None


def entity_contacts(page: PageContext) -> list[Contact] | None:
    """Pair the first K people with the first K distinct emails."""
    scan = page.entities
    emails = list(dict.fromkeys(scan.emails))
    k = min(len(scan.people), len(emails))
    contacts = [
        Contact(name=person, title=UNKNOWN_TITLE, email=email)
        for person, email in zip(scan.people[:k], emails[:k])
        if _in_length_band(person)
    ]
    if contacts:
        logger.info(
            "contacts_from_entities",
            contact_count=len(contacts),
            people_found=len(scan.people),
            emails_found=len(scan.emails),
        )
    return contacts or None


FIELD_PROBES: dict[str, tuple[Probe, ...]] = {
    "company_name": (
        _structured("company_name"),
        _fallback("company_name"),
        entity_organization,
    ),
    "website": (_structured("website"), _fallback("website")),
    "industry": (_structured("industry"), _fallback("industry")),
    "headcount_range": (_structured("headcount_range"), _fallback("headcount_range")),
    "hq_location": (
        _structured("hq_location"),
        _fallback("hq_location"),
        entity_place,
    ),
}

CONTACT_PROBES: tuple[Probe, ...] = (structured_contacts, entity_contacts)


def _first_value(page: PageContext, probes: tuple[Probe, ...], field: str):
    for probe in probes:
        try:
            value = probe(page)
        except Exception as e:
            logger.warning("probe_failed", field=field, probe=probe.__name__, error=str(e))
            continue
        if value:
            return value
    return None


def extract_document(soup: BeautifulSoup, recognizer: EntityRecognizer) -> CompanyData:
    """Run the waterfall over a parsed document."""
    page = PageContext(soup, recognizer)
    fields = {field: _first_value(page, probes, field) for field, probes in FIELD_PROBES.items()}
    contacts = _first_value(page, CONTACT_PROBES, "contacts")
    return CompanyData(**fields, contacts=contacts)


class Extractor:
    """Extracts company data from page markup. Never raises."""

    def __init__(self, recognizer: EntityRecognizer | None = None):
        self.recognizer = recognizer or SpacyRecognizer(get_settings().spacy_model)

    def extract(self, html: str) -> CompanyData:
        try:
            data = extract_document(parse_document(html), self.recognizer)
        except Exception as e:
            logger.exception("extraction_failed", error=str(e))
            return CompanyData()
        logger.info(
            "extraction_finished",
            company_name=data.company_name,
            extraction_method=data.extraction_method(),
            contact_count=len(data.contacts or []),
        )
        return data
