"""Company data extraction from page markup."""
from company_scraper_core.extract.ner import (
    Entities,
    EntityRecognizer,
    EntityScan,
    SpacyRecognizer,
    find_emails,
    scan_entities,
)
from company_scraper_core.extract.rules import SelectorKind, SelectorRule
from company_scraper_core.extract.waterfall import (
    Extractor,
    body_text,
    extract_document,
    parse_document,
)

__all__ = [
    "Entities",
    "EntityRecognizer",
    "EntityScan",
    "SpacyRecognizer",
    "find_emails",
    "scan_entities",
    "SelectorKind",
    "SelectorRule",
    "Extractor",
    "body_text",
    "extract_document",
    "parse_document",
]
