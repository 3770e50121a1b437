"""Declarative selector tables for the markup layers."""
from dataclasses import dataclass
from enum import Enum

from bs4 import BeautifulSoup


class SelectorKind(str, Enum):
    TEXT = "text"
    ATTRIBUTE = "attribute"
    HREF = "href"


@dataclass(frozen=True)
class SelectorRule:
    """A CSS selector plus how to read a value from its first match."""

    css: str
    kind: SelectorKind = SelectorKind.TEXT
    attr: str | None = None

    def apply(self, soup: BeautifulSoup) -> str | None:
        """Return the raw (untrimmed) value of the first match, or None."""
        element = soup.select_one(self.css)
        if element is None:
            return None
        if self.kind is SelectorKind.TEXT:
            return element.get_text()
        name = "href" if self.kind is SelectorKind.HREF else self.attr
        value = element.get(name)
        if isinstance(value, list):
            value = " ".join(value)
        return value


def text(css: str) -> SelectorRule:
    return SelectorRule(css, SelectorKind.TEXT)


def href(css: str) -> SelectorRule:
    return SelectorRule(css, SelectorKind.HREF)


def meta(css: str) -> SelectorRule:
    return SelectorRule(css, SelectorKind.ATTRIBUTE, "content")


# Layer 1: markup that names the field outright.
PRIMARY_RULES: dict[str, SelectorRule] = {
    "company_name": text("h1.company-name"),
    "website": href("a.company-website"),
    "industry": text("span.industry"),
    "headcount_range": text("span.headcount"),
    "hq_location": text("span.location"),
}

CONTACT_CARD = ".contact-card"
CONTACT_FIELDS: dict[str, str] = {
    "name": ".contact-name",
    "title": ".contact-title",
    "email": ".contact-email",
}

# Layer 2: common page conventions, tried in order.
FALLBACK_RULES: dict[str, tuple[SelectorRule, ...]] = {
    "company_name": (
        text("h1"),
        text("title"),
        meta('meta[property="og:site_name"]'),
        meta('meta[name="application-name"]'),
        text(".company-title"),
        text(".business-name"),
        text('[itemtype*="Organization"] [itemprop="name"]'),
    ),
    "website": (
        href('a[href*="http"]'),
        href('link[rel="canonical"]'),
        meta('meta[property="og:url"]'),
    ),
    "industry": (
        text(".category"),
        text(".sector"),
        text('[itemprop="industry"]'),
        meta('meta[name="keywords"]'),
    ),
    "headcount_range": (
        text(".employees"),
        text(".team-size"),
        text(".staff-count"),
        text('[itemprop="numberOfEmployees"]'),
    ),
    "hq_location": (
        text(".address"),
        text(".location"),
        text(".city"),
        text('[itemprop="address"]'),
        text('[itemprop="location"]'),
        meta('meta[name="geo.position"]'),
    ),
}
