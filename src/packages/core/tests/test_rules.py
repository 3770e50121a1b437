"""Tests for selector rules."""
from company_scraper_core.extract import SelectorKind, SelectorRule, parse_document
from company_scraper_core.extract.rules import FALLBACK_RULES, PRIMARY_RULES
from company_scraper_core.extract.waterfall import first_rule_value

HTML = """
<html><head>
<title> Acme | Home </title>
<meta property="og:site_name" content="Acme Site">
<link rel="canonical" href="https://acme.example/">
</head><body>
<a class="company-website" href="https://acme.example">Visit</a>
<span class="industry">  Robotics </span>
</body></html>
"""


def test_text_rule():
    soup = parse_document(HTML)
    assert SelectorRule("span.industry").apply(soup) == "  Robotics "


def test_href_rule():
    soup = parse_document(HTML)
    rule = SelectorRule("a.company-website", SelectorKind.HREF)
    assert rule.apply(soup) == "https://acme.example"


def test_attribute_rule():
    soup = parse_document(HTML)
    rule = SelectorRule('meta[property="og:site_name"]', SelectorKind.ATTRIBUTE, "content")
    assert rule.apply(soup) == "Acme Site"


def test_missing_match_is_none():
    soup = parse_document(HTML)
    assert SelectorRule("span.headcount").apply(soup) is None


def test_rule_tables_cover_every_field():
    assert set(PRIMARY_RULES) == set(FALLBACK_RULES)


def test_first_rule_value_trims_and_orders():
    soup = parse_document(HTML)
    assert first_rule_value(soup, FALLBACK_RULES["company_name"]) == "Acme | Home"
    assert first_rule_value(soup, FALLBACK_RULES["website"]) == "https://acme.example"


def test_first_rule_value_skips_long_and_invalid():
    soup = parse_document(f"<html><body><h1>{'x' * 600}</h1><title>ok</title></body></html>")
    rules = (
        SelectorRule("h1"),
        SelectorRule("[[[invalid"),
        SelectorRule("title"),
    )
    assert first_rule_value(soup, rules) == "ok"
