import re

from scraper.contacts import (
    clean_contact_info,
    clean_email,
    clean_phone,
    extract_contact_info,
    is_valid_phone,
)
from scraper.extractor import PageDocument

PAGE = """
<html><body>
<main><p>Nothing to see here: 555 0000</p></main>
<footer class="contact">
  Reach us at info [at] acme [dot] com or call (415) 555-0100.
  Visit 123 Market Street, San Francisco.
  <a href="mailto:sales@acme.com?subject=hi">Email sales</a>
  <a href="tel:+44 20 7946 0958">London</a>
  <a href="https://twitter.com/acmehq">Twitter</a>
</footer>
<script type="application/ld+json">{"@type": "Organization", "telephone": "+1 415 555 0100"}</script>
<script type="application/ld+json">{not json</script>
</body></html>
"""


def test_extract_and_clean_contacts():
    doc = PageDocument.from_html(PAGE, "https://acme.com")
    contacts = clean_contact_info(extract_contact_info(doc))

    assert "info@acme.com" in contacts["emails"]
    assert "sales@acme.com" in contacts["emails"]
    assert "+442079460958" in contacts["phones"]
    assert any("123 Market Street" in address for address in contacts["addresses"])
    assert contacts["social"]["twitter"] == ["twitter.com/acmehq"]
    assert contacts["structured"] == [{"@type": "Organization", "telephone": "+1 415 555 0100"}]


def test_text_outside_contact_sections_is_ignored():
    doc = PageDocument.from_html(PAGE)
    raw = extract_contact_info(doc)
    assert not any("555 0000" in phone for phone in raw["phones"])


def test_clean_phone():
    assert clean_phone("0044 20 7946 0958") == "+442079460958"
    assert clean_phone("1 (415) 555-0100") == "+1 415 555 0100"


def test_phone_validity_by_digit_count():
    assert is_valid_phone("+1 415 555 0100")
    assert not is_valid_phone("555-0100")


def test_clean_email_deobfuscates():
    assert clean_email("Info (at) Acme (dot) com") == "info@acme.com"


def test_invalid_values_are_dropped():
    cleaned = clean_contact_info({"phones": ["123"], "emails": ["not-an-email"], "addresses": ["1 Rd"]})
    assert cleaned["phones"] == []
    assert cleaned["emails"] == []
    assert cleaned["addresses"] == []


def test_spaced_email_extension_phone_and_zip_address():
    doc = PageDocument.from_html(
        '<div class="contact-us">Write to press @ acme.com or call 415-555-0100 ext. 22. '
        "Acme Inc, 500 Main St, Springfield, IL 62701</div>"
    )
    contacts = clean_contact_info(extract_contact_info(doc))
    assert contacts["emails"] == ["press@acme.com"]
    assert "415555010022" in [re.sub(r"\D", "", phone) for phone in contacts["phones"]]
    assert "Springfield, IL 62701" in contacts["addresses"]
