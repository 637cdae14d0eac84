"""Find labeled values in the two-column tables of the VPS info page"""

import logging
import re

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)


def parse_document(html_content: str) -> BeautifulSoup:
    """Parse an HTML document with the same parser used for every scrape"""
    return BeautifulSoup(html_content, "lxml")


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace into one space and trim"""
    return re.sub(r"\s+", " ", text).strip()


def normalize_label(text: str) -> str:
    """
    Normalize a label for comparison

    "  Valid   until: " and "valid until" compare equal.
    """
    return collapse_whitespace(text).replace(":", "").strip().lower()


def extract_value(soup: BeautifulSoup, label: str) -> str | None:
    """
    Find the value cell for a label in a row/label table

    The page has no ids or classes to anchor on, so every <tr> is scanned in
    document order and its first th/td is compared to the label. The value is
    the <td> right after the label cell, or else the last <td> of the row.

    Args:
        soup: Parsed HTML document
        label: Label text as shown on the page (e.g. "Valid until")

    Returns:
        Whitespace-collapsed value text, or None if no row carries the label
    """
    desired = normalize_label(label)

    for row in soup.find_all("tr"):
        first_cell = row.find(["th", "td"])
        if first_cell is None or normalize_label(first_cell.get_text()) != desired:
            continue

        value_cell = first_cell.find_next_sibling()
        if value_cell is not None and value_cell.name == "td":
            return collapse_whitespace(value_cell.get_text())

        cells = row.find_all("td")
        if cells:
            return collapse_whitespace(cells[-1].get_text())

        logger.debug(f"Row for label '{label}' has no data cell")
        return None

    return None


def extract_values(soup: BeautifulSoup, labels: list[str]) -> dict[str, str | None]:
    """Extract several labels at once, keyed by the label as given"""
    return {label: extract_value(soup, label) for label in labels}
