import codecs
import logging
import re
from typing import Optional

from bs4 import BeautifulSoup, ParserRejectedMarkup, UnicodeDammit

from .errors import DecodeError, ParseError

logger = logging.getLogger(__name__)

# Page chrome that never carries the article text
EXCLUDE_SELECTORS = ", ".join([
    "script", "style", "iframe", "nav", "header", "footer", "form", "noscript",
    "#header", "#footer", "#nav", "#menu",
    ".nav", ".menu", ".header", ".footer",
    ".sidebar", ".comments", ".advertisement",
])

MAIN_CONTENT_SELECTORS = "main, article, .content, .main, #content, #main"

# Elements that break the flow of text; inline markup is joined as-is
BLOCK_ELEMENTS = [
    "address", "article", "aside", "blockquote", "br", "dd", "div", "dl", "dt",
    "figcaption", "figure", "h1", "h2", "h3", "h4", "h5", "h6", "hr", "li",
    "main", "ol", "p", "pre", "section", "table", "td", "th", "tr", "ul",
]

_CHARSET_RE = re.compile(r"charset\s*=\s*[\"']?([^\"';\s]+)", re.IGNORECASE)


def charset_from_content_type(content_type: Optional[str]) -> Optional[str]:
    """``text/html; charset=ISO-8859-1`` -> ``ISO-8859-1``"""
    if not content_type:
        return None
    match = _CHARSET_RE.search(content_type)
    return match.group(1) if match else None


def normalize_text(text: str) -> str:
    """Drop non-printable characters and collapse whitespace runs to one space"""
    text = "".join(ch for ch in text if ch.isprintable() or ch.isspace())
    return " ".join(text.split())


def truncate_text(text: str, max_length: int) -> str:
    """Cut ``text`` to ``max_length`` characters, preferring a word boundary"""
    max_length = max(max_length, 0)
    if len(text) <= max_length:
        return text

    last_space = text.rfind(" ", 0, max_length)
    if last_space > 0:
        return text[:last_space]
    return text[:max_length]


class ContentExtractor:
    """Turns raw HTML into bounded, whitespace-normalized plain text.

    The extractor keeps no state between calls and may be used from several
    threads at once.
    """

    def __init__(self, parser: str = "lxml"):
        self.parser = parser

    def extract(self, html: bytes, content_type: Optional[str], max_length: int) -> str:
        """
        Extract the readable text of a page

        Args:
            html: Raw response body
            content_type: Value of the Content-Type header, used for the charset
            max_length: Maximum number of characters to return

        Returns:
            The cleaned text, truncated at a word boundary

        Raises:
            DecodeError: The declared charset is unknown or the body cannot be decoded
            ParseError: The markup was rejected by the parser
        """
        markup = self._decode(html, content_type)
        soup = self._parse(markup)

        for element in soup.select(EXCLUDE_SELECTORS):
            # Nested matches are already gone with their ancestor
            if element.decomposed:
                continue
            element.decompose()

        main_content = soup.select_one(MAIN_CONTENT_SELECTORS)
        if main_content is None:
            main_content = soup.body
        if main_content is None:
            return ""

        for block in main_content.find_all(BLOCK_ELEMENTS):
            block.insert_before(" ")
            block.insert_after(" ")

        text = main_content.get_text()
        return truncate_text(normalize_text(text), max_length)

    def _decode(self, html: bytes, content_type: Optional[str]) -> str:
        declared = charset_from_content_type(content_type)
        known_encodings = []
        if declared:
            try:
                known_encodings.append(codecs.lookup(declared).name)
            except LookupError as e:
                raise DecodeError(f"unsupported charset {declared!r}") from e

        dammit = UnicodeDammit(html, known_definite_encodings=known_encodings, is_html=True)
        if dammit.unicode_markup is None:
            raise DecodeError("could not determine the page encoding")

        if dammit.contains_replacement_characters:
            logger.debug(f"Undecodable bytes replaced while reading as {dammit.original_encoding}")
        return dammit.unicode_markup

    def _parse(self, markup: str) -> BeautifulSoup:
        try:
            return BeautifulSoup(markup, self.parser)
        except ParserRejectedMarkup as e:
            raise ParseError(f"failed to parse HTML: {e}") from e


# Global extractor instance
content_extractor = ContentExtractor()
