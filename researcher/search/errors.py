"""
Error types raised by the search pipeline.

Only ``SearchProviderError`` aborts a search. ``PageContentError`` and its
subclasses describe a single page that could not be turned into text; the
aggregator absorbs them and falls back to the result snippet.
"""


class ResearcherError(Exception):
    """Base class for all errors raised by this package"""


class SearchProviderError(ResearcherError):
    """The upstream search engine could not be queried"""


class PageContentError(ResearcherError):
    """A result page could not be fetched or turned into text"""


class FetchError(PageContentError):
    """Network failure or non-success HTTP status while fetching a page"""


class DecodeError(PageContentError):
    """The page bytes could not be decoded with their character set"""


class ParseError(PageContentError):
    """The decoded page could not be parsed as HTML"""
