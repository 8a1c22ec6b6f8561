from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field


class RawResult(BaseModel):
    """A single hit as returned by the search provider"""
    model_config = ConfigDict(frozen=True)

    title: str
    snippet: str
    url: str


class EnrichedResult(BaseModel):
    """A search hit together with the text of the page it points to"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str
    snippet: str
    url: str
    content: str
    source_name: str = Field(alias="sourceName")


class SearchResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    results: Tuple[EnrichedResult, ...] = ()

    def to_dict(self) -> dict:
        """JSON-ready payload, always carrying a ``results`` list"""
        return self.model_dump(mode="json", by_alias=True)


class FetchedPage(BaseModel):
    """Raw body of a fetched page and its declared content type"""
    model_config = ConfigDict(frozen=True)

    url: str
    content: bytes
    content_type: str = ""
