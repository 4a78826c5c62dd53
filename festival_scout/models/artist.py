"""Artist model.

Source-tagged maps (``images``, ``streaming_links``, ``social_links``,
``mapping_ids``, ``popularity``) are keyed by source name, e.g.
``{"spotify": "https://open.spotify.com/artist/..."}``.  ``genres`` has set
semantics: lower-cased, de-duplicated, first-seen order kept.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def merge_genres(*genre_lists: list[str]) -> list[str]:
    """Lower-cased union of *genre_lists*, preserving first-seen order."""
    merged: list[str] = []
    for genres in genre_lists:
        for genre in genres:
            key = genre.strip().lower()
            if key and key not in merged:
                merged.append(key)
    return merged


class Artist(BaseModel):
    """A performing artist, as stored durably and returned by the services."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    id: str = ""
    name: str = Field(min_length=1)
    genres: list[str] = Field(default_factory=list)
    description: str | None = Field(default=None, max_length=5000)
    image_url: str | None = None
    images: dict[str, str] = Field(default_factory=dict)
    streaming_links: dict[str, str] = Field(default_factory=dict)
    social_links: dict[str, str] = Field(default_factory=dict)
    mapping_ids: dict[str, str] = Field(default_factory=dict)
    # Source name -> numeric score on that source's own scale.
    popularity: dict[str, float] = Field(default_factory=dict)
    sources: list[str] = Field(default_factory=list)

    @field_validator("genres", mode="before")
    @classmethod
    def _normalize_genres(cls, value: list[str] | None) -> list[str]:
        return merge_genres(value or [])

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value

    @field_validator("images", "streaming_links", "social_links", "mapping_ids", mode="before")
    @classmethod
    def _drop_empty_links(cls, value: dict | None) -> dict:
        return {k: v for k, v in (value or {}).items() if v}

    @property
    def is_stub(self) -> bool:
        """``True`` for a name-only placeholder with no durable record."""
        return not self.id
