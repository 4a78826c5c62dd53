"""Festival and Act models.

A :class:`Festival` is materialized by the crawl orchestrator, held in the
cache for review, then promoted to durable storage.  Its ``lineup`` is an
ordered list of :class:`Act` -- one scheduled performance each.  An act
without an ``artist_id`` is *unlinked*: the name came from the document but
no Artist record has been attached yet.

Models are frozen; services derive updated copies with ``model_copy``.
Fields serialise with camelCase aliases (``artistName``, ``startDate``) so
records exchanged with the AI capability keep their wire names.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from festival_scout.utils.schedule import parse_iso_date


def _optional_url(value: str | None) -> str | None:
    """Blank strings become ``None``; anything else must be an http(s) URL."""
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if not value.startswith(("http://", "https://")):
        raise ValueError(f"not an http(s) URL: {value!r}")
    return value


def _optional_iso_date(value: str | None) -> str | None:
    if value is None or not str(value).strip():
        return None
    value = str(value).strip()
    if parse_iso_date(value) is None:
        raise ValueError(f"expected YYYY-MM-DD date, got {value!r}")
    return value[:10]


class Act(BaseModel):
    """A single scheduled performance within a festival lineup."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    id: str = ""
    artist_name: str = Field(min_length=1)
    artist_id: str | None = None
    festival_name: str = ""
    festival_id: str | None = None
    # ISO date (YYYY-MM-DD) and HH:MM start time, both optional.
    date: str | None = None
    time: str | None = None
    stage: str | None = None

    @field_validator("artist_name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("artist_name must not be blank")
        return value

    @field_validator("date", mode="before")
    @classmethod
    def _check_date(cls, value: str | None) -> str | None:
        return _optional_iso_date(value)

    @field_validator("time", "stage", "artist_id", "festival_id", mode="before")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if isinstance(value, str) and not value.strip():
            return None
        return value.strip() if isinstance(value, str) else value

    @property
    def is_linked(self) -> bool:
        return bool(self.artist_id)


class Festival(BaseModel):
    """A music festival with its full lineup.

    ``id`` is derived deterministically from name, location and start date
    when the festival is crawled or saved (see ``utils/ids.py``).  ``stages``
    and the date range are derived from the lineup when absent; call
    :meth:`with_schedule_defaults` to fill them.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    id: str = ""
    name: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    location: str = Field(default="", max_length=200)
    start_date: str | None = None
    end_date: str | None = None
    website: str | None = None
    image_url: str | None = None
    stages: list[str] = Field(default_factory=list)
    lineup: list[Act] = Field(default_factory=list)

    @field_validator("website", "image_url", mode="before")
    @classmethod
    def _check_url(cls, value: str | None) -> str | None:
        return _optional_url(value)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _check_date(cls, value: str | None) -> str | None:
        return _optional_iso_date(value)

    def with_schedule_defaults(self) -> Festival:
        """Return a copy with ``stages``, ``start_date`` and ``end_date`` derived
        from the lineup wherever they are not already set."""
        update: dict = {}
        if not self.stages:
            stages: list[str] = []
            for act in self.lineup:
                if act.stage and act.stage not in stages:
                    stages.append(act.stage)
            update["stages"] = stages
        dates = sorted(act.date for act in self.lineup if act.date)
        if dates:
            if not self.start_date:
                update["start_date"] = dates[0]
            if not self.end_date:
                update["end_date"] = dates[-1]
        return self.model_copy(update=update) if update else self

    def acts_for_artist(self, artist_id: str) -> list[Act]:
        return [act for act in self.lineup if act.artist_id == artist_id]

    def acts_named(self, artist_name: str) -> list[Act]:
        """Acts whose artist name equals *artist_name*, ignoring case."""
        wanted = artist_name.strip().casefold()
        return [act for act in self.lineup if act.artist_name.casefold() == wanted]

    def artist_names(self) -> list[str]:
        """Distinct lineup artist names in first-appearance order."""
        seen: set[str] = set()
        names: list[str] = []
        for act in self.lineup:
            key = act.artist_name.casefold()
            if key not in seen:
                seen.add(key)
                names.append(act.artist_name)
        return names
