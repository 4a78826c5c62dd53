"""Models for structured document extraction.

:class:`ExtractionPlan` is the declarative routine the AI capability writes
for one rendered page: CSS selectors plus a small closed set of value
transforms.  A fixed interpreter (``services/extraction/plan_interpreter.py``)
evaluates it; no generated code is ever executed.

:class:`ParsedFestival` is the loose schema the interpreter's raw output is
validated against before being mapped to a :class:`Festival`.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from festival_scout.models.festival import Act, Festival, _optional_url
from festival_scout.utils.schedule import normalize_date_text

# Transform names the interpreter understands.  ``regex:<pattern>`` is
# matched by prefix.
SUPPORTED_TRANSFORMS = frozenset(
    {"strip", "lower", "upper", "title", "collapse_whitespace", "date", "time"}
)
REGEX_TRANSFORM_PREFIX = "regex:"

UNKNOWN_FESTIVAL_NAME = "Unknown Festival"
UNKNOWN_FESTIVAL_LOCATION = "Unknown Location"


class FieldRule(BaseModel):
    """How to read one value relative to the current node.

    ``value`` short-circuits everything else with a literal.  Otherwise
    ``selector`` (``None`` meaning the current node) picks the first match,
    ``attribute`` (``None`` meaning text content) reads it, and
    ``transforms`` are applied in order.
    """

    model_config = ConfigDict(frozen=True)

    selector: str | None = None
    attribute: str | None = None
    value: str | None = None
    transforms: list[str] = Field(default_factory=list)


class FestivalFieldRules(BaseModel):
    model_config = ConfigDict(frozen=True)

    festival_name: FieldRule | None = None
    festival_location: FieldRule | None = None
    festival_description: FieldRule | None = None
    festival_website: FieldRule | None = None


class ActFieldRules(BaseModel):
    model_config = ConfigDict(frozen=True)

    artist: FieldRule
    time: FieldRule | None = None
    stage: FieldRule | None = None


class ExtractionPlan(BaseModel):
    """A declarative extraction routine for one rendered document.

    ``day_selector`` yields one node per lineup day (``None`` treats the
    whole document as a single day).  Within each day node ``day_date``
    reads the date, falling back to ``default_date``, and ``act_selector``
    yields one node per act whose fields come from ``act_fields``.
    """

    model_config = ConfigDict(frozen=True)

    festival: FestivalFieldRules = Field(default_factory=FestivalFieldRules)
    day_selector: str | None = None
    day_date: FieldRule | None = None
    default_date: str | None = None
    act_selector: str = Field(min_length=1)
    act_fields: ActFieldRules


# ---------------------------------------------------------------------------
# Parsed (loose) festival schema
# ---------------------------------------------------------------------------

class LineupEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    artist: str = Field(min_length=1)
    time: str | None = None
    stage: str | None = None

    @field_validator("artist")
    @classmethod
    def _strip_artist(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("artist must not be blank")
        return value


class LineupDay(BaseModel):
    # ``list`` on the wire; ``acts`` in Python.
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    date: str | None = None
    acts: list[LineupEntry] = Field(default_factory=list, alias="list")

    @field_validator("date", mode="before")
    @classmethod
    def _normalize_date(cls, value: str | None) -> str | None:
        # Unparseable day labels ("Day 1") leave the acts undated.
        return normalize_date_text(value) if isinstance(value, str) else None


class ParsedFestival(BaseModel):
    """Raw extraction output, validated before it becomes a :class:`Festival`."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    festival_name: str | None = Field(default=None, max_length=200)
    festival_location: str | None = Field(default=None, max_length=200)
    festival_description: str | None = Field(default=None, max_length=2000)
    festival_website: str | None = None
    lineup: list[LineupDay] = Field(default_factory=list)

    @field_validator("festival_website", mode="before")
    @classmethod
    def _check_website(cls, value: str | None) -> str | None:
        return _optional_url(value)

    @field_validator("festival_name", "festival_location", "festival_description", mode="before")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    def act_count(self) -> int:
        return sum(len(day.acts) for day in self.lineup)

    def to_festival(self) -> Festival:
        """Flatten the lineup into acts.  Ids are left for the caller to assign."""
        name = self.festival_name or UNKNOWN_FESTIVAL_NAME
        lineup = [
            Act(
                artist_name=entry.artist,
                festival_name=name,
                date=day.date,
                time=entry.time,
                stage=entry.stage,
            )
            for day in self.lineup
            for entry in day.acts
        ]
        return Festival(
            name=name,
            location=self.festival_location or UNKNOWN_FESTIVAL_LOCATION,
            description=self.festival_description,
            website=self.festival_website,
            lineup=lineup,
        )
