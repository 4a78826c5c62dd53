"""Fixed interpreter for AI-written extraction plans.

An :class:`ExtractionPlan` is data: CSS selectors plus a closed vocabulary
of value transforms.  This module walks the noise-stripped document with
BeautifulSoup/soupsieve and produces a raw dict in the ``ParsedFestival``
wire shape.  Nothing in a plan can execute code; an unknown transform or a
malformed selector raises :class:`ExtractionError`.
"""

from __future__ import annotations

import re
from typing import Any

from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

from festival_scout.models.extraction import (
    REGEX_TRANSFORM_PREFIX,
    SUPPORTED_TRANSFORMS,
    ExtractionPlan,
    FieldRule,
)
from festival_scout.utils.errors import ExtractionError
from festival_scout.utils.schedule import normalize_date_text, normalize_time_text

_WHITESPACE_RE = re.compile(r"\s+")


def validate_plan(plan: ExtractionPlan) -> None:
    """Reject plans that use transforms outside the supported vocabulary."""
    rules: list[FieldRule] = [plan.act_fields.artist]
    rules += [r for r in (plan.act_fields.time, plan.act_fields.stage, plan.day_date) if r]
    festival = plan.festival
    rules += [
        r
        for r in (
            festival.festival_name,
            festival.festival_location,
            festival.festival_description,
            festival.festival_website,
        )
        if r
    ]
    for rule in rules:
        for transform in rule.transforms:
            if transform.startswith(REGEX_TRANSFORM_PREFIX):
                try:
                    re.compile(transform[len(REGEX_TRANSFORM_PREFIX):])
                except re.error as exc:
                    raise ExtractionError(f"Invalid regex transform {transform!r}: {exc}") from exc
            elif transform not in SUPPORTED_TRANSFORMS:
                raise ExtractionError(f"Unsupported transform {transform!r}")


def apply_transform(value: str, transform: str) -> str | None:
    if transform == "strip":
        return value.strip()
    if transform == "lower":
        return value.lower()
    if transform == "upper":
        return value.upper()
    if transform == "title":
        return value.title()
    if transform == "collapse_whitespace":
        return _WHITESPACE_RE.sub(" ", value).strip()
    if transform == "date":
        return normalize_date_text(value)
    if transform == "time":
        return normalize_time_text(value)
    if transform.startswith(REGEX_TRANSFORM_PREFIX):
        match = re.search(transform[len(REGEX_TRANSFORM_PREFIX):], value)
        if match is None:
            return None
        return match.group(1) if match.groups() else match.group(0)
    raise ExtractionError(f"Unsupported transform {transform!r}")


def _select(node: Tag, selector: str, many: bool = False) -> Any:
    try:
        return node.select(selector) if many else node.select_one(selector)
    except SelectorSyntaxError as exc:
        raise ExtractionError(f"Invalid CSS selector {selector!r}: {exc}") from exc


def evaluate_rule(rule: FieldRule | None, node: Tag) -> str | None:
    """Evaluate *rule* relative to *node*; blank results become ``None``."""
    if rule is None:
        return None
    if rule.value is not None:
        value: str | None = rule.value
    else:
        target = node if rule.selector is None else _select(node, rule.selector)
        if target is None:
            return None
        if rule.attribute:
            raw = target.get(rule.attribute)
            if isinstance(raw, list):
                raw = " ".join(raw)
            value = raw
        else:
            value = target.get_text(" ", strip=True)

    for transform in rule.transforms:
        if value is None:
            break
        value = apply_transform(value, transform)

    if value is None:
        return None
    value = value.strip()
    return value or None


def execute_plan(plan: ExtractionPlan, html: str) -> dict[str, Any]:
    """Run *plan* against *html* and return raw ``ParsedFestival`` data.

    Day blocks without any act are dropped; acts whose artist evaluates
    empty are skipped.
    """
    validate_plan(plan)
    soup = BeautifulSoup(html, "html.parser")

    festival = plan.festival
    result: dict[str, Any] = {
        "festivalName": evaluate_rule(festival.festival_name, soup),
        "festivalLocation": evaluate_rule(festival.festival_location, soup),
        "festivalDescription": evaluate_rule(festival.festival_description, soup),
        "festivalWebsite": evaluate_rule(festival.festival_website, soup),
        "lineup": [],
    }

    day_nodes = _select(soup, plan.day_selector, many=True) if plan.day_selector else [soup]
    for day_node in day_nodes:
        day_date = evaluate_rule(plan.day_date, day_node) or plan.default_date
        entries: list[dict[str, Any]] = []
        for act_node in _select(day_node, plan.act_selector, many=True):
            artist = evaluate_rule(plan.act_fields.artist, act_node)
            if not artist:
                continue
            entries.append(
                {
                    "artist": artist,
                    "time": evaluate_rule(plan.act_fields.time, act_node),
                    "stage": evaluate_rule(plan.act_fields.stage, act_node),
                }
            )
        if entries:
            result["lineup"].append({"date": day_date, "list": entries})

    return result
