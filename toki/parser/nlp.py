"""Temporal expression resolver - the main pipeline."""

import logging
import re
from datetime import datetime

from toki.db.models import ParseOutcome
from toki.parser.patterns import TIERS, detect_locale, get_provider
from toki.utils.errors import ParseUnresolved

logger = logging.getLogger(__name__)


def resolve(text: str, locale: str | None, now: datetime) -> ParseOutcome:
    """Resolve free text into a one-shot instant or a recurrence rule.

    Pipeline:
    1. Pick the locale provider (detect it when ``locale`` is None)
    2. Normalize the text (full-width digits and punctuation)
    3. Walk the tiers in order: absolute, relative, recurring, fuzzy.
       The first rule whose extractor succeeds wins.
    4. Cut the matched span out and clean the rest into the content

    Args:
        text: Free text, e.g. "明天8點吃藥"
        locale: Locale tag or alias, or None to detect
        now: Timezone-aware reference instant

    Returns:
        ParseOutcome; ``kind == "unresolved"`` when nothing matched

    Raises:
        ValueError: ``now`` is naive
        UnsupportedLocale: unknown locale tag
        InvalidRecurrenceRule: a recurring match built an invalid rule
    """
    if now.tzinfo is None:
        raise ValueError("Reference time must be timezone-aware")

    # 1. Locale
    provider = get_provider(locale or detect_locale(text))

    # 2. Normalize
    text = provider.normalize(text)

    # 3. Tiers
    for tier in TIERS:
        for rule in provider.rules(tier):
            match = rule.pattern.search(text)
            if not match:
                continue
            if rule.excludes is not None and rule.excludes.search(text):
                continue

            try:
                value = rule.extract(match, now)
            except ValueError as e:
                logger.debug(f"{provider.tag}/{rule.name} rejected {match.group(0)!r}: {e}")
                continue

            if tier != "recurring" and value <= now:
                logger.debug(f"{provider.tag}/{rule.name} rejected past instant {value}")
                continue

            # 4. Content
            leftover = f"{text[:match.start()]} {text[match.end():]}"
            if tier == "recurring" and provider.markers:
                leftover = re.sub(provider.markers, " ", leftover)
            content = provider.clean_content(leftover)

            logger.debug(f"{provider.tag}/{rule.name} matched {match.group(0)!r} -> {value}")
            return ParseOutcome(
                kind=tier,
                locale=provider.tag,
                matched_text=match.group(0),
                content=content,
                instant=None if tier == "recurring" else value,
                rule=value if tier == "recurring" else None,
                confidence=rule.confidence,
            )

    logger.debug(f"{provider.tag}: no pattern matched {text!r}")
    return ParseOutcome.unresolved(provider.tag, provider.clean_content(text))


def parse_reminder(text: str, locale: str | None, now: datetime) -> ParseOutcome:
    """Like ``resolve`` but raises ``ParseUnresolved`` when nothing matched."""
    outcome = resolve(text, locale, now)
    if not outcome.is_resolved:
        raise ParseUnresolved(text, outcome.locale, outcome.content)
    return outcome
