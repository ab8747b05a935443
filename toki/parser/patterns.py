"""Locale pattern providers: regex tables plus small extraction functions.

A provider exposes four ordered lists of ``PatternRule`` (absolute, relative,
recurring, fuzzy) and the lookup tables they use. The resolver walks them in
order; providers never resolve anything on their own.
"""

import re
import unicodedata
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Union

from toki.db.models import RecurrenceRule
from toki.parser.normalizer import normalize_time_of_day
from toki.utils.constants import DEFAULT_HOUR, DEFAULT_MINUTE
from toki.utils.errors import UnsupportedLocale

TIERS = ("absolute", "relative", "recurring", "fuzzy")

Extractor = Callable[[re.Match, datetime], Union[datetime, RecurrenceRule]]

# Numerals
CJK_DIGITS = {
    "零": 0, "〇": 0,
    "一": 1,
    "二": 2, "兩": 2, "两": 2,
    "三": 3,
    "四": 4,
    "五": 5,
    "六": 6,
    "七": 7,
    "八": 8,
    "九": 9,
}
NUMBER = r"\d{1,2}|[零〇一二兩两三四五六七八九十]{1,3}"
COUNT = r"\d{1,3}|[零〇一二兩两三四五六七八九十]{1,3}"

# Period words shift the hour that follows them
AM, NOON, PM = "am", "noon", "pm"


@dataclass(frozen=True)
class PatternRule:
    """One regex and the function that turns its match into a schedule."""

    name: str
    pattern: re.Pattern
    extract: Extractor
    confidence: float = 0.8
    excludes: re.Pattern | None = None  # vetoes the rule when found in the text


def parse_number(token: str) -> int:
    """Parse ASCII digits or a CJK numeral up to 99 (十二, 二十, 三十一)."""
    token = token.strip()
    if token.isascii() and token.isdigit():
        return int(token)

    try:
        if "十" in token:
            tens, _, ones = token.partition("十")
            value = (CJK_DIGITS[tens] if tens else 1) * 10
            return value + (CJK_DIGITS[ones] if ones else 0)
        if len(token) == 1:
            return CJK_DIGITS[token]
    except KeyError:
        pass

    raise ValueError(f"Not a number: {token!r}")


def split_numbers(token: str) -> list[int]:
    """Split a day list such as ``1,15`` or ``5、20`` into numbers."""
    parts = re.split(r"[,，、・和及與与と\s]+", token)
    return [parse_number(part) for part in parts if part]


class LocaleProvider:
    """Pattern tables and extractors for one language."""

    tag: str = ""
    default_label: str = ""

    # token -> 0 (Sunday) .. 6 (Saturday)
    weekdays: dict[str, int] = {}
    # token -> 1..12
    months: dict[str, int] = {}
    # keyword -> day offset from today
    day_offsets: dict[str, int] = {}
    # period word -> AM / NOON / PM
    periods: dict[str, str] = {}
    # bare time-of-day word -> (hour, minute)
    fuzzy_times: dict[str, tuple[int, int]] = {}

    # Request fillers stripped from either end of the leftover content
    leading_filler: str = ""
    trailing_filler: str = ""
    # Recurrence keywords; they veto bare rules and are stripped from recurring content
    markers: str = ""

    def __init__(self) -> None:
        self._time = self.time_fragment()
        self._fuzzy = alternation(self.fuzzy_times)
        self._clock = rf"(?:{self._time}|(?P<fuzzy>{self._fuzzy}))"
        self._leading = re.compile(rf"^(?:{self.leading_filler}|[\s,，、。.!！?？:：;；~〜])+")
        self._trailing = re.compile(rf"(?:{self.trailing_filler}|[\s,，、。.!！?？:：;；~〜])+$")
        self._rules = {
            "absolute": self.absolute_rules(),
            "relative": self.relative_rules(),
            "recurring": self.recurring_rules(),
            "fuzzy": self.fuzzy_rules(),
        }

    # Pattern lists

    def absolute_rules(self) -> list[PatternRule]:
        raise NotImplementedError

    def relative_rules(self) -> list[PatternRule]:
        raise NotImplementedError

    def recurring_rules(self) -> list[PatternRule]:
        raise NotImplementedError

    def fuzzy_rules(self) -> list[PatternRule]:
        pattern = re.compile(self._fuzzy)
        return [PatternRule("time_word", pattern, self._extract_fuzzy, confidence=0.5)]

    def rules(self, tier: str) -> list[PatternRule]:
        """Ordered rules for one tier."""
        return self._rules[tier]

    def time_fragment(self) -> str:
        """Regex for a clock time, using the groups period/hour/minute/minute2/half."""
        raise NotImplementedError

    # Shared extraction helpers

    def normalize(self, text: str) -> str:
        """Fold full-width digits and punctuation to their ASCII forms."""
        return unicodedata.normalize("NFKC", text).strip()

    def number(self, token: str) -> int:
        return parse_number(token)

    def month_number(self, token: str) -> int:
        if f"{token}月" in self.months:
            return self.months[f"{token}月"]
        return self.number(token)

    def apply_period(self, period: str | None, hour: int) -> int:
        kind = self.periods.get(period or "")
        if kind == PM and hour < 12:
            return hour + 12
        if kind == NOON and hour < 6:
            return hour + 12
        if kind == AM and hour == 12:
            return 0
        return hour

    def time_of(
        self, match: re.Match, default: tuple[int, int] = (DEFAULT_HOUR, DEFAULT_MINUTE)
    ) -> tuple[int, int]:
        """Pull hour:minute out of a match built with ``self._clock``.

        Falls back to the fuzzy word table, then to ``default``.
        """
        groups = match.groupdict()

        if groups.get("hour"):
            hour = self.number(groups["hour"])
            if groups.get("minute"):
                minute = int(groups["minute"])
            elif groups.get("minute2"):
                minute = self.number(groups["minute2"])
            elif groups.get("half"):
                minute = 30
            else:
                minute = 0
            hour = self.apply_period(groups.get("period"), hour)
        elif groups.get("fuzzy"):
            hour, minute = self.fuzzy_times[groups["fuzzy"]]
        else:
            hour, minute = default

        if not 0 <= hour <= 23 or not 0 <= minute <= 59:
            raise ValueError(f"Invalid time {hour}:{minute:02d}")
        return hour, minute

    def weekday_set(self, token: str) -> frozenset[int]:
        days = {self.weekdays[ch] for ch in token if ch in self.weekdays}
        if not days:
            raise ValueError(f"No weekday in {token!r}")
        return frozenset(days)

    def anchor_weekday(self, match: re.Match) -> int | None:
        """The weekday a multi-week cycle is pinned to, if the text names one."""
        token = match.groupdict().get("wd")
        return self.weekdays[token] if token else None

    def clean_content(self, text: str) -> str:
        """Strip fillers and punctuation left around the matched span."""
        text = re.sub(r"\s+", " ", text).strip()
        previous = None
        while previous != text:
            previous = text
            text = self._leading.sub("", text)
            text = self._trailing.sub("", text)
        return text

    def _extract_fuzzy(self, match: re.Match, now: datetime) -> datetime:
        hour, minute = self.fuzzy_times[match.group(0)]
        return normalize_time_of_day(now, hour, minute)


def alternation(words) -> str:
    """Regex alternation of words, longest first so prefixes never shadow."""
    return "|".join(re.escape(w) for w in sorted(words, key=len, reverse=True))


# Registry

_ALIASES = {
    "zh": "zh",
    "zh-tw": "zh",
    "zh-hant": "zh",
    "zh-hk": "zh",
    "chinese": "zh",
    "ja": "ja",
    "ja-jp": "ja",
    "jp": "ja",
    "japanese": "ja",
}

_PROVIDERS: dict[str, LocaleProvider] = {}


def canonical_locale(locale: str) -> str:
    """Map a locale tag or alias to a registered provider tag."""
    key = (locale or "").strip().lower().replace("_", "-")
    if key in _ALIASES:
        return _ALIASES[key]
    raise UnsupportedLocale(f"Unsupported locale: {locale!r}")


def get_provider(locale: str) -> LocaleProvider:
    """Return the pattern provider for a locale tag."""
    tag = canonical_locale(locale)
    if tag not in _PROVIDERS:
        from toki.parser.locale_ja import JapaneseProvider
        from toki.parser.locale_zh import ChineseProvider

        for provider in (ChineseProvider(), JapaneseProvider()):
            _PROVIDERS[provider.tag] = provider
    return _PROVIDERS[tag]


# Language detection

_KANA = re.compile(r"[\u3040-\u30ff]")
_JA_MARKERS = ("毎", "曜", "時間", "来週", "来月", "明後日", "午前", "午後", "ごと", "おき")
_ZH_MARKERS = ("每", "點", "点", "號", "号", "星期", "禮拜", "後天", "上午", "下午", "晚上", "鐘")


def detect_locale(text: str, default: str = "zh") -> str:
    """Guess the locale of free text.

    Any kana means Japanese. Otherwise Japanese-only and Chinese-only markers
    vote; a tie keeps ``default``.
    """
    if _KANA.search(text):
        return "ja"

    ja_score = sum(text.count(marker) for marker in _JA_MARKERS)
    zh_score = sum(text.count(marker) for marker in _ZH_MARKERS)
    if ja_score > zh_score:
        return "ja"
    if zh_score > ja_score:
        return "zh"
    return default
