"""Japanese patterns, kanji and kana."""

import re
from datetime import datetime

from toki.db.models import CustomRule, DailyRule, MonthlyRule, WeeklyRule
from toki.parser.normalizer import (
    normalize_day_of_month,
    normalize_day_offset,
    normalize_next_weekday,
    normalize_relative_offset,
    normalize_specific_date,
    normalize_time_of_day,
    normalize_week_weekday,
)
from toki.parser.patterns import (
    AM,
    COUNT,
    NOON,
    NUMBER,
    PM,
    LocaleProvider,
    PatternRule,
    alternation,
    split_numbers,
)
from toki.utils.time_utils import to_weekday_index

WEEKDAY = r"[月火水木金土日]"
YOUBI = r"曜(?:日)?"
OF = r"\s*(?:の|に)?\s*"

OFFSET_UNITS = {
    "分間": "minutes", "分": "minutes",
    "時間": "hours",
    "日間": "days", "日": "days",
}

WEEK_PREFIXES = {"再来週": 2, "来週": 1, "今週": 0}


class JapaneseProvider(LocaleProvider):
    tag = "ja"
    default_label = "リマインダー"

    weekdays = {"日": 0, "月": 1, "火": 2, "水": 3, "木": 4, "金": 5, "土": 6}
    months = {f"{n}月": i for i, n in enumerate(
        ["一", "二", "三", "四", "五", "六", "七", "八", "九", "十", "十一", "十二"], 1
    )}
    day_offsets = {
        "今日": 0, "きょう": 0,
        "明日": 1, "あした": 1, "あす": 1,
        "明後日": 2, "あさって": 2,
        "明々後日": 3, "明明後日": 3, "しあさって": 3,
    }
    periods = {
        "午前": AM, "朝": AM,
        "昼": NOON,
        "午後": PM, "夕方": PM, "夜": PM,
    }
    fuzzy_times = {
        "朝": (8, 0),
        "午前": (9, 0),
        "昼": (12, 0),
        "お昼": (12, 0),
        "正午": (12, 0),
        "午後": (15, 0),
        "夕方": (18, 0),
        "夜": (20, 0),
        "深夜": (23, 0),
    }

    leading_filler = r"に|は|で|を"
    trailing_filler = (
        r"を?リマインドして(?:ください)?|を?リマインド|と?リマインダー"
        r"|を?教えて(?:ください)?|を?知らせて(?:ください)?|を?通知して(?:ください)?"
    )

    markers = r"毎|まいにち|まいしゅう|まいつき|隔週|ごと|おき"

    def time_fragment(self) -> str:
        return (
            rf"(?:(?P<period>{alternation(self.periods)})\s*)?"
            rf"(?P<hour>{NUMBER})\s*"
            r"(?:[:：](?P<minute>\d{2})"
            r"|時(?!間)\s*"
            rf"(?:(?P<half>半)|(?P<minute2>\d{{1,2}}|[零〇一二三四五六七八九十]{{1,3}}(?=分))\s*分?)?)"
        )

    # Absolute

    def absolute_rules(self) -> list[PatternRule]:
        clock = self._clock
        anchored = re.compile(
            rf"{self.markers}|{alternation(self.day_offsets)}|{WEEKDAY}\s*曜"
            rf"|{alternation(WEEK_PREFIXES)}|月|\d\s*日|\d/\d"
        )
        return [
            PatternRule(
                "full_date",
                re.compile(
                    r"(?P<year>\d{4})\s*年\s*(?P<month>\d{1,2})\s*月\s*(?P<day>\d{1,2})\s*日"
                    rf"{OF}{clock}?"
                ),
                self._date,
                confidence=0.95,
            ),
            PatternRule(
                "numeric_date",
                re.compile(
                    r"(?<!\d)(?P<year>\d{4})[/\-.](?P<month>\d{1,2})[/\-.](?P<day>\d{1,2})(?!\d)"
                    rf"{OF}{clock}?"
                ),
                self._date,
                confidence=0.95,
            ),
            PatternRule(
                "month_day",
                re.compile(rf"(?<![年\d])(?P<month>{NUMBER})\s*月\s*(?P<day>{NUMBER})\s*日{OF}{clock}?"),
                self._date,
                confidence=0.9,
            ),
            PatternRule(
                "slash_date",
                re.compile(rf"(?<![\d/])(?P<month>\d{{1,2}})/(?P<day>\d{{1,2}})(?![\d/]){OF}{clock}?"),
                self._date,
                confidence=0.85,
            ),
            PatternRule(
                "next_month_day",
                re.compile(rf"来月\s*(?:の)?\s*(?P<day>{NUMBER})\s*日{OF}{clock}?"),
                self._next_month_day,
                confidence=0.9,
            ),
            PatternRule(
                "day_of_month",
                re.compile(
                    r"(?<![月\d毎])(?P<day>\d{1,2})\s*日(?!\s*(?:後|ご|毎|おき|間|前|曜))"
                    rf"{OF}{clock}?"
                ),
                self._day_of_month,
                confidence=0.85,
                excludes=re.compile(self.markers),
            ),
            PatternRule(
                "time_of_day",
                re.compile(rf"(?<![\d年月/\-]){self._time}"),
                self._time_of_day,
                confidence=0.8,
                excludes=anchored,
            ),
        ]

    def _date(self, match: re.Match, now: datetime) -> datetime:
        year = match.groupdict().get("year")
        hour, minute = self.time_of(match)
        return normalize_specific_date(
            now,
            self.month_number(match.group("month")),
            self.number(match.group("day")),
            hour,
            minute,
            year=int(year) if year else None,
        )

    def _next_month_day(self, match: re.Match, now: datetime) -> datetime:
        hour, minute = self.time_of(match)
        return normalize_day_of_month(
            now, self.number(match.group("day")), hour, minute, months_ahead=1
        )

    def _day_of_month(self, match: re.Match, now: datetime) -> datetime:
        hour, minute = self.time_of(match)
        return normalize_day_of_month(now, int(match.group("day")), hour, minute)

    def _time_of_day(self, match: re.Match, now: datetime) -> datetime:
        return normalize_time_of_day(now, *self.time_of(match))

    # Relative

    def relative_rules(self) -> list[PatternRule]:
        clock = self._clock
        recurring = re.compile(self.markers)
        return [
            PatternRule(
                "offset",
                re.compile(
                    rf"(?P<amount>{COUNT}|半)\s*(?P<unit>{alternation(OFFSET_UNITS)})\s*(?:(?P<post_half>半)\s*)?(?:後|ご(?!と))"
                ),
                self._offset,
                confidence=0.9,
            ),
            PatternRule(
                "day_keyword",
                re.compile(rf"(?P<day>{alternation(self.day_offsets)}){OF}{clock}?"),
                self._day_keyword,
                confidence=0.9,
                excludes=recurring,
            ),
            PatternRule(
                "week_weekday",
                re.compile(
                    rf"(?P<prefix>{alternation(WEEK_PREFIXES)})\s*(?:の)?\s*"
                    rf"(?P<wd>{WEEKDAY})\s*{YOUBI}{OF}{clock}?"
                ),
                self._week_weekday,
                confidence=0.85,
                excludes=recurring,
            ),
            PatternRule(
                "weekday",
                re.compile(rf"(?P<wd>{WEEKDAY})\s*{YOUBI}{OF}{clock}?"),
                self._weekday,
                confidence=0.8,
                excludes=recurring,
            ),
        ]

    def _offset(self, match: re.Match, now: datetime) -> datetime:
        unit = OFFSET_UNITS[match.group("unit")]
        amount = match.group("amount")
        groups = match.groupdict()
        half = amount == "半" or groups.get("pre_half") or groups.get("post_half")
        if half and unit != "hours":
            raise ValueError(f"Half only applies to hours: {match.group(0)!r}")
        if amount == "半":
            return normalize_relative_offset(now, 30, "minutes")
        if half:
            return normalize_relative_offset(now, self.number(amount) * 60 + 30, "minutes")
        return normalize_relative_offset(now, self.number(amount), unit)

    def _day_keyword(self, match: re.Match, now: datetime) -> datetime:
        days = self.day_offsets[match.group("day")]
        if days == 0 and not (match.group("hour") or match.group("fuzzy")):
            raise ValueError("Today needs a time")
        hour, minute = self.time_of(match)
        return normalize_day_offset(now, days, hour, minute)

    def _week_weekday(self, match: re.Match, now: datetime) -> datetime:
        hour, minute = self.time_of(match)
        weeks_ahead = WEEK_PREFIXES[match.group("prefix")]
        return normalize_week_weekday(
            now, self.weekdays[match.group("wd")], hour, minute, weeks_ahead
        )

    def _weekday(self, match: re.Match, now: datetime) -> datetime:
        hour, minute = self.time_of(match)
        return normalize_next_weekday(now, self.weekdays[match.group("wd")], hour, minute)

    # Recurring

    def recurring_rules(self) -> list[PatternRule]:
        clock = self._clock
        days = rf"(?:{NUMBER})(?:\s*日?\s*[,、・と]\s*(?:{NUMBER}))*"
        weekdays = rf"{WEEKDAY}(?:\s*{YOUBI})?(?:\s*[,、・と]?\s*{WEEKDAY}(?:\s*{YOUBI})?)*"
        anchor = rf"(?:\s*(?:の)?\s*(?P<wd>{WEEKDAY})\s*{YOUBI})?"
        return [
            PatternRule(
                "monthly",
                re.compile(rf"(?:毎月|まいつき)\s*(?:の)?\s*(?P<days>{days})\s*日{OF}{clock}?"),
                self._monthly,
            ),
            PatternRule(
                "weekly",
                re.compile(rf"(?:毎週|まいしゅう)\s*(?:の)?\s*(?P<days>{weekdays}){OF}{clock}?"),
                self._weekly,
            ),
            PatternRule(
                "biweekly",
                re.compile(rf"隔週{anchor}{OF}{clock}?"),
                self._biweekly,
            ),
            PatternRule(
                "interval",
                re.compile(
                    rf"(?P<n>{COUNT})\s*(?:(?P<unit>日)\s*(?P<mode>ごと|毎|おき)"
                    rf"|(?:週間|週)\s*(?P<wmode>ごと|毎|おき){anchor}){OF}{clock}?"
                ),
                self._interval,
            ),
            PatternRule(
                "daily",
                re.compile(rf"(?P<word>毎日|まいにち|毎朝|毎晩|毎夜){OF}{clock}?"),
                self._daily,
            ),
            PatternRule(
                "weekly_bare",
                re.compile(rf"(?:毎週|まいしゅう){OF}{clock}?"),
                self._weekly_bare,
                confidence=0.7,
            ),
            PatternRule(
                "monthly_bare",
                re.compile(rf"(?:毎月|まいつき){OF}{clock}?"),
                self._monthly_bare,
                confidence=0.7,
            ),
        ]

    def _monthly(self, match: re.Match, now: datetime) -> MonthlyRule:
        hour, minute = self.time_of(match)
        days = split_numbers(match.group("days").replace("日", ""))
        return MonthlyRule(frozenset(days), hour, minute)

    def _weekly(self, match: re.Match, now: datetime) -> WeeklyRule:
        hour, minute = self.time_of(match)
        # 日 in 曜日 is not Sunday
        token = re.sub(YOUBI, "", match.group("days"))
        return WeeklyRule(self.weekday_set(token), hour, minute)

    def _biweekly(self, match: re.Match, now: datetime) -> CustomRule:
        return CustomRule(14, *self.time_of(match), weekday=self.anchor_weekday(match))

    def _interval(self, match: re.Match, now: datetime) -> CustomRule:
        hour, minute = self.time_of(match)
        n = self.number(match.group("n"))
        # N日おき skips N days between firings
        if (match.group("mode") or match.group("wmode")) == "おき":
            n += 1
        if match.group("unit"):
            return CustomRule(n, hour, minute)
        return CustomRule(n * 7, hour, minute, weekday=self.anchor_weekday(match))

    def _daily(self, match: re.Match, now: datetime) -> DailyRule:
        word = match.group("word")
        if word in ("毎晩", "毎夜"):
            hour, minute = self.time_of(match, default=self.fuzzy_times["夜"])
            if match.group("hour") and not match.group("period") and hour < 12:
                hour += 12
        elif word == "毎朝":
            hour, minute = self.time_of(match, default=self.fuzzy_times["朝"])
        else:
            hour, minute = self.time_of(match)
        return DailyRule(hour, minute)

    def _weekly_bare(self, match: re.Match, now: datetime) -> WeeklyRule:
        hour, minute = self.time_of(match)
        return WeeklyRule(frozenset({to_weekday_index(now)}), hour, minute)

    def _monthly_bare(self, match: re.Match, now: datetime) -> MonthlyRule:
        hour, minute = self.time_of(match)
        return MonthlyRule(frozenset({now.day}), hour, minute)
