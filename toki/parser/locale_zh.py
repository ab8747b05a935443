"""Traditional Chinese patterns (simplified variants of common characters accepted)."""

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

WEEK = r"(?:星期|禮拜|礼拜|週|周)"
WEEKDAY = r"[一二三四五六日天]"
OF = r"\s*(?:的)?\s*"

OFFSET_UNITS = {
    "分鐘": "minutes", "分钟": "minutes", "分": "minutes",
    "小時": "hours", "小时": "hours", "鐘頭": "hours", "钟头": "hours",
    "天": "days", "日": "days",
}

WEEK_PREFIXES = {"下下": 2, "下": 1, "這": 0, "这": 0, "本": 0}


class ChineseProvider(LocaleProvider):
    tag = "zh"
    default_label = "提醒"

    weekdays = {"日": 0, "天": 0, "一": 1, "二": 2, "三": 3, "四": 4, "五": 5, "六": 6}
    months = {f"{n}月": i for i, n in enumerate(
        ["一", "二", "三", "四", "五", "六", "七", "八", "九", "十", "十一", "十二"], 1
    )}
    day_offsets = {
        "今天": 0, "今日": 0,
        "明天": 1, "明日": 1,
        "後天": 2, "后天": 2,
        "大後天": 3, "大后天": 3,
    }
    periods = {
        "凌晨": AM, "早上": AM, "上午": AM,
        "中午": NOON,
        "下午": PM, "傍晚": PM, "晚上": PM,
    }
    fuzzy_times = {
        "早上": (8, 0),
        "上午": (9, 0),
        "中午": (12, 0),
        "下午": (15, 0),
        "傍晚": (18, 0),
        "晚上": (20, 0),
        "半夜": (23, 0),
        "深夜": (23, 0),
    }

    leading_filler = r"提醒我|提醒|記得|记得|請|请|的"
    trailing_filler = r"提醒我|提醒|喔|哦"

    markers = rf"每|天天|隔{WEEK}"

    def time_fragment(self) -> str:
        return (
            rf"(?:(?P<period>{alternation(self.periods)})\s*)?"
            rf"(?P<hour>{NUMBER})\s*"
            r"(?:[:：](?P<minute>\d{2})"
            r"|[點点時时](?![間间])\s*"
            rf"(?:(?P<half>半)|(?P<minute2>\d{{1,2}}|[零〇一二兩两三四五六七八九十]{{1,3}}(?=分))\s*分?)?)"
        )

    # Absolute

    def absolute_rules(self) -> list[PatternRule]:
        clock = self._clock
        anchored = re.compile(
            rf"{self.markers}|{alternation(self.day_offsets)}|{WEEK}{WEEKDAY}|月|[號号]|\d/\d"
        )
        return [
            PatternRule(
                "full_date",
                re.compile(
                    r"(?P<year>\d{4})\s*年\s*(?P<month>\d{1,2})\s*月\s*(?P<day>\d{1,2})\s*[日號号]"
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
                re.compile(rf"(?<![年\d])(?P<month>{NUMBER})\s*月\s*(?P<day>{NUMBER})\s*[日號号]{OF}{clock}?"),
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
                re.compile(rf"(?:下個月|下个月|下月)\s*(?P<day>{NUMBER})\s*[號号日]{OF}{clock}?"),
                self._next_month_day,
                confidence=0.9,
            ),
            PatternRule(
                "day_of_month",
                re.compile(
                    rf"(?<![月\d每])(?:(?P<day>{NUMBER})\s*[號号]|(?P<dday>\d{{1,2}})\s*日(?![後后]))"
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
        day = self.number(match.group("day") or match.group("dday"))
        return normalize_day_of_month(now, day, hour, minute)

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
                    rf"(?P<amount>{COUNT}|半)\s*(?:個|个)?\s*(?:(?P<pre_half>半)\s*)?"
                    rf"(?P<unit>{alternation(OFFSET_UNITS)})\s*(?:(?P<post_half>半)\s*)?(?:之後|之后|以後|以后|後|后)"
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
                    rf"(?P<prefix>{alternation(WEEK_PREFIXES)})\s*(?:個|个)?\s*{WEEK}\s*"
                    rf"(?P<wd>{WEEKDAY}){OF}{clock}?"
                ),
                self._week_weekday,
                confidence=0.85,
                excludes=recurring,
            ),
            PatternRule(
                "weekday",
                re.compile(rf"{WEEK}\s*(?P<wd>{WEEKDAY}){OF}{clock}?"),
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
        days = rf"(?:{NUMBER})(?:\s*[日號号]?\s*[,，、和及與与]\s*(?:{NUMBER}))*"
        weekdays = rf"{WEEKDAY}(?:\s*[,，、和及與与]?\s*{WEEK}?\s*{WEEKDAY})*"
        each = r"每\s*(?:個|个)?\s*"
        return [
            PatternRule(
                "monthly",
                re.compile(rf"{each}月\s*(?P<days>{days})\s*[號号日]{OF}{clock}?"),
                self._monthly,
            ),
            PatternRule(
                "weekly",
                re.compile(rf"{each}{WEEK}\s*(?P<days>{weekdays}){OF}{clock}?"),
                self._weekly,
            ),
            PatternRule(
                "biweekly",
                re.compile(rf"隔\s*{WEEK}(?:\s*{WEEK}?\s*(?P<wd>{WEEKDAY})(?!\s*次))?{OF}{clock}?"),
                self._biweekly,
            ),
            PatternRule(
                "interval",
                re.compile(
                    rf"每\s*(?:隔)?\s*(?P<n>{COUNT})\s*(?:個|个)?\s*"
                    rf"(?:(?P<unit>天|日)|{WEEK}(?:\s*{WEEK}?\s*(?P<wd>{WEEKDAY})(?!\s*次))?){OF}{clock}?"
                ),
                self._interval,
            ),
            PatternRule(
                "daily",
                re.compile(rf"(?P<word>每天|每日|天天|每晚|每早){OF}{clock}?"),
                self._daily,
            ),
            PatternRule(
                "weekly_bare",
                re.compile(rf"{each}{WEEK}{OF}{clock}?"),
                self._weekly_bare,
                confidence=0.7,
            ),
            PatternRule(
                "monthly_bare",
                re.compile(rf"{each}月{OF}{clock}?"),
                self._monthly_bare,
                confidence=0.7,
            ),
        ]

    def _monthly(self, match: re.Match, now: datetime) -> MonthlyRule:
        hour, minute = self.time_of(match)
        days = split_numbers(re.sub(r"[日號号]", "", match.group("days")))
        return MonthlyRule(frozenset(days), hour, minute)

    def _weekly(self, match: re.Match, now: datetime) -> WeeklyRule:
        hour, minute = self.time_of(match)
        token = re.sub(WEEK, "", match.group("days"))
        return WeeklyRule(self.weekday_set(token), hour, minute)

    def _biweekly(self, match: re.Match, now: datetime) -> CustomRule:
        return CustomRule(14, *self.time_of(match), weekday=self.anchor_weekday(match))

    def _interval(self, match: re.Match, now: datetime) -> CustomRule:
        hour, minute = self.time_of(match)
        n = self.number(match.group("n"))
        if match.group("unit"):
            return CustomRule(n, hour, minute)
        return CustomRule(n * 7, hour, minute, weekday=self.anchor_weekday(match))

    def _daily(self, match: re.Match, now: datetime) -> DailyRule:
        word = match.group("word")
        if word == "每晚":
            hour, minute = self.time_of(match, default=self.fuzzy_times["晚上"])
            if match.group("hour") and not match.group("period") and hour < 12:
                hour += 12
        elif word == "每早":
            hour, minute = self.time_of(match, default=self.fuzzy_times["早上"])
        else:
            hour, minute = self.time_of(match)
        return DailyRule(hour, minute)

    def _weekly_bare(self, match: re.Match, now: datetime) -> WeeklyRule:
        hour, minute = self.time_of(match)
        return WeeklyRule(frozenset({to_weekday_index(now)}), hour, minute)

    def _monthly_bare(self, match: re.Match, now: datetime) -> MonthlyRule:
        hour, minute = self.time_of(match)
        return MonthlyRule(frozenset({now.day}), hour, minute)
