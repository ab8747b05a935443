"""Tests for the temporal expression resolver."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from toki.db.models import CustomRule, DailyRule, MonthlyRule, WeeklyRule
from toki.engine.recurrence import first_occurrence, next_occurrence
from toki.parser.nlp import parse_reminder, resolve
from toki.parser.patterns import detect_locale, get_provider
from toki.utils.errors import InvalidRecurrenceRule, ParseUnresolved, UnsupportedLocale

TAIPEI = ZoneInfo("Asia/Taipei")

# Wednesday
NOW = datetime(2026, 3, 4, 10, 0, tzinfo=TAIPEI)


def at(month, day, hour=9, minute=0, year=2026):
    return datetime(year, month, day, hour, minute, tzinfo=TAIPEI)


# Chinese


def test_tomorrow_with_time():
    outcome = resolve("明天8點吃藥", "zh", NOW)

    assert outcome.kind == "relative"
    assert outcome.instant == at(3, 5, 8)
    assert outcome.content == "吃藥"
    assert outcome.matched_text == "明天8點"
    assert outcome.rule is None


def test_weekly_rule():
    outcome = resolve("每週一9點開會", "zh", NOW)

    assert outcome.kind == "recurring"
    assert outcome.rule == WeeklyRule(frozenset({1}), 9, 0)
    assert outcome.content == "開會"
    assert outcome.instant is None
    assert next_occurrence(outcome.rule, NOW) == at(3, 9)


def test_relative_offset():
    outcome = resolve("30分鐘後買東西", "zh", NOW)

    assert outcome.kind == "relative"
    assert outcome.instant == NOW + timedelta(minutes=30)
    assert outcome.content == "買東西"


def test_half_hour_offset():
    assert resolve("半小時後", "zh", NOW).instant == NOW + timedelta(minutes=30)


def test_impossible_date_is_unresolved():
    outcome = resolve("2月30日", "zh", NOW)

    assert outcome.kind == "unresolved"
    assert outcome.instant is None
    assert outcome.rule is None


def test_time_of_day_with_period():
    outcome = resolve("下午3點開會", "zh", NOW)

    assert outcome.kind == "absolute"
    assert outcome.instant == at(3, 4, 15)
    assert outcome.content == "開會"


def test_passed_time_rolls_to_tomorrow():
    assert resolve("8點半", "zh", NOW).instant == at(3, 5, 8, 30)


def test_day_of_month():
    outcome = resolve("25號繳卡費", "zh", NOW)

    assert outcome.instant == at(3, 25)
    assert outcome.content == "繳卡費"


def test_next_week_weekday():
    assert resolve("下週五下午3點", "zh", NOW).instant == at(3, 13, 15)


def test_bare_weekday():
    assert resolve("星期一", "zh", NOW).instant == at(3, 9)


def test_month_day_with_half_hour():
    outcome = resolve("3月5日下午2點半看牙醫", "zh", NOW)

    assert outcome.instant == at(3, 5, 14, 30)
    assert outcome.content == "看牙醫"


def test_full_date():
    assert resolve("2026年12月25日", "zh", NOW).instant == at(12, 25)


def test_explicit_past_year_is_rejected():
    assert resolve("2025年1月1日", "zh", NOW).kind == "unresolved"


def test_day_keywords():
    assert resolve("大後天", "zh", NOW).instant == at(3, 7)
    assert resolve("下個月5號", "zh", NOW).instant == at(4, 5)


def test_today_needs_a_time():
    outcome = resolve("今天吃藥", "zh", NOW)

    assert outcome.kind == "unresolved"
    assert outcome.content == "今天吃藥"


def test_fuzzy_time_word():
    outcome = resolve("晚上打電話", "zh", NOW)

    assert outcome.kind == "fuzzy"
    assert outcome.instant == at(3, 4, 20)
    assert outcome.content == "打電話"


def test_full_width_digits():
    assert resolve("明天８點吃藥", "zh", NOW).instant == at(3, 5, 8)


def test_daily_rule_strips_filler():
    outcome = resolve("提醒我每天晚上10點吃藥", "zh", NOW)

    assert outcome.rule == DailyRule(22, 0)
    assert outcome.content == "吃藥"


def test_monthly_rule_with_day_list():
    outcome = resolve("每月1號和15號繳房租", "zh", NOW)

    assert outcome.rule == MonthlyRule(frozenset({1, 15}), 9, 0)
    assert outcome.content == "繳房租"


def test_interval_rules():
    assert resolve("每兩週", "zh", NOW).rule == CustomRule(14, 9, 0)
    assert resolve("每3天晚上9點澆花", "zh", NOW).rule == CustomRule(3, 21, 0)


def test_zero_interval_raises():
    with pytest.raises(InvalidRecurrenceRule):
        resolve("每0天", "zh", NOW)


def test_invalid_hour_falls_through():
    """A rejected extraction does not stop the search, and nothing else matches."""
    outcome = resolve("25點開會", "zh", NOW)

    assert outcome.kind == "unresolved"


# Japanese


def test_ja_tomorrow_with_time():
    outcome = resolve("明日8時に薬を飲む", "ja", NOW)

    assert outcome.kind == "relative"
    assert outcome.instant == at(3, 5, 8)
    assert outcome.content == "薬を飲む"


def test_ja_weekly_rule():
    outcome = resolve("毎週月曜9時に会議", "ja", NOW)

    assert outcome.rule == WeeklyRule(frozenset({1}), 9, 0)
    assert outcome.content == "会議"


def test_ja_relative_offset():
    outcome = resolve("30分後に買い物", "ja", NOW)

    assert outcome.instant == NOW + timedelta(minutes=30)
    assert outcome.content == "買い物"


def test_ja_interval_rules():
    """N日おき skips N days, N日ごと repeats every N days."""
    outcome = resolve("3日おきに水やり", "ja", NOW)
    assert outcome.rule == CustomRule(4, 9, 0)
    assert outcome.content == "水やり"

    assert resolve("3日ごとに水やり", "ja", NOW).rule == CustomRule(3, 9, 0)
    assert resolve("2週間ごと", "ja", NOW).rule == CustomRule(14, 9, 0)
    assert resolve("隔週", "ja", NOW).rule == CustomRule(14, 9, 0)


def test_ja_monthly_rule_with_day_list():
    outcome = resolve("毎月1日と15日に家賃", "ja", NOW)

    assert outcome.rule == MonthlyRule(frozenset({1, 15}), 9, 0)
    assert outcome.content == "家賃"


def test_ja_daily_defaults():
    assert resolve("毎朝", "ja", NOW).rule == DailyRule(8, 0)
    assert resolve("毎晩9時", "ja", NOW).rule == DailyRule(21, 0)


def test_ja_next_week_fuzzy_evening():
    assert resolve("来週金曜の夜", "ja", NOW).instant == at(3, 13, 20)


def test_ja_time_of_day():
    assert resolve("午後3時半", "ja", NOW).instant == at(3, 4, 15, 30)


def test_ja_impossible_date_is_unresolved():
    assert resolve("2月30日", "ja", NOW).kind == "unresolved"


# Exact clock times


@pytest.mark.parametrize("hour", range(24))
@pytest.mark.parametrize("minute", [0, 5, 30, 59])
def test_explicit_clock_time_is_exact(hour, minute):
    """Every explicit hour:minute lands on that wall-clock time tomorrow."""
    for text, locale in [
        (f"明天{hour}點{minute}分", "zh"),
        (f"明天{hour:02d}:{minute:02d}", "zh"),
        (f"明日{hour}時{minute}分", "ja"),
    ]:
        instant = resolve(text, locale, NOW).instant
        assert instant == at(3, 5, hour, minute), text


# Locales


def test_detect_locale():
    assert detect_locale("明日8時に薬を飲む") == "ja"
    assert detect_locale("毎週月曜9時") == "ja"
    assert detect_locale("明天8點吃藥") == "zh"
    assert detect_locale("") == "zh"
    assert detect_locale("会議", default="ja") == "ja"


def test_resolve_detects_locale():
    outcome = resolve("明日8時に薬を飲む", None, NOW)

    assert outcome.locale == "ja"
    assert outcome.instant == at(3, 5, 8)


def test_locale_aliases():
    assert get_provider("zh-TW").tag == "zh"
    assert get_provider("ja_JP").tag == "ja"


def test_unsupported_locale():
    with pytest.raises(UnsupportedLocale):
        resolve("tomorrow", "en", NOW)
    assert issubclass(UnsupportedLocale, ValueError)


def test_naive_reference_time_raises():
    with pytest.raises(ValueError):
        resolve("明天8點", "zh", datetime(2026, 3, 4, 10, 0))


def test_parse_reminder_raises_when_unresolved():
    with pytest.raises(ParseUnresolved) as exc_info:
        parse_reminder("今天吃藥", "zh", NOW)

    assert exc_info.value.locale == "zh"
    assert exc_info.value.content == "今天吃藥"


# Multi-week cycles pinned to a weekday


def test_biweekly_with_weekday_and_time():
    outcome = resolve("隔週五下午3點開會", "zh", NOW)

    assert outcome.rule == CustomRule(14, 15, 0, weekday=5)
    assert outcome.content == "開會"
    # Starts this Friday, then every other Friday
    first = first_occurrence(outcome.rule, NOW)
    assert first == at(3, 6, 15)
    assert next_occurrence(outcome.rule, first) == at(3, 20, 15)


def test_week_interval_with_weekday_and_time():
    outcome = resolve("每2週週五15點開會", "zh", NOW)

    assert outcome.rule == CustomRule(14, 15, 0, weekday=5)
    assert outcome.content == "開會"

    assert resolve("每3週一", "zh", NOW).rule == CustomRule(21, 9, 0, weekday=1)


def test_biweekly_once_is_not_a_weekday():
    outcome = resolve("隔週一次打掃", "zh", NOW)

    assert outcome.rule == CustomRule(14, 9, 0)


def test_ja_week_interval_with_weekday_and_time():
    outcome = resolve("2週間ごと金曜15時に会議", "ja", NOW)

    assert outcome.rule == CustomRule(14, 15, 0, weekday=5)
    assert outcome.content == "会議"

    assert resolve("隔週金曜日の夜", "ja", NOW).rule == CustomRule(14, 20, 0, weekday=5)
    assert resolve("1週間おき月曜9時", "ja", NOW).rule == CustomRule(14, 9, 0, weekday=1)


# Hours and a half


def test_hour_and_a_half_offset():
    expected = NOW + timedelta(minutes=90)

    assert resolve("1個半小時後開會", "zh", NOW).instant == expected
    assert resolve("1小時半後", "zh", NOW).instant == expected
    assert resolve("1時間半後に会議", "ja", NOW).instant == expected
    assert resolve("1時間半後に会議", "ja", NOW).content == "会議"
    assert resolve("兩個半小時後", "zh", NOW).instant == NOW + timedelta(minutes=150)
