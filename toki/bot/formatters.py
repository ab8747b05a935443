"""Message text formatters."""

from html import escape

from toki.db.models import (
    CustomRule,
    DailyRule,
    MonthlyRule,
    RecurrenceRule,
    ReminderRecord,
    WeeklyRule,
)
from toki.utils.constants import STATUS_COMPLETED, STATUS_DEACTIVATED
from toki.utils.errors import (
    InvalidRecurrenceRule,
    InvalidStateTransition,
    ReminderLimitExceeded,
    ReminderNotFound,
    TokiError,
    UnsupportedLocale,
)
from toki.utils.time_utils import format_local, format_relative_time

WEEKDAY_NAMES = {
    "zh": "日一二三四五六",
    "ja": "日月火水木金土",
}

MESSAGES = {
    "zh": {
        "created": "✅ 已設定提醒",
        "notify": "🔔 提醒",
        "next": "下次",
        "empty": "目前沒有提醒。",
        "list_title": "你的提醒",
        "cancelled": "🗑 已取消提醒",
        "reactivated": "🔁 已重新啟用提醒",
        "completed": "已完成",
        "deactivated": "已取消",
        "usage_cancel": "用法: /cancel &lt;id&gt;",
        "usage_reactivate": "用法: /reactivate &lt;id&gt;",
        "invalid_id": "提醒編號必須是數字。",
        "usage_language": "用法: /language &lt;zh|ja|auto&gt;",
        "language_set": "✓ 語言已設為 <b>{value}</b>",
        "timezone_current": "目前時區: <code>{value}</code>\n\n變更: <code>/timezone Asia/Taipei</code>",
        "timezone_set": "✓ 時區已設為 <b>{value}</b>",
        "invalid_timezone": "無效的時區: {value}",
        "not_found": "找不到這個提醒。",
        "invalid_transition": "這個提醒無法變更: {value}",
        "limit": "提醒數量已達上限。",
        "invalid_rule": "重複設定無效: {value}",
        "store": "暫時無法存取資料，請稍後再試。",
    },
    "ja": {
        "created": "✅ リマインダーを設定しました",
        "notify": "🔔 リマインダー",
        "next": "次回",
        "empty": "リマインダーはありません。",
        "list_title": "リマインダー一覧",
        "cancelled": "🗑 リマインダーを取り消しました",
        "reactivated": "🔁 リマインダーを再開しました",
        "completed": "完了",
        "deactivated": "取消済み",
        "usage_cancel": "使い方: /cancel &lt;id&gt;",
        "usage_reactivate": "使い方: /reactivate &lt;id&gt;",
        "invalid_id": "リマインダー番号は数字で指定してください。",
        "usage_language": "使い方: /language &lt;zh|ja|auto&gt;",
        "language_set": "✓ 言語を <b>{value}</b> に設定しました",
        "timezone_current": "現在のタイムゾーン: <code>{value}</code>\n\n変更: <code>/timezone Asia/Tokyo</code>",
        "timezone_set": "✓ タイムゾーンを <b>{value}</b> に設定しました",
        "invalid_timezone": "無効なタイムゾーンです: {value}",
        "not_found": "リマインダーが見つかりません。",
        "invalid_transition": "このリマインダーは変更できません: {value}",
        "limit": "リマインダーの数が上限に達しました。",
        "invalid_rule": "繰り返しの指定が正しくありません: {value}",
        "store": "データにアクセスできません。しばらくしてからお試しください。",
    },
}


def _messages(locale: str) -> dict[str, str]:
    return MESSAGES["ja" if locale == "ja" else "zh"]


def format_rule(rule: RecurrenceRule, locale: str) -> str:
    """Describe a recurrence rule, e.g. ``每週一、三 09:00`` or ``毎週月・水曜 09:00``."""
    clock = f"{rule.hour:02d}:{rule.minute:02d}"
    names = WEEKDAY_NAMES["ja" if locale == "ja" else "zh"]

    if locale == "ja":
        if isinstance(rule, DailyRule):
            return f"毎日 {clock}"
        elif isinstance(rule, WeeklyRule):
            days = "・".join(names[d] for d in sorted(rule.weekdays))
            return f"毎週{days}曜 {clock}"
        elif isinstance(rule, MonthlyRule):
            days = "・".join(str(d) for d in sorted(rule.month_days))
            return f"毎月{days}日 {clock}"
        elif isinstance(rule, CustomRule) and rule.weekday is not None:
            weeks = rule.interval_days // 7
            every = "隔週" if weeks == 2 else f"{weeks}週間ごと"
            return f"{every}{names[rule.weekday]}曜 {clock}"
        elif isinstance(rule, CustomRule):
            return f"{rule.interval_days}日ごと {clock}"
    else:
        if isinstance(rule, DailyRule):
            return f"每天 {clock}"
        elif isinstance(rule, WeeklyRule):
            days = "、".join(names[d] for d in sorted(rule.weekdays))
            return f"每週{days} {clock}"
        elif isinstance(rule, MonthlyRule):
            days = "、".join(str(d) for d in sorted(rule.month_days))
            return f"每月{days}號 {clock}"
        elif isinstance(rule, CustomRule) and rule.weekday is not None:
            weeks = rule.interval_days // 7
            every = "隔週" if weeks == 2 else f"每{weeks}週的週"
            return f"{every}{names[rule.weekday]} {clock}"
        elif isinstance(rule, CustomRule):
            return f"每{rule.interval_days}天 {clock}"

    raise TypeError(f"Unknown rule: {rule!r}")


def format_reminder(record: ReminderRecord, show_id: bool = True) -> str:
    """Format a reminder as a message."""
    text = _messages(record.locale)
    lines = []

    # Content and ID
    if show_id:
        lines.append(f"<b>{escape(record.content)}</b> (#{record.id})")
    else:
        lines.append(f"<b>{escape(record.content)}</b>")

    # Next fire time
    if record.next_fire_at:
        when = format_local(record.next_fire_at, record.timezone, record.locale)
        relative = format_relative_time(record.next_fire_at, record.locale)
        lines.append(f"⏰ {when} ({relative})")
    elif record.status == STATUS_COMPLETED:
        lines.append(f"✓ {text['completed']}")
    elif record.status == STATUS_DEACTIVATED:
        lines.append(f"⏸ {text['deactivated']}")

    # Recurring
    if record.rule:
        lines.append(f"🔁 {format_rule(record.rule, record.locale)}")

    return "\n".join(lines)


def format_reminder_list(records: list[ReminderRecord], locale: str) -> str:
    """Format a list of reminders."""
    text = _messages(locale)
    if not records:
        return text["empty"]

    lines = [f"<b>{text['list_title']} ({len(records)})</b>"]
    lines.extend(format_reminder(record) for record in records)
    return "\n\n".join(lines)


def format_created(record: ReminderRecord) -> str:
    """Confirmation after a reminder is created."""
    return f"{_messages(record.locale)['created']}\n\n{format_reminder(record)}"


def format_cancelled(record: ReminderRecord) -> str:
    return f"{_messages(record.locale)['cancelled']}: {escape(record.content)} (#{record.id})"


def format_reactivated(record: ReminderRecord) -> str:
    return f"{_messages(record.locale)['reactivated']}\n\n{format_reminder(record)}"


def format_notification(record: ReminderRecord) -> str:
    """The message sent when a reminder fires.

    ``record`` is already marked fired, so a recurring reminder's
    ``next_fire_at`` is the following occurrence.
    """
    text = _messages(record.locale)
    lines = [f"{text['notify']}: <b>{escape(record.content)}</b>"]

    if record.rule and record.next_fire_at:
        when = format_local(record.next_fire_at, record.timezone, record.locale)
        lines.append(f"🔁 {format_rule(record.rule, record.locale)} ({text['next']}: {when})")

    return "\n".join(lines)


def format_welcome_message(locale: str) -> str:
    """Format the welcome message for /start."""
    if locale == "ja":
        return """
<b>Toki へようこそ!</b> ⏰

いつ何をするかをそのまま送ってください:
• <code>明日8時に薬を飲む</code>
• <code>毎週月曜9時に会議</code>
• <code>30分後に買い物</code>

/list - リマインダー一覧
/help - コマンド一覧
""".strip()

    return """
<b>歡迎使用 Toki!</b> ⏰

直接告訴我什麼時候要做什麼:
• <code>明天8點吃藥</code>
• <code>每週一9點開會</code>
• <code>30分鐘後買東西</code>

/list - 查看提醒
/help - 指令說明
""".strip()


def format_help_message(locale: str) -> str:
    """Format the help message."""
    if locale == "ja":
        return """
<b>Toki コマンド ⏰</b>

<b>リマインダーの作成:</b>
テキストを送るだけ: 「明日の朝会議」「毎月1日と15日に家賃」「3日おきに水やり」
時間がわからない場合は1時間後に設定します。

<b>管理:</b>
/list - 予定中のリマインダー
/list all - すべてのリマインダー
/cancel &lt;id&gt; - 取り消す
/reactivate &lt;id&gt; - 再開する

<b>設定:</b>
/language &lt;zh|ja|auto&gt; - 言語
/timezone &lt;tz&gt; - タイムゾーン (例: Asia/Tokyo)
""".strip()

    return """
<b>Toki 指令說明 ⏰</b>

<b>建立提醒:</b>
直接傳文字: 「明天早上開會」「每月1號和15號繳房租」「每3天晚上9點澆花」
看不懂時間的話會設在一小時後。

<b>管理提醒:</b>
/list - 進行中的提醒
/list all - 所有提醒
/cancel &lt;id&gt; - 取消提醒
/reactivate &lt;id&gt; - 重新啟用

<b>設定:</b>
/language &lt;zh|ja|auto&gt; - 語言
/timezone &lt;tz&gt; - 時區 (例如 Asia/Taipei)
""".strip()


def format_message(key: str, locale: str, value: object = "") -> str:
    """Look up a short bot reply, e.g. ``format_message("timezone_set", "zh", tz)``."""
    return _messages(locale)[key].format(value=escape(str(value)))


def format_error(error: TokiError, locale: str) -> str:
    """User-facing text for an error the bot knows how to explain."""
    if isinstance(error, ReminderNotFound):
        return format_message("not_found", locale)
    elif isinstance(error, InvalidStateTransition):
        return format_message("invalid_transition", locale, error)
    elif isinstance(error, ReminderLimitExceeded):
        return format_message("limit", locale)
    elif isinstance(error, InvalidRecurrenceRule):
        return format_message("invalid_rule", locale, error)
    elif isinstance(error, UnsupportedLocale):
        return format_message("usage_language", locale)
    return format_message("store", locale)
