"""Maps the focused application's name to a formatting category."""

from enum import Enum


class AppCategory(str, Enum):
    PERSONAL = "personal"
    WORK = "work"
    EMAIL = "email"
    OTHER = "other"


PERSONAL_APPS = (
    "messages", "imessage", "whatsapp", "telegram", "signal", "messenger",
    "discord", "snapchat", "instagram", "wechat", "line", "viber", "kik", "threema",
)

WORK_APPS = (
    "slack", "microsoft teams", "teams", "zoom", "google meet", "meet", "webex",
    "skype", "notion", "asana", "trello", "jira", "confluence", "monday",
    "clickup", "basecamp", "workplace", "mattermost", "rocketchat", "zulip",
)

EMAIL_APPS = (
    "mail", "gmail", "outlook", "thunderbird", "spark", "airmail", "postbox",
    "mailmate", "canary mail", "polymail", "superhuman", "hey", "protonmail",
    "fastmail",
)


def categorize_app(app_name: str) -> AppCategory:
    # Checked in order: a name matching several lists takes the first.
    name = app_name.lower()
    if any(app in name for app in PERSONAL_APPS):
        return AppCategory.PERSONAL
    if any(app in name for app in WORK_APPS):
        return AppCategory.WORK
    if any(app in name for app in EMAIL_APPS):
        return AppCategory.EMAIL
    return AppCategory.OTHER
