from hiscorebot.config.settings import Settings


def test_defaults(monkeypatch) -> None:
    monkeypatch.delenv("HISCORE_BASE_URL", raising=False)
    monkeypatch.delenv("HISCORE_TIMEOUT_SECONDS", raising=False)

    settings = Settings(_env_file=None)  # type: ignore[call-arg]

    assert settings.hiscore_base_url == "https://secure.runescape.com"
    assert settings.hiscore_timeout_seconds is None
    assert settings.bot_ignored_users == ["streamelements"]


def test_discord_token_accepts_legacy_name(monkeypatch) -> None:
    monkeypatch.delenv("DISCORD_BOT_TOKEN", raising=False)
    monkeypatch.setenv("DISCORD_TOKEN", "legacy-token")

    settings = Settings(_env_file=None)  # type: ignore[call-arg]

    assert settings.discord_bot_token == "legacy-token"


def test_timeout_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("HISCORE_TIMEOUT_SECONDS", "2.5")

    assert Settings(_env_file=None).hiscore_timeout_seconds == 2.5  # type: ignore[call-arg]


def test_ignored_users_comma_separated(monkeypatch) -> None:
    monkeypatch.setenv("BOT_IGNORED_USERS", "streamelements, nightbot,,moobot")

    settings = Settings(_env_file=None)  # type: ignore[call-arg]

    assert settings.bot_ignored_users == ["streamelements", "nightbot", "moobot"]


def test_ignored_users_json_array(monkeypatch) -> None:
    monkeypatch.setenv("BOT_IGNORED_USERS", '["fossabot"]')

    assert Settings(_env_file=None).bot_ignored_users == ["fossabot"]  # type: ignore[call-arg]
