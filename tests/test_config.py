from playground.config import DEFAULT_PULL_TIMEOUT_MS, load_settings


def test_defaults(monkeypatch):
    for key in (
        "PLAYGROUND_RUNTIME",
        "PLAYGROUND_PULL_TIMEOUT_MS",
        "PLAYGROUND_TEMP_ROOT",
        "PLAYGROUND_MOUNT_PATH",
        "PLAYGROUND_MERGE_STREAMS",
    ):
        monkeypatch.delenv(key, raising=False)

    settings = load_settings()

    assert settings.runtime == "docker"
    assert settings.pull_timeout_ms == DEFAULT_PULL_TIMEOUT_MS
    assert settings.temp_root is None
    assert settings.mount_path == "/playground"
    assert settings.merge_streams is False


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("PLAYGROUND_RUNTIME", "podman")
    monkeypatch.setenv("PLAYGROUND_PULL_TIMEOUT_MS", "1234")
    monkeypatch.setenv("PLAYGROUND_TEMP_ROOT", str(tmp_path))
    monkeypatch.setenv("PLAYGROUND_MERGE_STREAMS", "true")
    monkeypatch.setenv("PLAYGROUND_LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.runtime == "podman"
    assert settings.pull_timeout_ms == 1234
    assert settings.temp_root == str(tmp_path)
    assert settings.merge_streams is True
    assert settings.log_level == "DEBUG"


def test_invalid_numbers_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("PLAYGROUND_PULL_TIMEOUT_MS", "-5")
    monkeypatch.setenv("PLAYGROUND_KILL_TIMEOUT_MS", "soon")

    settings = load_settings()

    assert settings.pull_timeout_ms == DEFAULT_PULL_TIMEOUT_MS
    assert settings.kill_timeout_ms == 10000


def test_port_from_environment(monkeypatch):
    monkeypatch.setenv("PORT", "9123")

    assert load_settings().port == 9123
