from chat_core.config.settings import Settings


def test_defaults(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("BACKEND_BASE_URL", raising=False)
    monkeypatch.delenv("CHAT_CONFIG_FILE", raising=False)
    s = Settings(_env_file=None)
    assert s.default_model == "gpt-4.1-mini"
    assert s.stream_encoding == "utf-8"
    assert s.openai_api_key is None


def test_env_and_yaml_sources(monkeypatch, tmp_path):
    cfg = tmp_path / "chat.yaml"
    cfg.write_text("backend_base_url: http://yaml-host:9000/\ndefault_model: gpt-4.1-nano\n", encoding="utf-8")
    monkeypatch.setenv("CHAT_CONFIG_FILE", str(cfg))
    monkeypatch.setenv("DEFAULT_MODEL", "gpt-3.5-turbo")
    monkeypatch.setenv("OPENAI_API_KEY", "   ")
    s = Settings(_env_file=None)
    # 环境变量优先于 config.yaml
    assert s.default_model == "gpt-3.5-turbo"
    assert s.backend_base_url == "http://yaml-host:9000"
    assert s.openai_api_key is None
