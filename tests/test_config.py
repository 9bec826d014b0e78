from voting_node import config


def test_defaults_without_file(tmp_path, monkeypatch):
    monkeypatch.delenv("VOTING_ADMIN", raising=False)
    cfg = config.load_config(str(tmp_path))
    assert config.get_administrator(cfg) == "admin"
    assert config.get_caller_header(cfg) == "X-Principal"
    assert config.get_webhook_url(cfg) == ""
    assert config.get_bind_port(cfg) == 8000


def test_yaml_merges_over_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("VOTING_ADMIN", raising=False)
    (tmp_path / config.CONFIG_FILENAME).write_text(
        "election:\n  administrator: chair\ncors:\n  origins: http://localhost:5173\n"
    )
    cfg = config.load_config(str(tmp_path))
    assert config.get_administrator(cfg) == "chair"
    assert config.get_election_name(cfg) == "default"
    assert config.get_cors_origins(cfg) == ["http://localhost:5173"]


def test_env_overrides_yaml(tmp_path, monkeypatch):
    (tmp_path / config.CONFIG_FILENAME).write_text("election:\n  administrator: chair\n")
    monkeypatch.setenv("VOTING_ADMIN", "root")
    monkeypatch.setenv("VOTING_PORT", "9100")
    cfg = config.load_config(str(tmp_path))
    assert config.get_administrator(cfg) == "root"
    assert config.get_bind_port(cfg) == 9100


def test_bad_env_value_is_ignored(tmp_path, monkeypatch):
    monkeypatch.setenv("VOTING_PORT", "not-a-port")
    cfg = config.load_config(str(tmp_path))
    assert config.get_bind_port(cfg) == 8000


def test_broken_yaml_falls_back(tmp_path, monkeypatch):
    monkeypatch.delenv("VOTING_ADMIN", raising=False)
    (tmp_path / config.CONFIG_FILENAME).write_text("election: [unclosed\n")
    cfg = config.load_config(str(tmp_path))
    assert config.get_administrator(cfg) == "admin"


def test_defaults_not_mutated(tmp_path, monkeypatch):
    monkeypatch.delenv("VOTING_ADMIN", raising=False)
    cfg = config.load_config(str(tmp_path))
    cfg["election"]["administrator"] = "changed"
    assert config.get_administrator(config.load_config(str(tmp_path))) == "admin"
