import json

from entitygen.config import config_path, load_config


def test_defaults(tmp_path):
    cfg = load_config(tmp_path)
    assert cfg.project_root == tmp_path.resolve()
    assert cfg.source_dir == "src/main/java"
    assert cfg.default_package == "com.example.generated"
    assert cfg.api_prefix == "/api"
    assert cfg.verify_syntax is True


def test_config_file_then_overrides(tmp_path):
    path = config_path(tmp_path)
    path.parent.mkdir(parents=True)
    path.write_text(
        json.dumps({"apiPrefix": "/v1", "default_package": "org.demo", "verifySyntax": False, "theme": "dark"}),
        encoding="utf-8",
    )
    cfg = load_config(tmp_path, api_prefix=None, default_package="org.override")
    assert cfg.api_prefix == "/v1"
    assert cfg.default_package == "org.override"
    assert cfg.verify_syntax is False


def test_broken_config_file_is_ignored(tmp_path):
    path = config_path(tmp_path)
    path.parent.mkdir(parents=True)
    path.write_text("{not json", encoding="utf-8")
    assert load_config(tmp_path).api_prefix == "/api"


def test_verify_syntax_accepts_string_spellings(tmp_path):
    path = config_path(tmp_path)
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps({"verifySyntax": "false"}), encoding="utf-8")
    assert load_config(tmp_path).verify_syntax is False

    path.write_text(json.dumps({"verifySyntax": "maybe", "apiPrefix": "/v3"}), encoding="utf-8")
    cfg = load_config(tmp_path)
    assert cfg.verify_syntax is True
    assert cfg.api_prefix == "/v3"
