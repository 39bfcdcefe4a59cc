import pytest

from gorder.config import Config, load_config

YAML_TEXT = """\
order:
  service-name: order
  grpc-addr: 127.0.0.1:5002
rabbitmq:
  host: localhost
  port: 5672
Consul:
  Addr: 127.0.0.1:8500
debug: true
"""


@pytest.fixture
def config_dir(tmp_path):
    (tmp_path / "global.yaml").write_text(YAML_TEXT, encoding="utf-8")
    return tmp_path


def test_load_and_read_dotted_keys(config_dir):
    config = load_config("global", [config_dir])
    assert config.get_str("order.service-name") == "order"
    assert config.get_str("rabbitmq.port") == "5672"
    assert config.get("rabbitmq.port") == 5672


def test_keys_are_case_insensitive(config_dir):
    config = load_config("global", [config_dir])
    assert config.get_str("consul.addr") == "127.0.0.1:8500"
    assert config.get_str("CONSUL.ADDR") == "127.0.0.1:8500"


def test_bool_and_missing_values(config_dir):
    config = load_config("global", [config_dir])
    assert config.get_str("debug") == "true"
    assert config.get_str("nope.missing") == ""
    assert config.get("nope.missing", "dflt") == "dflt"
    assert config.get_str("order") == ""


def test_sub_returns_nested_section(config_dir):
    config = load_config("global", [config_dir])
    assert config.sub("order").get_str("grpc-addr") == "127.0.0.1:5002"


def test_sub_missing_raises(config_dir):
    config = load_config("global", [config_dir])
    with pytest.raises(KeyError):
        config.sub("stock")
    with pytest.raises(KeyError):
        config.sub("debug")


def test_bound_env_overrides(config_dir, monkeypatch):
    monkeypatch.setenv("STRIPE_KEY", "placeholder")
    config = load_config("global", [config_dir])
    assert config.get_str("stripe-key") == "placeholder"


def test_empty_env_is_ignored(config_dir, monkeypatch):
    monkeypatch.setenv("RABBITMQ.HOST", "")
    config = load_config("global", [config_dir])
    assert config.get_str("rabbitmq.host") == "localhost"


def test_automatic_env_overrides_file(config_dir, monkeypatch):
    monkeypatch.setenv("RABBITMQ.HOST", "broker.example.com")
    config = load_config("global", [config_dir])
    assert config.get_str("rabbitmq.host") == "broker.example.com"


def test_plain_config_ignores_environment(monkeypatch):
    monkeypatch.setenv("A.B", "from-env")
    assert Config({"a": {"b": "from-file"}}).get_str("a.b") == "from-file"


def test_later_search_path_used(tmp_path, config_dir):
    empty = tmp_path / "empty"
    empty.mkdir()
    config = load_config("global", [empty, config_dir])
    assert config.get_str("order.service-name") == "order"


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config("global", [tmp_path])