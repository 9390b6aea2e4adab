import pytest

from rship._src.config import RshipConfig, load_config
from rship._src.exceptions import ConfigurationError


def test_defaults_without_config_file():
    assert load_config(environ={}) == RshipConfig()


def test_reads_yaml_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("rscript: /opt/R/4.4.0/bin/Rscript\ngithub_helper: remotes\n")

    config = load_config(str(path), environ={})

    assert config.rscript == "/opt/R/4.4.0/bin/Rscript"
    assert config.github_helper == "remotes"
    assert config.file_prefix == "Rpackages"


def test_environment_overrides_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("cran_mirror: https://cran.example.org\noutput_dir: /records\n")

    config = load_config(str(path), environ={"RSHIP_OUTPUT_DIR": "/elsewhere"})

    assert config.cran_mirror == "https://cran.example.org"
    assert config.output_dir == "/elsewhere"


def test_config_path_from_environment(tmp_path):
    path = tmp_path / "custom.yaml"
    path.write_text("log_level: DEBUG\n")

    config = load_config(environ={"RSHIP_CONFIG": str(path)})

    assert config.log_level == "DEBUG"


def test_default_location_is_read(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    config_dir = tmp_path / ".config" / "rship"
    config_dir.mkdir(parents=True)
    (config_dir / "config.yaml").write_text("file_prefix: lib\n")

    assert load_config(environ={}).file_prefix == "lib"


@pytest.mark.parametrize(
    "content",
    [
        "rscript: [unclosed\n",
        "- just\n- a list\n",
        "unknown_setting: 1\n",
        "log_level: LOUD\n",
    ],
)
def test_invalid_config_file(tmp_path, content):
    path = tmp_path / "config.yaml"
    path.write_text(content)

    with pytest.raises(ConfigurationError):
        load_config(str(path), environ={})


def test_missing_explicit_config_file(tmp_path):
    with pytest.raises(ConfigurationError):
        load_config(str(tmp_path / "nope.yaml"), environ={})


def test_log_level_is_normalized():
    assert load_config(environ={"RSHIP_LOG_LEVEL": "debug"}).log_level == "DEBUG"


def test_unknown_log_level_from_environment():
    with pytest.raises(ConfigurationError, match="log_level"):
        load_config(environ={"RSHIP_LOG_LEVEL": "chatty"})
