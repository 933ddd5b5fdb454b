import pytest
from loguru import logger

from feedbeep.config import Settings, validate_config
from feedbeep.exceptions import ConfigurationError
from feedbeep.services.logger import setup_logging


def make_settings(**overrides):
    return Settings(_env_file=None, **overrides)


class TestValidateConfig:
    def test_defaults_are_valid(self):
        validate_config(make_settings())

    def test_no_provider_is_fatal(self):
        cfg = make_settings(NEWSDATA_API_KEY=None, GNEWS_API_KEY=None, RSS_FEEDS=[])
        with pytest.raises(ConfigurationError, match="no feed provider"):
            validate_config(cfg)

    def test_blank_llm_settings_are_fatal(self):
        cfg = make_settings(OLLAMA_BASE_URL=" ", OLLAMA_MODEL="")
        with pytest.raises(ConfigurationError) as exc:
            validate_config(cfg)
        assert "OLLAMA_BASE_URL" in str(exc.value)
        assert "OLLAMA_MODEL" in str(exc.value)

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("ENFORCE_QUALITY_STANDARDS", "true")
        monkeypatch.setenv("MAX_ARTICLES_PER_FETCH", "25")
        cfg = make_settings()
        assert cfg.ENFORCE_QUALITY_STANDARDS is True
        assert cfg.MAX_ARTICLES_PER_FETCH == 25

    def test_db_path(self, tmp_path):
        assert make_settings(DATA_DIR=tmp_path).db_path == tmp_path / "articles.db"


class TestLogging:
    def test_file_sink_written(self, tmp_path):
        cfg = make_settings(DATA_DIR=tmp_path / "data", LOG_FILE_ENABLED=True)
        log = setup_logging(cfg)
        log.info("hello from the file sink")
        # removing the sinks closes and flushes the log file
        logger.remove()
        assert "hello from the file sink" in (tmp_path / "data" / "pipeline.log").read_text()

    def test_file_sink_disabled(self, tmp_path):
        cfg = make_settings(DATA_DIR=tmp_path / "data", LOG_FILE_ENABLED=False)
        setup_logging(cfg)
        try:
            assert not (tmp_path / "data").exists()
        finally:
            logger.remove()
