from pathlib import Path

from live_browser_agent.config import ServerConfig, load_config


def test_defaults_match_agent_limits():
    config = ServerConfig()

    assert config.agent.max_steps == 10
    assert config.agent.settle_delay == 0.5
    assert config.agent.click_settle_timeout == 3.0
    assert config.frames.interval_ms == 66
    assert config.browser.headless is True


def test_load_config_reads_env_file(tmp_path: Path) -> None:
    env_path = tmp_path / ".env"
    env_path.write_text(
        "\n".join(
            [
                "LIVE_BROWSER_AGENT_LLM__PROVIDER=mock",
                "LIVE_BROWSER_AGENT_AGENT__MAX_STEPS=4",
                "LIVE_BROWSER_AGENT_PORT=4000",
            ]
        )
    )

    config = load_config(env_file=env_path)

    assert config.llm.provider == "mock"
    assert config.agent.max_steps == 4
    assert config.port == 4000


def test_load_config_prioritises_overrides(tmp_path: Path) -> None:
    env_path = tmp_path / ".env"
    env_path.write_text(
        "\n".join(
            [
                "LIVE_BROWSER_AGENT_LLM__PROVIDER=mock",
                "LIVE_BROWSER_AGENT_LLM__MODEL=env-model",
            ]
        )
    )

    config_path = tmp_path / "server.yaml"
    config_path.write_text(
        "\n".join(
            [
                "llm:",
                "  model: file-model",
                "frames:",
                "  quality: 40",
            ]
        )
    )

    config = load_config(config_path, env_file=env_path, agent={"max_steps": 3})

    assert config.llm.model == "file-model"
    assert config.llm.provider == "mock"
    assert config.frames.quality == 40
    assert config.agent.max_steps == 3
