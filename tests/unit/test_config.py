import pytest
from slack_agent.config import DEFAULT_DISALLOWED_TOOLS, load_settings
from slack_agent.errors import ConfigInvalid

def test_socket_mode_settings(clean_env, make_script):
    """
    WHY: Socket Mode only needs the bot and app tokens plus a valid agent script.
    HOW: Load settings with both tokens and an existing script path.
    EXPECTED: Loads; socket_mode True; defaults for tools and output format.
    """
    settings = load_settings(
        _env_file=None,
        SLACK_BOT_TOKEN="xoxb-123",
        SLACK_APP_TOKEN="xapp-123",
        AGENT_SCRIPT_PATH=make_script("echo hi"),
    )
    assert settings.socket_mode is True
    assert settings.DISALLOWED_TOOLS == DEFAULT_DISALLOWED_TOOLS
    assert settings.disallowed_tools[0] == "Bash"
    assert settings.AGENT_OUTPUT_FORMAT == "text"
    assert settings.AGENT_RESPONSE_MODE == "reply"

def test_missing_bot_token(clean_env, make_script):
    with pytest.raises(ConfigInvalid):
        load_settings(_env_file=None, SLACK_APP_TOKEN="xapp-123", AGENT_SCRIPT_PATH=make_script("true"))

def test_events_api_mode_requires_signing_secret(clean_env, make_script):
    """
    WHY: Without Socket Mode we receive HTTP requests that must be signature-checked.
    HOW: Load settings with no app token and no signing secret.
    EXPECTED: ConfigInvalid.
    """
    with pytest.raises(ConfigInvalid, match="SLACK_SIGNING_SECRET"):
        load_settings(_env_file=None, SLACK_BOT_TOKEN="xoxb-123", AGENT_SCRIPT_PATH=make_script("true"))

def test_missing_agent_script(clean_env):
    with pytest.raises(ConfigInvalid, match="agent script not found"):
        load_settings(
            _env_file=None,
            SLACK_BOT_TOKEN="xoxb-123",
            SLACK_APP_TOKEN="xapp-123",
            AGENT_SCRIPT_PATH="/nonexistent/path/to/script.sh",
        )

def test_unknown_output_format(clean_env, make_script):
    with pytest.raises(ConfigInvalid):
        load_settings(
            _env_file=None,
            SLACK_BOT_TOKEN="xoxb-123",
            SLACK_APP_TOKEN="xapp-123",
            AGENT_SCRIPT_PATH=make_script("true"),
            AGENT_OUTPUT_FORMAT="xml",
        )

def test_system_prompt_from_file(clean_env, make_script, tmp_path):
    prompt = tmp_path / "system_prompt.txt"
    prompt.write_text("You are a test assistant", encoding="utf-8")

    settings = load_settings(
        _env_file=None,
        SLACK_BOT_TOKEN="xoxb-123",
        SLACK_APP_TOKEN="xapp-123",
        AGENT_SCRIPT_PATH=make_script("true"),
        SYSTEM_PROMPT_PATH=str(prompt),
    )
    assert settings.DEFAULT_SYSTEM_PROMPT == "You are a test assistant"

def test_unreadable_system_prompt_file(clean_env, make_script, tmp_path):
    with pytest.raises(ConfigInvalid):
        load_settings(
            _env_file=None,
            SLACK_BOT_TOKEN="xoxb-123",
            SLACK_APP_TOKEN="xapp-123",
            AGENT_SCRIPT_PATH=make_script("true"),
            SYSTEM_PROMPT_PATH=str(tmp_path / "missing.txt"),
        )

def test_env_variables_are_read(clean_env, make_script):
    clean_env.setenv("SLACK_BOT_TOKEN", "xoxb-env")
    clean_env.setenv("SLACK_APP_TOKEN", "xapp-env")
    clean_env.setenv("AGENT_SCRIPT_PATH", make_script("true"))
    clean_env.setenv("CLAUDE_EXTRA_ARGS", "--model  sonnet")
    clean_env.setenv("DISALLOWED_TOOLS", "")

    settings = load_settings(_env_file=None)

    assert settings.SLACK_BOT_TOKEN == "xoxb-env"
    assert settings.extra_args == ["--model", "sonnet"]
    assert settings.disallowed_tools == []
