from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, ValidationError
from functools import lru_cache
from pathlib import Path
from typing import List, Literal
from .errors import ConfigInvalid

DEFAULT_DISALLOWED_TOOLS = (
    "Bash,Edit,MultiEdit,Write,NotebookRead,NotebookEdit,WebFetch,TodoRead,TodoWrite,WebSearch"
)

DEFAULT_SYSTEM_PROMPT = """あなたは親切で有能なアシスタントです。ユーザーの質問や要望に対して、丁寧かつ適切に応答してください。

応答の際は以下の点に注意してください：
1. 明確で分かりやすい日本語を使用する
2. 必要に応じて箇条書きや見出しを使用して情報を整理する
3. 専門用語を使用する場合は適切な説明を加える
4. ユーザーの質問意図を理解し、的確な情報を提供する
5. 不確かな情報は提供せず、その旨を伝える"""

DEGRADED_MESSAGE = "申し訳ございません。応答の生成中にエラーが発生しました。"

class Settings(BaseSettings):
    SLACK_BOT_TOKEN: str = Field(..., description="Slack Bot User OAuth Token")
    SLACK_APP_TOKEN: str = Field("", description="Slack App-Level Token (enables Socket Mode)")
    SLACK_SIGNING_SECRET: str = Field("", description="Signing secret (required for Events API mode)")
    PORT: int = 3000

    AGENT_SCRIPT_PATH: str = Field("/usr/local/bin/start_agent.sh", description="Agent executable")
    CLAUDE_EXTRA_ARGS: str = Field("", description="Extra arguments, whitespace separated")
    DISALLOWED_TOOLS: str = Field(DEFAULT_DISALLOWED_TOOLS, description="Comma separated tool names")
    SYSTEM_PROMPT_PATH: str = ""
    DEFAULT_SYSTEM_PROMPT: str = DEFAULT_SYSTEM_PROMPT
    AGENT_OUTPUT_FORMAT: Literal["text", "stream-json"] = "text"
    AGENT_RESPONSE_MODE: Literal["reply", "delegate"] = "reply"
    POSTER_COMMAND: str = "claude-posts"
    SESSIONS_DIR: str = "sessions"

    DEGRADED_MESSAGE: str = DEGRADED_MESSAGE
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def socket_mode(self) -> bool:
        return bool(self.SLACK_APP_TOKEN)

    @property
    def extra_args(self) -> List[str]:
        return self.CLAUDE_EXTRA_ARGS.split()

    @property
    def disallowed_tools(self) -> List[str]:
        return [t.strip() for t in self.DISALLOWED_TOOLS.split(",") if t.strip()]

    def validate_runtime(self):
        """Checks that depend on more than one field or on the filesystem."""
        if not self.SLACK_BOT_TOKEN:
            raise ConfigInvalid("SLACK_BOT_TOKEN is required")
        if not self.socket_mode and not self.SLACK_SIGNING_SECRET:
            raise ConfigInvalid("SLACK_SIGNING_SECRET is required for Events API mode")
        if not Path(self.AGENT_SCRIPT_PATH).is_file():
            raise ConfigInvalid(f"agent script not found: {self.AGENT_SCRIPT_PATH}")
        if self.SYSTEM_PROMPT_PATH:
            try:
                self.DEFAULT_SYSTEM_PROMPT = Path(self.SYSTEM_PROMPT_PATH).read_text(encoding="utf-8")
            except OSError as e:
                raise ConfigInvalid(f"error reading system prompt file: {e}") from e

def load_settings(**overrides) -> Settings:
    """
    Build and validate settings from the environment / .env file.
    Any problem is reported as ConfigInvalid so entry points can fail fast.
    """
    try:
        settings = Settings(**overrides)
    except ValidationError as e:
        raise ConfigInvalid(str(e)) from e
    settings.validate_runtime()
    return settings

@lru_cache()
def get_settings() -> Settings:
    return load_settings()
