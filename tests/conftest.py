import os
import stat
import pytest
from unittest.mock import MagicMock
from slack_agent.agent.client import AgentClient
from slack_agent.dispatcher import Dispatcher
from slack_agent.domain.bot import BotIdentity
from slack_agent.domain.message import InboundMessage
from slack_agent.store.dedup import DedupGuard

@pytest.fixture
def make_script(tmp_path):
    """
    Writes an executable bash script into tmp_path and returns its path.
    Used as a stand-in for the real agent CLI.
    """
    def _make(body: str, name: str = "agent.sh") -> str:
        path = tmp_path / name
        path.write_text("#!/bin/bash\n" + body + "\n")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(path)
    return _make

@pytest.fixture
def sessions_dir(tmp_path):
    return str(tmp_path / "sessions")

@pytest.fixture
def message():
    return InboundMessage(user_id="U1", channel_id="C1", text="<@BOT> hi", thread_ts="111.222")

@pytest.fixture
def mock_sink():
    return MagicMock()

@pytest.fixture
def make_dispatcher(mock_sink, make_script, sessions_dir):
    """Dispatcher for bot `BOT` backed by a script agent and a mocked Slack sink."""
    def _make(script_body: str = 'echo "hello"', **agent_kwargs) -> Dispatcher:
        agent = AgentClient(
            script_path=make_script(script_body),
            sessions_dir=sessions_dir,
            **agent_kwargs,
        )
        return Dispatcher(
            bot=BotIdentity(user_id="BOT"),
            agent=agent,
            sink=mock_sink,
            guard=DedupGuard(),
            degraded_message="DEGRADED",
        )
    return _make

@pytest.fixture
def clean_env(monkeypatch):
    """Remove Slack/agent variables that could leak in from the developer's shell."""
    for key in list(os.environ):
        if key.startswith(("SLACK_", "AGENT_", "SYSTEM_PROMPT", "DISALLOWED_TOOLS", "CLAUDE_")):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch
