"""Client for the external AI agent process.

The agent is any executable (usually a wrapper around the `claude` CLI) that
takes the prompt as its last argument and answers on stdout. Each Slack thread
gets its own session directory so the agent can keep conversation state there.

Two response modes are supported, chosen per deployment:
- reply: stdout is collected and returned to the dispatcher, which posts it.
- delegate: stdout is piped into a poster command that writes to Slack itself;
  generate() then returns an empty response.
"""

import os
import subprocess
from pathlib import Path
from typing import Dict, List, Optional
from ..config import Settings
from ..domain.message import DispatchResult, InboundMessage
from ..errors import EmptyResponse, GenerationError, ProcessFailure, ScriptNotFound
from ..log import get_logger
from .stream import collect_stream_text

logger = get_logger("agent")

def mask_token(token: str) -> str:
    if len(token) <= 8:
        return "***"
    return token[:4] + "..." + token[-4:]

class AgentClient:
    def __init__(
        self,
        script_path: str,
        system_prompt: str = "",
        extra_args: Optional[List[str]] = None,
        disallowed_tools: Optional[List[str]] = None,
        sessions_dir: str = "sessions",
        output_format: str = "text",
        response_mode: str = "reply",
        poster_command: str = "claude-posts",
        bot_token: str = "",
    ):
        self.script_path = script_path
        self.system_prompt = system_prompt
        self.extra_args = list(extra_args or [])
        self.disallowed_tools = list(disallowed_tools or [])
        self.sessions_dir = Path(sessions_dir)
        self.output_format = output_format
        self.response_mode = response_mode
        self.poster_command = poster_command
        self.bot_token = bot_token

    @classmethod
    def from_settings(cls, settings: Settings) -> "AgentClient":
        return cls(
            script_path=settings.AGENT_SCRIPT_PATH,
            system_prompt=settings.DEFAULT_SYSTEM_PROMPT,
            extra_args=settings.extra_args,
            disallowed_tools=settings.disallowed_tools,
            sessions_dir=settings.SESSIONS_DIR,
            output_format=settings.AGENT_OUTPUT_FORMAT,
            response_mode=settings.AGENT_RESPONSE_MODE,
            poster_command=settings.POSTER_COMMAND,
            bot_token=settings.SLACK_BOT_TOKEN,
        )

    @property
    def delegates_posting(self) -> bool:
        return self.response_mode == "delegate"

    def generate(self, prompt: str, message: InboundMessage) -> DispatchResult:
        """
        Run the agent for one message.
        Failures are returned in DispatchResult.error, never raised.
        """
        try:
            return DispatchResult(response=self.run(prompt, message))
        except GenerationError as e:
            return DispatchResult(error=e)

    def run(self, prompt: str, message: InboundMessage) -> str:
        if not Path(self.script_path).is_file():
            raise ScriptNotFound(self.script_path)

        session_dir = self.session_dir(message.thread_ts)
        argv = self.build_args(prompt)
        env = self.build_env(prompt, message)

        logger.info(f"Executing agent: {self.script_path} (cwd={session_dir})")
        logger.debug(f"Agent prompt: '{prompt}'")

        if self.delegates_posting:
            self._run_delegated(argv, env, session_dir, message)
            return ""
        return self._run_reply(argv, env, session_dir)

    def session_dir(self, thread_ts: str) -> Path:
        path = self.sessions_dir / thread_ts if thread_ts else self.sessions_dir
        # exist_ok keeps concurrent dispatches for one thread from racing.
        path.mkdir(parents=True, exist_ok=True)
        return path

    def build_args(self, prompt: str) -> List[str]:
        return [self.script_path, *self.extra_args, prompt]

    def build_env(self, prompt: str, message: InboundMessage) -> Dict[str, str]:
        env = dict(os.environ)
        if self.system_prompt:
            env["SYSTEM_PROMPT"] = self.system_prompt
        if self.disallowed_tools:
            env["DISALLOWED_TOOLS"] = ",".join(self.disallowed_tools)
        env["SLACK_AGENT_PROMPT"] = prompt
        env["SLACK_CHANNEL_ID"] = message.channel_id
        env["SLACK_THREAD_TS"] = message.thread_ts
        return env

    def _run_reply(self, argv: List[str], env: Dict[str, str], cwd: Path) -> str:
        try:
            proc = subprocess.run(
                argv,
                cwd=cwd,
                env=env,
                capture_output=True,
                text=True,
                errors="replace",
            )
        except FileNotFoundError as e:
            raise ScriptNotFound(self.script_path) from e
        except OSError as e:
            raise ProcessFailure(self.script_path, -1, str(e)) from e

        if proc.returncode != 0:
            logger.error(f"Agent stderr: {proc.stderr.strip()}")
            raise ProcessFailure(self.script_path, proc.returncode, proc.stderr)

        if self.output_format == "stream-json":
            response = collect_stream_text(proc.stdout.splitlines())
        else:
            response = proc.stdout
        response = response.strip()
        if not response:
            raise EmptyResponse()
        return response

    def _run_delegated(self, argv: List[str], env: Dict[str, str], cwd: Path, message: InboundMessage):
        poster_args = [
            self.poster_command,
            f"--bot-token={self.bot_token}",
            f"--channel-id={message.channel_id}",
            f"--thread-ts={message.thread_ts}",
        ]
        logger.info(
            f"Piping agent output into {self.poster_command} "
            f"(bot-token={mask_token(self.bot_token)}, channel={message.channel_id}, thread={message.thread_ts})"
        )

        try:
            agent = subprocess.Popen(
                argv, cwd=cwd, env=env,
                stdout=subprocess.PIPE, stderr=subprocess.PIPE,
                text=True, errors="replace",
            )
        except FileNotFoundError as e:
            raise ScriptNotFound(self.script_path) from e
        except OSError as e:
            raise ProcessFailure(self.script_path, -1, str(e)) from e

        try:
            poster = subprocess.Popen(poster_args, cwd=cwd, stdin=agent.stdout)
        except OSError as e:
            agent.kill()
            agent.communicate()
            raise ProcessFailure(self.poster_command, -1, str(e)) from e

        # Poster owns the read end now; closing ours lets the agent see SIGPIPE.
        agent.stdout.close()
        try:
            stderr = agent.stderr.read()
            agent.stderr.close()
        finally:
            agent_rc = agent.wait()
            poster_rc = poster.wait()

        if agent_rc != 0:
            logger.error(f"Agent stderr: {stderr.strip()}")
            raise ProcessFailure(self.script_path, agent_rc, stderr)
        if poster_rc != 0:
            raise ProcessFailure(self.poster_command, poster_rc)
