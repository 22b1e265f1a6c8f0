"""Error taxonomy for the dispatch pipeline.

Only ConfigInvalid is fatal. Generation errors are turned into the degraded
message by the dispatcher; sink failures are logged and dropped.
"""


class SlackAgentError(Exception):
    pass


class ConfigInvalid(SlackAgentError):
    pass


class GenerationError(SlackAgentError):
    """Base class for failures of the external agent process."""


class ScriptNotFound(GenerationError):
    def __init__(self, path: str):
        super().__init__(f"agent script not found: {path}")
        self.path = path


class ProcessFailure(GenerationError):
    def __init__(self, command: str, returncode: int, stderr: str = ""):
        super().__init__(f"{command} exited with status {returncode}")
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


class EmptyResponse(GenerationError):
    def __init__(self):
        super().__init__("empty response from agent")


class SinkPostFailure(SlackAgentError):
    def __init__(self, channel_id: str, error: str):
        super().__init__(f"failed to post message to {channel_id}: {error}")
        self.channel_id = channel_id
        self.error = error
