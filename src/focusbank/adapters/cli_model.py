"""Command-line model adapter - subprocess wrapper for a local LLM CLI."""

import logging
import shutil
import subprocess

logger = logging.getLogger(__name__)


class CLIModelService:
    """
    Subprocess model adapter.

    Implements LLMService protocol. Runs the configured command with the
    prompt as its final argument and returns stdout.
    """

    def __init__(
        self,
        command: list[str] | None = None,
        timeout: int = 300,  # 5 minutes default
    ):
        self.command = list(command) if command else ["claude", "-p"]
        self.timeout = timeout

    def _resolve_command(self) -> list[str]:
        binary = shutil.which(self.command[0])
        if binary is None:
            raise RuntimeError(f"Model command not found: {self.command[0]}")
        return [binary, *self.command[1:]]

    def generate(self, prompt: str) -> str:
        """Generate text from a prompt. Returns complete response."""
        cmd = self._resolve_command()
        try:
            proc = subprocess.run(
                [*cmd, prompt],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            raise RuntimeError(f"Model command timed out after {self.timeout}s")

        if proc.returncode != 0:
            logger.error(f"Model command failed: {proc.stderr}")
            raise RuntimeError(f"Model command failed: {proc.stderr.strip()}")
        return proc.stdout
