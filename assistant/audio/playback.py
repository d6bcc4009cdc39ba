"""
Audio output through the system player.

Plays an encoded audio file (MP3) by spawning the configured player
command (sox `play` by default) as a subprocess and waiting for it.

Playback errors are logged, never raised.
"""

from __future__ import annotations

import asyncio
import shlex
from pathlib import Path

from constants import AUDIO_PLAYER_COMMAND
from observability.logger import log_event


def parse_player_command(command: str) -> list[str]:
    """
    Split a player command line into argv.

    Raises:
        ValueError if the command is empty or not valid shell syntax.
    """
    argv = shlex.split(command)
    if not argv:
        raise ValueError("player command must not be empty")
    return argv


class SystemAudioPlayer:
    """
    Plays files with an external command: `<command...> <path>`.
    """

    def __init__(self, *, command: str = AUDIO_PLAYER_COMMAND) -> None:
        self._argv = parse_player_command(command)

    async def play(self, path: Path) -> bool:
        """
        Play `path` to completion.

        Returns True on success, False if the player failed to run or
        exited non-zero.
        """
        try:
            proc = await asyncio.create_subprocess_exec(
                *self._argv,
                str(path),
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            log_event({
                "level": "ERROR",
                "event_type": "PLAYBACK_FAILED",
                "player": self._argv[0],
                "error": f"{type(exc).__name__}: {exc}",
            })
            return False

        try:
            _, stderr = await proc.communicate()
        except asyncio.CancelledError:
            if proc.returncode is None:
                proc.kill()
            raise

        if proc.returncode != 0:
            log_event({
                "level": "ERROR",
                "event_type": "PLAYBACK_FAILED",
                "player": self._argv[0],
                "returncode": proc.returncode,
                "stderr": (stderr or b"").decode(errors="replace")[-500:],
            })
            return False

        return True
