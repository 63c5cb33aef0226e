from __future__ import annotations
# buyictbot/services/notifier.py
import shlex
import subprocess
import sys
from typing import Optional

from buyictbot.utils.config import Config
from buyictbot.utils.logger import logger


class Notifier:
    """
    Audible "run finished" signal for an operator at the terminal.
    - If NOTIFY_SOUND_CMD is set (e.g. 'afplay /System/Library/Sounds/Glass.aiff'),
      launches it detached and does not wait for it.
    - Else rings the terminal bell.
    Never raises: a missing player must not fail a run that already wrote its data.
    """

    def __init__(self, cfg: Config):
        self.enabled = cfg.notify_sound
        self._cmd: Optional[str] = cfg.notify_sound_cmd

        if not self.enabled:
            logger.debug("Notifier: completion sound disabled")
        elif self._cmd:
            logger.debug(f"Notifier: sound command '{self._cmd}'")

    def done(self) -> None:
        if not self.enabled:
            return
        if self._cmd:
            try:
                subprocess.Popen(
                    shlex.split(self._cmd),
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                    start_new_session=True,
                )
            except (OSError, ValueError) as e:
                logger.warning(f"Completion sound failed: {e}")
            return
        try:
            sys.stdout.write("\a")
            sys.stdout.flush()
        except (OSError, ValueError) as e:
            logger.warning(f"Completion bell failed: {e}")
