"""Working copy checks run before delivering a release."""

import logging
import subprocess
from pathlib import Path
from typing import Final

from .config import IGNORE_REPOSITORY_STATE, is_true
from .exceptions import DirtyRepositoryError
from .types import Command, CommandRunner, ConfigProvider

logger = logging.getLogger(__name__)

GIT_STATUS: Final[Command] = ("git", "status")
CLEAN_MARKER: Final = "nothing to commit"


def check_clean_repo(
    config: ConfigProvider,
    cwd: Path | None = None,
    runner: CommandRunner = subprocess.run,
) -> None:
    """Fail if the git working copy has uncommitted changes.

    The check is skipped when ``IGNORE_REPOSITORY_STATE`` is true or when git
    cannot be run.

    Args:
        config: Configuration provider.
        cwd: Directory of the working copy. Defaults to the current directory.
        runner: Function used to run ``git status``.

    Raises:
        DirtyRepositoryError: If the working copy is not clean.
    """
    if is_true(config, IGNORE_REPOSITORY_STATE):
        logger.info("%s is set, skipping repository check", IGNORE_REPOSITORY_STATE)
        return

    try:
        result = runner(
            list(GIT_STATUS), cwd=cwd, capture_output=True, text=True, check=False
        )
    except OSError:
        logger.warning("git executable not found, skipping repository check")
        return

    if CLEAN_MARKER not in (result.stdout or ""):
        raise DirtyRepositoryError()
