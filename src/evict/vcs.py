import logging
import subprocess
from pathlib import Path
from typing import Optional, Text

logger = logging.getLogger(__name__)


def current_branch(cwd: Optional[Path] = None) -> Optional[Text]:
    """Branch checked out in the working copy, None when there is none."""
    try:
        result = subprocess.run(
            ['git', 'rev-parse', '--abbrev-ref', 'HEAD'],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as error:
        logger.debug('Could not run git: %s', error)
        return None
    if result.returncode != 0:
        return None

    branch = result.stdout.strip()
    if not branch or branch == 'HEAD':
        return None
    return branch
