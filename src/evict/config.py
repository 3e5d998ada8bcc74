from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Callable, Optional, Text

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = 'config'


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class Config:
    author: Optional[Text] = None

    @classmethod
    def load(cls, path: Path) -> Config:
        if not path.exists():
            return cls()
        try:
            with path.open('r', encoding='utf-8') as handle:
                raw = json.load(handle)
        except (OSError, ValueError) as error:
            logger.warning('Ignoring unreadable config %s: %s', path, error)
            return cls()
        if not isinstance(raw, dict):
            return cls()
        author = raw.get('author')
        return cls(author=author if isinstance(author, str) else None)

    def save(self, path: Path) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open('w', encoding='utf-8') as handle:
                json.dump(asdict(self), handle, indent=2)
                handle.write('\n')
        except OSError as error:
            raise ConfigError(f'Could not write {path}: {error}') from error


def resolve_author(path: Path, prompt: Callable[[], Text]) -> Text:
    config = Config.load(path)
    if config.author:
        return config.author
    author = prompt()
    replace(config, author=author).save(path)
    return author
