from typing import Optional, Text

import click


def compose(template: Text = '') -> Optional[Text]:
    """Text written in the user's editor, None if nothing was written."""
    text = click.edit(template, extension='.txt', require_save=True)
    if text is None or not text.strip():
        return None
    return text
