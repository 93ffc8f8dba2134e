"""Help text for the ``dirmon`` command."""

from __future__ import annotations

import shutil
import textwrap

DEFAULT_WIDTH = 80

_HEADER = "Usage: dirmon <path_of_directory_to_watch> <action_file>"

_DESCRIPTION = (
    "dirmon is a utility to watch changes in a directory subtree. "
    "It executes the action file specified with the second argument when it "
    "receives a change notification. Multiple notifications received within "
    "less than 5 second intervals are handled as a single notification so that "
    "it will not execute the action file too often. While notifications keep "
    "arriving, the action still runs at least once a minute."
)


def terminal_width() -> int:
    return shutil.get_terminal_size(fallback=(DEFAULT_WIDTH, 24)).columns or DEFAULT_WIDTH


def render_usage(width: int | None = None) -> str:
    """Return the usage text wrapped to *width* (the terminal width by default)."""
    columns = width if width is not None else terminal_width()
    # Leave the last column free so terminals do not auto-wrap.
    body = textwrap.wrap(_DESCRIPTION, width=max(columns - 1, 20))
    return "\n".join(["", _HEADER, "", *body, ""])
