"""Fixed heuristics mapping focused-window titles to activity labels."""

from __future__ import annotations

import re

LABEL_SEPARATOR = " / "

_GITHUB_PAGE_PATTERN = re.compile(
    r"(?:\[\d{1,2}%\] )?(.*) · (Pull Request|Issue|Discussion) (#\d*) · (.*) - qutebrowser"
)
_QUTEBROWSER_PATTERN = re.compile(r"(?:\[\d{1,2}%\] )?(.*) - (qutebrowser)")
_TMUX_PATTERN = re.compile(r"(.*) \(tmux:(.*)/(.*)\)")


def classify_window_title(title: str) -> tuple[str, ...]:
    """Return the activity path for a window title, outermost part first."""
    if "Notifications - qutebrowser" in title:
        return ("Github", "Notifications")

    github = _GITHUB_PAGE_PATTERN.search(title)
    if github:
        page, kind, number, repo = github.groups()
        return ("Github", repo, kind, f"{number} {page}")

    qute = _QUTEBROWSER_PATTERN.search(title)
    if qute:
        return (qute.group(2), qute.group(1))

    tmux = _TMUX_PATTERN.search(title)
    if tmux:
        command, session, window = tmux.groups()
        return ("tmux", session, window, command)

    return (title,)


def activity_label(title: str) -> str:
    """Collapse the activity path of `title` into a single label."""
    return LABEL_SEPARATOR.join(part.strip() for part in classify_window_title(title))
