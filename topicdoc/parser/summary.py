"""Summary extraction from formatted bodies."""

from __future__ import annotations

import re
from typing import Optional

_BODY_SUMMARY = re.compile(r"^(?:<h>[^<]*</h>)?<p>(.*?)(</p>|[.!?](?:[)}' ]|&quot;|&gt;))")
_DESCRIPTION_SUMMARY = re.compile(r"^(.*?)($|[.!?](?:[)}' ]|&quot;|&gt;))")


def summary_from_body(body: Optional[str]) -> Optional[str]:
    """Return the first sentence of the leading paragraph.

    A single heading before the paragraph is tolerated. The closing
    punctuation is part of the summary unless the paragraph simply ended.
    """
    if not body:
        return None
    match = _BODY_SUMMARY.match(body)
    if match is None:
        return None
    summary = match.group(1)
    if match.group(2) != "</p>":
        summary += match.group(2)
    return summary


def summary_from_description_list(description: Optional[str]) -> Optional[str]:
    """Return the first sentence of a description list entry (``<dd>`` content)."""
    if description is None:
        return None
    match = _DESCRIPTION_SUMMARY.match(description)
    if match is None:
        return None
    return match.group(1) + match.group(2)


__all__ = ["summary_from_body", "summary_from_description_list"]
