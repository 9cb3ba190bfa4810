import html
from typing import Optional
import bleach


def clean_text(value: Optional[str]) -> str:
    """Clean a user-supplied free-text field before it is stored.

    - Removes NULL bytes
    - Strips HTML tags using bleach.clean(..., strip=True)
    - Undoes bleach's entity escaping, since the value is stored as plain
      text and escaped again by whoever renders it
    - Trims whitespace
    """
    if value is None:
        return ""
    val = value.replace("\x00", "")
    val = bleach.clean(val, tags=set(), strip=True)
    return html.unescape(val).strip()
