"""Representative image extraction for feed items."""

import re
from typing import Optional

from .models import FeedItem

_IMG_SRC = re.compile(r"""<img\b[^>]*?\bsrc\s*=\s*["']?([^"'\s>]+)["']?[^>]*>""", re.IGNORECASE)


def find_first_img_src(html: Optional[str]) -> Optional[str]:
    """Return the ``src`` of the first ``<img>`` tag in ``html``."""
    if not html:
        return None
    match = _IMG_SRC.search(html)
    if match:
        return match.group(1)
    return None


def extract_image(item: FeedItem) -> Optional[str]:
    """Pick an image URL for ``item``.

    Priority: media:content, then enclosure, then the first ``<img>`` found in
    the encoded content or the summary. URLs are not fetched or validated.
    """
    if item.media_url:
        return item.media_url
    if item.enclosure_url:
        return item.enclosure_url
    return find_first_img_src(item.content_encoded) or find_first_img_src(item.content)
