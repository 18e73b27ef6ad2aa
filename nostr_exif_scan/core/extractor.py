"""Image reference extraction from post text."""

import re
from typing import Iterable

from .models import ImageReference, PostRecord

IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "webp")

# Scheme is matched as written; only the extension is case-insensitive.
# The extension does not have to end the URL ("a.jpg?w=640" yields "a.jpg").
IMAGE_URL_PATTERN = re.compile(
    r"https?://\S+?\.(?i:" + "|".join(IMAGE_EXTENSIONS) + r")"
)


def find_image_urls(text: str) -> list[str]:
    """Return every image URL in text, in order of appearance."""
    return IMAGE_URL_PATTERN.findall(text)


def extract_image_references(posts: Iterable[PostRecord]) -> list[ImageReference]:
    """Flatten posts into (post id, url) pairs, preserving post and match order."""
    refs: list[ImageReference] = []
    for post in posts:
        for url in find_image_urls(post.content):
            refs.append(ImageReference(post_id=post.id, url=url))
    return refs
