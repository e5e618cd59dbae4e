"""
Bun version discovery.
Fetches the release tags of the Bun repository and orders them newest first.
"""
import logging
import re
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Iterable, List, Optional, Tuple

import requests

from elysia_lambda.errors import ProvisionError

logger = logging.getLogger(__name__)

TAGS_URL = "https://api.github.com/repos/oven-sh/bun/tags"
TAG_PREFIX = "bun-v"
USER_AGENT = "elysia-lambda-deployer"
VERSION_ALIASES = ("latest", "canary")

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _parse_component(component: str) -> Optional[int]:
    match = _LEADING_INT.match(component)
    return int(match.group(1)) if match else None


@dataclass(frozen=True)
class VersionTag:
    """A dotted version label and its numeric components."""

    label: str
    parts: Tuple[Optional[int], ...]

    @classmethod
    def parse(cls, label: str) -> "VersionTag":
        return cls(label=label, parts=tuple(_parse_component(p) for p in label.split(".")))


def compare_versions(a: VersionTag, b: VersionTag) -> int:
    """
    Comparator for a newest-first sort.

    Returns a negative number when ``a`` sorts before ``b``. When one side runs
    out of components first, that side sorts first. Non-numeric components never
    decide the order.
    """
    for i in range(max(len(a.parts), len(b.parts))):
        if i >= len(a.parts):
            return -1
        if i >= len(b.parts):
            return 1
        left, right = a.parts[i], b.parts[i]
        if left is None or right is None:
            continue
        if left > right:
            return -1
        if left < right:
            return 1
    return 0


def sort_versions(labels: Iterable[str]) -> List[str]:
    """Sort version labels newest first."""
    tags = [VersionTag.parse(label) for label in labels]
    tags.sort(key=cmp_to_key(compare_versions))
    return [tag.label for tag in tags]


def filter_tags(tag_names: Iterable[str], prefix: str = TAG_PREFIX) -> List[str]:
    """Keep tags carrying the release prefix and strip it."""
    return [name[len(prefix):] for name in tag_names if name.startswith(prefix)]


class VersionResolver:
    """
    Lists the Bun versions a layer can be published for.
    """

    def __init__(
        self,
        tags_url: str = TAGS_URL,
        user_agent: str = USER_AGENT,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.tags_url = tags_url
        self.user_agent = user_agent
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch_tag_names(self) -> List[str]:
        """
        Fetch the raw tag names from the registry.

        Raises:
            ProvisionError: If the request fails or the response is not a tag list
        """
        logger.info(f"Fetching tags from {self.tags_url}")
        try:
            response = self.session.get(
                self.tags_url,
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
            )
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as e:
            raise ProvisionError(f"Failed to fetch Bun versions: {e}") from e
        except ValueError as e:
            raise ProvisionError(f"Unexpected response from {self.tags_url}: {e}") from e

        if not isinstance(body, list):
            raise ProvisionError(f"Unexpected response from {self.tags_url}: expected a list of tags")

        return [tag["name"] for tag in body if isinstance(tag, dict) and "name" in tag]

    def available_versions(self) -> List[str]:
        """Released versions, newest first."""
        versions = sort_versions(filter_tags(self.fetch_tag_names()))
        logger.debug(f"Found {len(versions)} Bun versions")
        return versions

    def choices(self) -> List[str]:
        """Versions offered to the user, aliases first."""
        return [*VERSION_ALIASES, *self.available_versions()]
