"""
Update policies deciding whether a pushed tag should be rolled out.

A deployment opts in with the ``argoos.io/policy`` label:

- ``latest``: roll out only when the pushed tag is literally ``latest``
- ``all``: roll out every push
- ``major``: roll out any newer version
- ``minor``: roll out newer minor or patch versions within the same major
- ``patch``: roll out newer patch versions within the same major.minor

Versions are plain ``major.minor.patch`` numbers; anything that does not
parse counts as zero.
"""
import re
from typing import NamedTuple

POLICY_LABEL = "argoos.io/policy"
POLICIES = ("latest", "all", "major", "minor", "patch")

_TAG_SUFFIX = re.compile(r":[^:]*$")
_INTEGER = re.compile(r"[+-]?[0-9]+", re.ASCII)


class Version(NamedTuple):
    major: int
    minor: int
    patch: int


def parse_version(value: str) -> Version:
    """
    Decompose a dotted version string into major, minor and patch.

    Missing components default to 0, as do components that are not integers.
    Components past the third are ignored.
    """
    parts = value.split(".")
    while len(parts) < 3:
        parts.append("0")

    numbers = []
    for part in parts[:3]:
        if _INTEGER.fullmatch(part):
            numbers.append(int(part))
        else:
            numbers.append(0)
    return Version(*numbers)


def strip_image_tag(image: str) -> str:
    """Remove the last ``:<segment>`` from an image reference."""
    return _TAG_SUFFIX.sub("", image)


def image_tag(image: str) -> str:
    """Return the text after the last colon of an image reference, or ''."""
    match = _TAG_SUFFIX.search(image)
    if match is None:
        return ""
    return match.group(0)[1:]


def current_version(image: str) -> Version:
    """Version of the tag a container currently runs."""
    return parse_version(image_tag(image))


def should_update(event_version: Version, current: Version, policy: str, event_tag: str = "") -> bool:
    """
    Decide whether a push should be rolled out under ``policy``.

    Coarser tiers also accept finer-tier increases: ``major`` accepts a
    patch-only bump, ``minor`` accepts a patch bump.
    """
    if policy == "latest":
        return event_tag == "latest"
    if policy == "all":
        return True
    if policy not in ("major", "minor", "patch"):
        return False

    update = False
    if policy == "major":
        update = event_version.major > current.major
    if policy in ("major", "minor"):
        update = update or (
            event_version.major == current.major and event_version.minor > current.minor
        )
    update = update or (
        event_version.major == current.major
        and event_version.minor == current.minor
        and event_version.patch > current.patch
    )
    return update
