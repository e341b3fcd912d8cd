"""Version name to version code conversion.

A version name such as ``"2.65.97-SNAPSHOT"`` is first normalized to a
``<major>.<minor>.<build>`` string and then encoded into a single integer
with three decimal digits per component:

    2.65.97                       -> 2065097
    2.65.97 SNAPSHOT              -> 2065097
    2.65.97 feature/2681-bla-bla  -> 2065097
    2.65.97 746d9836a6f5ee5f      -> 2065097
    2.65.97-SNAPSHOT              -> 2065097
    2.657.912                     -> 2657912
    2.2657.1912                   -> 2657912
    2.6                           -> 2006000
    2                             -> 2000000
"""

import re
from dataclasses import dataclass
from typing import Final, Self

from .exceptions import InvalidVersionError

COMPONENT_COUNT: Final = 3
COMPONENT_MODULUS: Final = 1000
FALLBACK_VERSION_CODE: Final = 42

_SEPARATORS = re.compile(r"[\s-]+")
_INTEGER = re.compile(r"\+?[0-9]+")


@dataclass(frozen=True)
class NormalizedVersion:
    """Canonical three component version.

    Components are kept as the strings found in the version name; they are only
    checked to be integers when the version is encoded.

    Attributes:
        major: Major version component.
        minor: Minor version component.
        build: Build number component.
    """

    major: str
    minor: str
    build: str

    @classmethod
    def parse(cls, version_name: str) -> Self:
        """Normalize a free-form version name.

        Only the first token (split on whitespace or ``-``) is used. If it has
        more than three dotted components the leading ones are dropped, if it
        has fewer it is padded with ``"0"``.

        Args:
            version_name: Raw version name, e.g. ``"2.65.97 SNAPSHOT"``.

        Returns:
            The normalized version.

        Raises:
            InvalidVersionError: If the version name contains no token at all.
        """
        tokens = [t for t in _SEPARATORS.split(version_name.strip()) if t]
        if not tokens:
            raise InvalidVersionError(version_name, "no version token found")

        components = [c for c in tokens[0].split(".") if c]
        if not components:
            raise InvalidVersionError(version_name, "no version token found")

        components = components[-COMPONENT_COUNT:]
        components += ["0"] * (COMPONENT_COUNT - len(components))
        return cls(*components)

    def encode(self: Self) -> int:
        """Encode the version into an integer version code.

        Each component is taken modulo 1000. A result of 0 is replaced by
        ``FALLBACK_VERSION_CODE``.

        Returns:
            Version code in the range [1, 999999999].

        Raises:
            InvalidVersionError: If a component is not a base-10 integer.
        """
        code = 0
        for component in (self.major, self.minor, self.build):
            code = code * COMPONENT_MODULUS + _parse_component(self, component)

        if code == 0:
            return FALLBACK_VERSION_CODE
        return code

    def __str__(self: Self) -> str:
        """Return the dotted ``major.minor.build`` form."""
        return f"{self.major}.{self.minor}.{self.build}"


def _parse_component(version: NormalizedVersion, component: str) -> int:
    if not _INTEGER.fullmatch(component):
        raise InvalidVersionError(
            str(version), f"component {component!r} is not an integer"
        )
    return int(component, 10) % COMPONENT_MODULUS


def normalize_version_string(version_name: str) -> str:
    """Normalize a version name to its ``major.minor.build`` form.

    Args:
        version_name: Raw version name.

    Returns:
        The canonical dotted string.
    """
    return str(NormalizedVersion.parse(version_name))


def encode_version(normalized: str) -> int:
    """Encode an already normalized ``major.minor.build`` string.

    Args:
        normalized: Dotted string with exactly three components.

    Returns:
        The version code.

    Raises:
        InvalidVersionError: If the string does not have three integer
            components.
    """
    parts = normalized.split(".")
    if len(parts) != COMPONENT_COUNT:
        raise InvalidVersionError(
            normalized, f"expected {COMPONENT_COUNT} components, got {len(parts)}"
        )
    return NormalizedVersion(*parts).encode()


def compute_version_code(version_name: str) -> int:
    """Compute the version code of a raw version name.

    Args:
        version_name: Raw version name.

    Returns:
        The version code.
    """
    return NormalizedVersion.parse(version_name).encode()
