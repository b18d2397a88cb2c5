import re
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

from .errors import IllegalRecord

COMMENT_PREFIXES = ("#", "!")

_WHITESPACE = re.compile(r"\s+")
_FIRST_SHORTHAND_DELIMITER = re.compile(r" ?[=|] ?")


class FieldSet(BaseModel):
    """
    The fields extracted from one input line.

    Simple lines carry (hostname, address, [extra]); inventory lines carry
    (site, building, hostname, address, [extra]). Site, building and extra
    travel along for the caller but are not used to build records.
    """

    model_config = ConfigDict(frozen=True)

    shape: Literal["simple", "inventory"]
    tokens: tuple[str, ...]

    @property
    def hostname_index(self):
        return 2 if self.shape == "inventory" else 0

    @property
    def hostname(self) -> str:
        return self.tokens[self.hostname_index]

    @property
    def address(self) -> str:
        return self.tokens[self.hostname_index + 1]

    @property
    def site(self) -> Optional[str]:
        return self.tokens[0] if self.shape == "inventory" else None

    @property
    def building(self) -> Optional[str]:
        return self.tokens[1] if self.shape == "inventory" else None

    @property
    def extra(self) -> Optional[str]:
        index = self.hostname_index + 2
        return self.tokens[index] if len(self.tokens) > index else None


def strip_comment(raw: str) -> str:
    stripped = raw.lstrip()
    if not stripped or stripped.startswith(COMMENT_PREFIXES):
        return ""
    return stripped.split("#", 1)[0]


def unify_delimiters(line: str) -> str:
    """Collapses whitespace and rewrites shorthand delimiters to commas."""
    line = _WHITESPACE.sub(" ", line).strip()
    line = line.replace(", ", ",").replace(" ,", ",")
    if "," not in line:
        # host=ip, host|ip and "host ip" all become host,ip
        line = _FIRST_SHORTHAND_DELIMITER.sub(",", line, count=1)
        line = line.replace(" ", ",")
    return line


def normalize(raw: str) -> Optional[FieldSet]:
    """
    Normalizes one raw input line into a FieldSet.

    Returns None for blank and comment lines. Raises IllegalRecord when a
    non-empty line has no delimiter at all.
    """
    line = unify_delimiters(strip_comment(raw))
    if not line:
        return None

    field_count = line.count(",")
    if field_count == 0:
        raise IllegalRecord(line)
    if field_count <= 2:
        return FieldSet(shape="simple", tokens=tuple(line.split(",", 2)))
    return FieldSet(shape="inventory", tokens=tuple(line.split(",", 4)))
