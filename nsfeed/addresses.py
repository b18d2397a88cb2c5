import re
from ipaddress import IPv4Address, IPv6Address, ip_address
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

# Four dotted decimal parts. Anything shorter ("10", "10.1") is not an address
# here even when a permissive parser would expand it.
_DOTTED_QUAD = re.compile(r"^\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}$")


class Address(BaseModel):
    model_config = ConfigDict(frozen=True)

    family: Literal["v4", "v6"]
    text: str
    reverse_name: str

    @property
    def record_type(self) -> str:
        return "AAAA" if self.family == "v6" else "A"


def classify(token: str) -> Optional[Address]:
    """
    Classifies a token as an IPv4 or IPv6 address.

    Returns an Address with the canonical text and the dot-terminated reverse
    lookup name, or None when the token is not a usable address literal.
    Abbreviated IPv4 forms are rejected; IPv6 is accepted whenever the
    address library accepts it, except for scoped literals.
    """
    token = token.strip()
    try:
        parsed = ip_address(token)
    except ValueError:
        return None

    if isinstance(parsed, IPv6Address):
        if parsed.scope_id:
            return None
        return Address(family="v6", text=str(parsed), reverse_name=f"{parsed.reverse_pointer}.")

    if isinstance(parsed, IPv4Address) and _DOTTED_QUAD.match(token):
        return Address(family="v4", text=str(parsed), reverse_name=f"{parsed.reverse_pointer}.")
    return None
