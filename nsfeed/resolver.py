import re
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict

from .addresses import Address, classify
from .errors import ErrorKind

# Whitespace, control characters and undecodable input bytes never make a usable name.
_UNUSABLE_HOSTNAME_CHARS = re.compile(r"[\s\x00-\x1f\x7f\ufffd]")


class ResolvedRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    hostname: str
    address: Address
    record_type: Literal["A", "AAAA"]
    mode: Literal["add", "remove"] = "add"


class Rejected(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    message: str


def hostname_labels(hostname: str, drop_suffix: bool):
    """Returns the labels of the hostname that end up in the record name."""
    if drop_suffix:
        return [hostname.split(".", 1)[0]]
    if hostname.endswith("."):
        hostname = hostname[:-1]
    return hostname.split(".")


def canonical_hostname(hostname: str, domain: str, drop_suffix: bool) -> str:
    """
    Applies the domain suffix policy to a hostname.

    With drop_suffix, any suffix in the input is replaced by the configured
    domain and the result is fully qualified ("Host1.old.net" becomes
    "host1.example.com."). Otherwise a bare name gets ".<domain>" appended
    and a dotted name is only lowercased.
    """
    if drop_suffix:
        return f"{hostname.split('.', 1)[0]}.{domain}.".lower()
    if "." not in hostname:
        hostname = f"{hostname}.{domain}"
    return hostname.lower()


def resolve(
    hostname_field: str,
    address_field: str,
    domain: str,
    drop_suffix: bool = True,
    mode: str = "add",
) -> Union[ResolvedRecord, Rejected]:
    """
    Decides which field is the hostname and which is the address.

    The address field is tried first. When it is not an address but the
    hostname field is, the pair was given in swapped order ("1.2.3.4,host1")
    and is swapped back.
    """
    address = classify(address_field)
    if address is None:
        address = classify(hostname_field)
        if address is None:
            return Rejected(
                kind=ErrorKind.ILLEGAL_ADDRESS,
                message=f"Illegal address, neither '{hostname_field}' nor '{address_field}' is an IP address",
            )
        hostname_field, address_field = address_field, hostname_field

    hostname = hostname_field.strip()
    if not hostname:
        return Rejected(
            kind=ErrorKind.ILLEGAL_HOSTNAME,
            message=f"Illegal hostname, no name given for {address.text}",
        )
    if _UNUSABLE_HOSTNAME_CHARS.search(hostname) or not all(hostname_labels(hostname, drop_suffix)):
        return Rejected(
            kind=ErrorKind.ILLEGAL_HOSTNAME,
            message=f"Illegal hostname '{hostname}' for {address.text}",
        )

    return ResolvedRecord(
        hostname=canonical_hostname(hostname, domain, drop_suffix),
        address=address,
        record_type=address.record_type,
        mode=mode,
    )
