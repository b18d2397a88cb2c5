from .config import PipelineConfig
from .resolver import ResolvedRecord

SEND = "send"
SHOW = "show"


def forward_transaction(record: ResolvedRecord, config: PipelineConfig):
    rtype = record.record_type.lower()
    directives = []
    if config.delete_before_add:
        directives.append(f"update delete {record.hostname} {rtype}")
    if not config.remove:
        directives.append(f"update add {record.hostname} {config.ttl} {rtype} {record.address.text}")
    if config.show:
        directives.append(SHOW)
    # A remove without delete-before-add still commits an empty transaction.
    directives.append(SEND)
    return directives


def reverse_transaction(record: ResolvedRecord, config: PipelineConfig):
    reverse_name = record.address.reverse_name
    # An address reverse-resolves to one name only, so old PTRs always go.
    directives = [f"update delete {reverse_name}"]
    if not config.remove:
        directives.append(f"update add {reverse_name} {config.ttl} ptr {record.hostname}")
    if config.show:
        directives.append(SHOW)
    directives.append(SEND)
    return directives


def emit(record: ResolvedRecord, config: PipelineConfig):
    """
    Builds the directive batch for one resolved record.

    The batch holds up to two transactions, forward then reverse, each closed
    by a send so nsupdate commits them independently.
    """
    directives = []
    if config.forward:
        directives.extend(forward_transaction(record, config))
    if config.reverse:
        directives.extend(reverse_transaction(record, config))
    return directives


def server_directive(server: str) -> str:
    return f"server {server}"
