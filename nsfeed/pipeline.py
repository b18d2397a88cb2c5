from typing import Iterable, Optional

import structlog
from pydantic import BaseModel

from .config import PipelineConfig
from .directives import emit, server_directive
from .errors import ErrorKind, IllegalRecord
from .line_parser import normalize
from .resolver import Rejected, resolve

log = structlog.get_logger()


class LineError(BaseModel):
    line_number: int
    kind: ErrorKind
    message: str

    def __str__(self):
        return f"{self.line_number}: {self.message}"


class LineResult(BaseModel):
    line_number: int
    directives: list[str] = []
    error: Optional[LineError] = None


class PipelineResult(BaseModel):
    directives: list[str] = []
    errors: list[LineError] = []
    records: int = 0


class Pipeline:
    """
    Turns raw host/address lines into nsupdate directives.

    Lines are processed strictly in order. A bad line is reported with its
    1-based position and skipped; it never stops the run. The line counter
    keeps counting across calls for the lifetime of the instance.
    """

    def __init__(self, config: PipelineConfig):
        self.config = config
        self.line_number = 0

    def _error(self, kind, message):
        log.warning("Skipping input line", line=self.line_number, kind=kind.value, error=message)
        return LineResult(
            line_number=self.line_number,
            error=LineError(line_number=self.line_number, kind=kind, message=message),
        )

    def process_line(self, raw: str) -> LineResult:
        self.line_number += 1
        try:
            fields = normalize(raw)
        except IllegalRecord as e:
            return self._error(e.kind, str(e))
        if fields is None:
            return LineResult(line_number=self.line_number)

        record = resolve(
            fields.hostname,
            fields.address,
            self.config.domain,
            drop_suffix=self.config.drop_suffix,
            mode=self.config.mode,
        )
        if isinstance(record, Rejected):
            return self._error(record.kind, record.message)

        log.debug(
            "Resolved record",
            line=self.line_number,
            hostname=record.hostname,
            address=record.address.text,
            record_type=record.record_type,
        )
        return LineResult(line_number=self.line_number, directives=emit(record, self.config))

    def run(self, lines: Iterable[str]) -> PipelineResult:
        result = PipelineResult()
        for raw in lines:
            line_result = self.process_line(raw)
            if line_result.error is not None:
                result.errors.append(line_result.error)
            elif line_result.directives:
                result.directives.extend(line_result.directives)
                result.records += 1
        log.info(
            "Processed input",
            lines=self.line_number,
            records=result.records,
            errors=len(result.errors),
        )
        return result

    def render(self, lines: Iterable[str]) -> tuple[str, PipelineResult]:
        """Returns the full nsupdate script for the lines, led by the server directive."""
        result = self.run(lines)
        script = "\n".join([server_directive(self.config.server), *result.directives]) + "\n"
        return script, result
