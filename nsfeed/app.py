import os
from ipaddress import ip_address, ip_network
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from .clients.nsupdate_client import NsupdateClient
from .config import ConfigError, build_config, configure_logging
from .pipeline import Pipeline

log = structlog.get_logger()

configure_logging()


def get_rate_limit():
    return os.getenv("RATE_LIMIT", "100/minute")


limiter = Limiter(key_func=get_remote_address)

app = FastAPI(docs_url="/api/docs", redoc_url="/api/redoc")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


class IPWhitelistMiddleware(BaseHTTPMiddleware):
    """Rejects clients outside ALLOWED_SUBNETS; every client is allowed when it is unset."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        allowed_subnets_str = os.getenv("ALLOWED_SUBNETS")
        if allowed_subnets_str:
            allowed_subnets = [ip_network(subnet.strip()) for subnet in allowed_subnets_str.split(",")]
            client_ip_str = request.headers.get("X-Forwarded-For", request.client.host)
            try:
                client_ip = ip_address(client_ip_str.split(",")[0].strip())
            except ValueError:
                return JSONResponse(status_code=403, content={"detail": "Forbidden"})
            if not any(client_ip in subnet for subnet in allowed_subnets):
                return JSONResponse(status_code=403, content={"detail": "Forbidden"})
        return await call_next(request)


app.add_middleware(IPWhitelistMiddleware)


class RecordsRequest(BaseModel):
    lines: list[str]
    remove: bool = False
    delete_before_add: bool = True
    forward: bool = True
    reverse: bool = True
    show: bool = False
    drop_suffix: bool = True
    domain: Optional[str] = None


def _render(data: RecordsRequest):
    config = build_config(
        domain=data.domain,
        remove=data.remove,
        delete_before_add=data.delete_before_add,
        forward=data.forward,
        reverse=data.reverse,
        show=data.show,
        drop_suffix=data.drop_suffix,
    )
    script, result = Pipeline(config).render(data.lines)
    return config, script, result


@app.post("/render")
@limiter.limit(get_rate_limit)
def render(request: Request, data: RecordsRequest):
    """Returns the nsupdate script for the posted lines without applying it."""
    try:
        _, script, result = _render(data)
    except ConfigError as e:
        log.error("Cannot render records", error=str(e))
        return JSONResponse(content={"message": str(e)}, status_code=400)
    return JSONResponse(content={
        "script": script,
        "directives": result.directives,
        "errors": [str(error) for error in result.errors],
    })


@app.post("/apply")
@limiter.limit(get_rate_limit)
def apply(request: Request, data: RecordsRequest):
    log.info("Update requested via API", lines=len(data.lines))
    try:
        config, script, result = _render(data)
    except ConfigError as e:
        log.error("Cannot apply records", error=str(e))
        return JSONResponse(content={"message": str(e)}, status_code=400)
    errors = [str(error) for error in result.errors]
    if not result.directives:
        return JSONResponse(content={"message": "No records to update.", "errors": errors})

    client = NsupdateClient(config.nsupdate_command, config.key_file, config.nsupdate_timeout)
    if not client.send(script):
        return JSONResponse(content={"message": "nsupdate failed.", "errors": errors}, status_code=502)
    return JSONResponse(content={"message": "Update applied.", "errors": errors})


@app.get("/health")
@limiter.limit(get_rate_limit)
async def health_check(request: Request):
    return JSONResponse(content={"status": "ok"})
