import base64
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable
from urllib.parse import parse_qs

from .models import EdgeRequest, EdgeResponse

logger = logging.getLogger(__name__)

ProxyHandler = Callable[[dict[str, Any], Any], dict[str, Any]]


def gateway_url(api_id: str, region: str, stage: str) -> str:
    return f"https://{api_id}.execute-api.{region}.amazonaws.com/{stage}/"


@dataclass
class InvocationContext:
    function_name: str = "ApiLambda"
    memory_limit_in_mb: int = 1024
    timeout_ms: int = 15000
    aws_request_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def get_remaining_time_in_millis(self) -> int:
        return self.timeout_ms


class ProxyGateway:
    """Catch-all proxy stage in front of the compute entry point.

    Every method and path is forwarded as a REST proxy event; the handler's
    response comes back untouched apart from the wire decoding.
    """

    def __init__(self, handler: ProxyHandler, stage: str = "prod", domain: str = "local.execute-api.localhost") -> None:
        self.handler = handler
        self.stage = stage
        self.domain = domain

    @property
    def url(self) -> str:
        return f"https://{self.domain}/{self.stage}/"

    def build_event(self, request: EdgeRequest) -> dict[str, Any]:
        headers = dict(request.headers)
        headers["Host"] = self.domain
        query = parse_qs(request.query_string, keep_blank_values=True)
        body: str | None = None
        is_base64 = False
        if request.body:
            try:
                body = request.body.decode("utf-8")
            except UnicodeDecodeError:
                body = base64.b64encode(request.body).decode("ascii")
                is_base64 = True
        source_ip = (request.header("X-Forwarded-For") or "127.0.0.1").split(",")[0].strip()
        return {
            "resource": "/{proxy+}",
            "path": request.path,
            "httpMethod": request.method.upper(),
            "headers": headers,
            "multiValueHeaders": {k: [v] for k, v in headers.items()},
            "queryStringParameters": {k: v[-1] for k, v in query.items()} or None,
            "multiValueQueryStringParameters": query or None,
            "pathParameters": {"proxy": request.path.lstrip("/")},
            "stageVariables": None,
            "requestContext": {
                "resourcePath": "/{proxy+}",
                "httpMethod": request.method.upper(),
                "path": f"/{self.stage}{request.path}",
                "stage": self.stage,
                "requestId": str(uuid.uuid4()),
                "identity": {"sourceIp": source_ip},
            },
            "body": body,
            "isBase64Encoded": is_base64,
        }

    @staticmethod
    def to_response(result: dict[str, Any]) -> EdgeResponse:
        headers = dict(result.get("headers") or {})
        multi = {name: list(values) for name, values in (result.get("multiValueHeaders") or {}).items()}
        for name in multi:
            headers.pop(name, None)
        raw = result.get("body") or ""
        if result.get("isBase64Encoded"):
            body = base64.b64decode(raw)
        else:
            body = raw.encode("utf-8") if isinstance(raw, str) else bytes(raw)
        return EdgeResponse(status=int(result["statusCode"]), headers=headers, body=body, multi_value_headers=multi)

    def fetch(self, request: EdgeRequest) -> EdgeResponse:
        event = self.build_event(request)
        logger.debug("gateway %s %s -> stage %s", event["httpMethod"], event["path"], self.stage)
        result = self.handler(event, InvocationContext())
        return self.to_response(result)
