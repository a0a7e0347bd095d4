"""Origin-response handler that turns static-origin 403/404s into the entry document.

CloudFront custom error responses are distribution-wide, so they would also
rewrite errors coming back from the API behavior. The handler rendered here is
attached to the static (default) behavior only.
"""

from typing import Iterable

from ..edge.routing import FallbackRule

_HANDLER_SOURCE = '''\
import urllib.error
import urllib.request

FALLBACKS = __FALLBACKS__


def handler(event, context):
    cf = event["Records"][0]["cf"]
    response = cf["response"]
    rule = FALLBACKS.get(response["status"])
    if rule is None or cf["request"]["uri"] == rule["page"]:
        return response
    url = "https://" + cf["config"]["distributionDomainName"] + rule["page"]
    try:
        with urllib.request.urlopen(url, timeout=3) as page:
            body = page.read().decode("utf-8")
            content_type = page.headers.get("Content-Type", "text/html")
    except urllib.error.URLError:
        return response
    return {
        "status": str(rule["status"]),
        "statusDescription": "OK",
        "headers": {
            "content-type": [{"key": "Content-Type", "value": content_type}],
            "cache-control": [{"key": "Cache-Control", "value": "max-age=%d" % rule["ttl"]}],
        },
        "body": body,
    }
'''


def fallback_table(fallbacks: Iterable[FallbackRule]) -> dict[str, dict]:
    return {
        str(fb.http_status): {
            "page": fb.response_page_path,
            "status": fb.response_http_status,
            "ttl": fb.ttl,
        }
        for fb in fallbacks
    }


def render_fallback_handler(fallbacks: Iterable[FallbackRule]) -> str:
    """Python source for the Lambda@Edge origin-response function (``index.handler``)."""
    return _HANDLER_SOURCE.replace("__FALLBACKS__", repr(fallback_table(fallbacks)))
