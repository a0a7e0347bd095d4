import pytest

from edgestack.edge.routing import (
    CACHING_DISABLED,
    CACHING_OPTIMIZED,
    AllowedMethods,
    OriginKind,
    ViewerProtocolPolicy,
    default_route_table,
    derive_origin_host,
    path_matches,
)


@pytest.fixture
def table():
    return default_route_table()


@pytest.mark.parametrize("path", ["/api/health", "/api/users/42", "/api/", "api/x"])
def test_dynamic_prefix_selects_gateway_rule(table, path):
    rule = table.select(path)
    assert rule.origin is OriginKind.DYNAMIC
    assert rule.cache_policy == CACHING_DISABLED
    assert rule.allowed_methods is AllowedMethods.ALL


@pytest.mark.parametrize("path", ["/", "/index.html", "/some/client/route", "/apiary", "/api", "/API/x", "/assets/api/x.js"])
def test_other_paths_select_default_rule(table, path):
    rule = table.select(path)
    assert rule is table.default
    assert rule.origin is OriginKind.STATIC
    assert rule.cache_policy == CACHING_OPTIMIZED


def test_both_routes_upgrade_to_https(table):
    assert table.default.viewer_protocol_policy is ViewerProtocolPolicy.REDIRECT_TO_HTTPS
    assert table.behaviors[0].viewer_protocol_policy is ViewerProtocolPolicy.REDIRECT_TO_HTTPS


def test_dynamic_rule_forwards_everything_but_host(table):
    policy = table.select("/api/x").origin_request_policy
    forwarded = policy.filter_headers({"Host": "d1.cloudfront.net", "Cookie": "a=b", "Authorization": "Bearer t"})
    assert forwarded == {"Cookie": "a=b", "Authorization": "Bearer t"}
    assert table.default.origin_request_policy.filter_headers({"Cookie": "a=b"}) == {}


@pytest.mark.parametrize("status", [403, 404])
def test_fallbacks_serve_entry_document_uncached(table, status):
    fb = table.fallback_for(status)
    assert fb.response_page_path == "/index.html"
    assert fb.response_http_status == 200
    assert fb.ttl == 0


def test_no_fallback_for_other_statuses(table):
    assert table.fallback_for(500) is None
    assert table.fallback_for(200) is None


def test_custom_prefix_and_entry_document():
    t = default_route_table(api_prefix="/backend/", entry_document="app.html")
    assert t.behaviors[0].path_pattern == "backend/*"
    assert t.default_root_object == "app.html"
    assert t.fallback_for(404).response_page_path == "/app.html"
    assert t.select("/backend/v1").origin is OriginKind.DYNAMIC


def test_path_pattern_wildcards():
    assert path_matches("*.js", "/assets/main.js")
    assert path_matches("img/??.png", "/img/ab.png")
    assert not path_matches("img/??.png", "/img/abc.png")
    assert path_matches("a+b/*", "/a+b/c")
    assert not path_matches("a+b/*", "/aab/c")


def test_route_table_is_immutable(table):
    with pytest.raises(Exception):
        table.default_root_object = "other.html"


def test_host_derivation_from_gateway_url():
    url = "https://abc123.execute-api.us-east-1.amazonaws.com/prod/"
    assert url.split("/")[2] == "abc123.execute-api.us-east-1.amazonaws.com"
    assert derive_origin_host(url) == "abc123.execute-api.us-east-1.amazonaws.com"


@pytest.mark.parametrize("bad", ["", "abc123", "https:/"])
def test_host_derivation_rejects_urls_without_host(bad):
    with pytest.raises(ValueError):
        derive_origin_host(bad)
