"""
Test suite for the registry lookup clients (RDAP and Domainr)

Usage:
    pytest test_rdap_client.py
"""

import asyncio

import httpx

from domain_finder_mcp.domainr_client import DomainrClient, parse_domainr_status
from domain_finder_mcp.models import LookupStatus
from domain_finder_mcp.rdap_client import RdapClient, parse_rdap_payload


def run_sync(coro):
    """Helper to run async coroutines synchronously for tests."""
    return asyncio.run(coro)


def rdap_lookup(handler, domain: str):
    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            return await RdapClient(http).lookup(domain)
    return run_sync(go())


def domainr_lookup(handler, domain: str):
    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            return await DomainrClient(http, "secret-key").lookup(domain)
    return run_sync(go())


# =============================================================================
# parse_rdap_payload
# =============================================================================

def test_payload_with_domain_object_is_found():
    outcome = parse_rdap_payload({
        "objectClassName": "domain",
        "handle": "2138514_DOMAIN_COM-VRSN",
        "events": [
            {"eventAction": "last changed", "eventDate": "2024-01-01T00:00:00Z"},
            {"eventAction": "registration", "eventDate": "1997-09-15T04:00:00Z"},
        ],
    })
    assert outcome.status == LookupStatus.FOUND
    assert outcome.found is True
    assert outcome.conclusive is True
    assert outcome.registration_date == "1997-09-15T04:00:00Z"


def test_payload_with_handle_only_is_found_without_date():
    outcome = parse_rdap_payload({"handle": "ABC123"})
    assert outcome.found is True
    assert outcome.registration_date is None


def test_payload_with_error_code_is_not_found():
    outcome = parse_rdap_payload({"errorCode": 404, "title": "Not Found"})
    assert outcome.status == LookupStatus.NOT_FOUND
    assert outcome.found is False
    assert outcome.conclusive is True


def test_payload_title_not_found_is_not_found():
    assert parse_rdap_payload({"title": "Domain not found"}).status == LookupStatus.NOT_FOUND


def test_unrecognized_payload_is_inconclusive():
    outcome = parse_rdap_payload({"rdapConformance": ["rdap_level_0"]})
    assert outcome.status == LookupStatus.UNKNOWN
    assert outcome.conclusive is False


def test_non_object_payload_is_error():
    outcome = parse_rdap_payload(["not", "an", "object"])
    assert outcome.status == LookupStatus.ERROR
    assert outcome.detail == "error"


# =============================================================================
# RdapClient
# =============================================================================

def test_unknown_tld_returns_no_endpoint_without_request():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(404)

    outcome = rdap_lookup(handler, "something.zzzz")
    assert outcome.status == LookupStatus.NO_ENDPOINT
    assert outcome.detail == "no_endpoint"
    assert outcome.found is False
    assert calls == []


def test_request_targets_registry_with_rdap_accept_header():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["accept"] = request.headers.get("Accept")
        return httpx.Response(404)

    rdap_lookup(handler, "Example.COM")
    assert seen["url"] == "https://rdap.verisign.com/com/v1/domain/example.com"
    assert seen["accept"] == "application/rdap+json"


def test_404_is_not_found():
    outcome = rdap_lookup(lambda request: httpx.Response(404), "freename.io")
    assert outcome.status == LookupStatus.NOT_FOUND


def test_200_domain_object_is_found():
    body = {
        "objectClassName": "domain",
        "events": [{"eventAction": "registration", "eventDate": "2001-02-03"}],
    }
    outcome = rdap_lookup(lambda request: httpx.Response(200, json=body), "taken.org")
    assert outcome.found is True
    assert outcome.registration_date == "2001-02-03"


def test_server_error_is_error_not_availability():
    outcome = rdap_lookup(lambda request: httpx.Response(503), "example.com")
    assert outcome.status == LookupStatus.ERROR
    assert outcome.found is False
    assert outcome.conclusive is False


def test_rate_limit_is_error():
    outcome = rdap_lookup(lambda request: httpx.Response(429), "example.com")
    assert outcome.status == LookupStatus.ERROR


def test_timeout_is_reported_separately():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    outcome = rdap_lookup(handler, "example.com")
    assert outcome.status == LookupStatus.TIMEOUT
    assert outcome.detail == "timeout"


def test_connection_error_is_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    assert rdap_lookup(handler, "example.com").status == LookupStatus.ERROR


def test_malformed_json_is_error():
    outcome = rdap_lookup(
        lambda request: httpx.Response(200, content=b"<html>oops</html>"),
        "example.com",
    )
    assert outcome.status == LookupStatus.ERROR


# =============================================================================
# Domainr
# =============================================================================

def test_domainr_undelegated_is_not_found():
    outcome = parse_domainr_status({"status": [{"domain": "x.com", "status": "undelegated inactive"}]})
    assert outcome.status == LookupStatus.NOT_FOUND


def test_domainr_undelegated_but_active_is_found():
    outcome = parse_domainr_status({"status": [{"domain": "x.com", "status": "undelegated active"}]})
    assert outcome.status == LookupStatus.FOUND


def test_domainr_bare_undelegated_is_inconclusive():
    outcome = parse_domainr_status({"status": [{"domain": "x.com", "status": "undelegated"}]})
    assert outcome.status == LookupStatus.UNKNOWN
    assert outcome.conclusive is False


def test_domainr_active_is_found():
    outcome = parse_domainr_status({"status": [{"domain": "x.com", "status": "active registrar"}]})
    assert outcome.status == LookupStatus.FOUND


def test_domainr_unknown_is_inconclusive():
    assert parse_domainr_status({"status": [{"status": "unknown"}]}).status == LookupStatus.UNKNOWN
    assert parse_domainr_status({"status": []}).status == LookupStatus.ERROR


def test_domainr_sends_rapidapi_headers():
    seen = {}

    def handler(request):
        seen["key"] = request.headers.get("X-RapidAPI-Key")
        seen["host"] = request.headers.get("X-RapidAPI-Host")
        seen["domain"] = request.url.params.get("domain")
        return httpx.Response(200, json={"status": [{"status": "inactive"}]})

    outcome = domainr_lookup(handler, "newbrand.com")
    assert outcome.status == LookupStatus.NOT_FOUND
    assert seen == {"key": "secret-key", "host": "domainr.p.rapidapi.com", "domain": "newbrand.com"}


def test_domainr_http_error_is_error():
    assert domainr_lookup(lambda request: httpx.Response(403), "x.com").status == LookupStatus.ERROR
