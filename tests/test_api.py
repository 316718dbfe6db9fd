import json

import httpx
import pytest

from ensembl_post.api import (
    MAX_ATTEMPTS,
    Getter,
    parse_response,
)
from ensembl_post.endpoint import EnsemblError
from ensembl_post.sequence import CdnaSequence
from ensembl_post.vep import VEPResult


def _sequence_json(identifier):
    return {"query": identifier, "id": identifier, "desc": None, "seq": "ACGT"}


def _sequence_handler(requests):
    def handler(request):
        requests.append(request)
        ids = json.loads(request.content)["ids"]
        return httpx.Response(200, json=[_sequence_json(i) for i in ids])

    return handler


def _status_handler(requests, status, headers=None, text=""):
    def handler(request):
        requests.append(request)
        return httpx.Response(status, headers=headers or {}, text=text)

    return handler


def test_parse_response_list():
    text = json.dumps([_sequence_json("ENST00000237014")])
    results = parse_response(CdnaSequence, text)
    assert [r.query for r in results] == ["ENST00000237014"]
    assert results[0].seq == "ACGT"


def test_parse_response_mapping():
    text = json.dumps({"ENSE00003556666": _sequence_json("ENSE00003556666")})
    results = parse_response(CdnaSequence, text)
    assert [r.input() for r in results] == ["ENSE00003556666"]


def test_parse_response_rejects_bad_body():
    with pytest.raises(ValueError, match="Failed to parse the following response"):
        parse_response(CdnaSequence, '[{"query": 1}]')
    with pytest.raises(ValueError):
        parse_response(CdnaSequence, "not json")


def test_parse_response_vep_result_keeps_raw():
    results = parse_response(VEPResult, json.dumps([{"input": "bad"}]))
    assert results[0].input() == "bad"


@pytest.mark.asyncio
async def test_requests_are_batched_into_one_post():
    requests = []
    transport = httpx.MockTransport(_sequence_handler(requests))
    ids = ["ENST00000237014", "ENSE00003556666"]
    async with httpx.AsyncClient(transport=transport) as http:
        async with Getter(CdnaSequence, http_client=http, wait_delay=0.01) as getter:
            client = getter.client()
            import asyncio

            results = await asyncio.gather(*(client.get(i) for i in ids))
    assert [r.query for r in results] == ids
    assert len(requests) == 1
    request = requests[0]
    assert request.url == "https://rest.ensembl.org/sequence/id"
    assert request.headers["Content-Type"] == "application/json"
    assert request.headers["Accept"] == "application/json"
    body = json.loads(request.content)
    assert body["type"] == "cdna"
    assert body["mask_feature"] == 1
    assert sorted(body["ids"]) == sorted(ids)


@pytest.mark.asyncio
async def test_large_batches_are_split_by_max_post_size():
    import asyncio

    requests = []
    transport = httpx.MockTransport(_sequence_handler(requests))
    ids = [f"ID{n}" for n in range(CdnaSequence.max_post_size() + 1)]
    async with httpx.AsyncClient(transport=transport) as http:
        async with Getter(CdnaSequence, http_client=http, wait_delay=0.01) as getter:
            client = getter.client()
            results = await asyncio.gather(*(client.get(i) for i in ids))
    assert [r.query for r in results] == ids
    sizes = [len(json.loads(r.content)["ids"]) for r in requests]
    assert sum(sizes) == len(ids)
    assert max(sizes) <= CdnaSequence.max_post_size()
    assert len(requests) > 1


@pytest.mark.asyncio
async def test_custom_server_is_used():
    requests = []
    transport = httpx.MockTransport(_sequence_handler(requests))
    async with httpx.AsyncClient(transport=transport) as http:
        async with Getter(
            CdnaSequence, http_client=http, server="http://localhost", wait_delay=0
        ) as getter:
            result = await getter.client().get("ENST00000237014")
    assert result.id == "ENST00000237014"
    assert requests[0].url == "http://localhost/sequence/id"


@pytest.mark.asyncio
async def test_bad_request_is_not_retried():
    requests = []
    transport = httpx.MockTransport(_status_handler(requests, 400, text="nope"))
    async with httpx.AsyncClient(transport=transport) as http:
        async with Getter(CdnaSequence, http_client=http, wait_delay=0) as getter:
            with pytest.raises(EnsemblError) as info:
                await getter.client().get("X1")
    assert info.value.status_code == 400
    assert info.value.input == "X1"
    assert info.value.error == "Bad Request: nope"
    assert len(requests) == 1


@pytest.mark.asyncio
async def test_unexpected_status_carries_body():
    requests = []
    transport = httpx.MockTransport(_status_handler(requests, 500, text="server broke"))
    async with httpx.AsyncClient(transport=transport) as http:
        async with Getter(CdnaSequence, http_client=http, wait_delay=0) as getter:
            with pytest.raises(EnsemblError) as info:
                await getter.client().get("X1")
    assert info.value.status_code == 500
    assert info.value.error == "server broke"


@pytest.mark.asyncio
async def test_rate_limit_is_retried_then_reported():
    requests = []
    transport = httpx.MockTransport(
        _status_handler(requests, 429, headers={"X-RateLimit-Reset": "0"})
    )
    async with httpx.AsyncClient(transport=transport) as http:
        async with Getter(CdnaSequence, http_client=http, wait_delay=0) as getter:
            with pytest.raises(EnsemblError) as info:
                await getter.client().get("X1")
    assert info.value.status_code == 429
    assert info.value.error == "Too Many Requests: Rate limit resets in 0 seconds."
    assert len(requests) == MAX_ATTEMPTS


@pytest.mark.asyncio
async def test_rate_limit_then_success():
    requests = []
    success = _sequence_handler([])

    def handler(request):
        requests.append(request)
        if len(requests) == 1:
            return httpx.Response(429, headers={"X-RateLimit-Reset": "0"})
        return success(request)

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport) as http:
        async with Getter(CdnaSequence, http_client=http, wait_delay=0) as getter:
            result = await getter.client().get("X1")
    assert result.query == "X1"
    assert len(requests) == 2


@pytest.mark.asyncio
async def test_missing_result_reports_not_found():
    def handler(request):
        return httpx.Response(200, json=[_sequence_json("OTHER")])

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport) as http:
        async with Getter(CdnaSequence, http_client=http, wait_delay=0) as getter:
            with pytest.raises(EnsemblError) as info:
                await getter.client().get("X1")
    assert info.value.status_code == 404
    assert "The input X1 did not give results" in info.value.error


@pytest.mark.asyncio
async def test_transport_failure_reports_status_zero():
    def handler(request):
        raise httpx.ConnectError("unreachable")

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport) as http:
        async with Getter(CdnaSequence, http_client=http, wait_delay=0) as getter:
            with pytest.raises(EnsemblError) as info:
                await getter.client().get("X1")
    assert info.value.status_code == 0
    assert info.value.input == "X1"


@pytest.mark.asyncio
async def test_get_after_close_raises():
    transport = httpx.MockTransport(_sequence_handler([]))
    async with httpx.AsyncClient(transport=transport) as http:
        getter = Getter(CdnaSequence, http_client=http, wait_delay=0)
        getter.start()
        await getter.close()
        with pytest.raises(RuntimeError):
            await getter.client().get("X1")
        assert http.is_closed is False