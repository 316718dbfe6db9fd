import json

import pytest

from ensembl_post.endpoint import (
    EnsemblError,
    EnsemblPostEndpoint,
    EnsemblTopLevelError,
)
from ensembl_post.sequence import CdnaSequence


class _Big(CdnaSequence):
    @classmethod
    def max_post_size(cls):
        return 200


def test_default_max_post_size():
    assert EnsemblPostEndpoint.max_post_size() == 50
    assert CdnaSequence.max_post_size() == 50


def test_overridden_max_post_size():
    assert _Big.max_post_size() == 200
    assert CdnaSequence.max_post_size() == 50


def test_build_payload_compact_list():
    payload = CdnaSequence.build_payload(["ENST00000237014", "ENSE00003556666"])
    assert payload == (
        '{"type": "cdna", "mask_feature" : 1, "ids" : '
        '["ENST00000237014","ENSE00003556666"]}'
    )


def test_build_payload_is_valid_json():
    ids = ["3:g.46373453_46373484del", "10:g.72346580_72346583dup"]
    decoded = json.loads(CdnaSequence.build_payload(iter(ids)))
    assert decoded["ids"] == ids
    assert decoded["type"] == "cdna"


def test_build_payload_escapes_quotes():
    decoded = json.loads(CdnaSequence.build_payload(['a"b']))
    assert decoded["ids"] == ['a"b']


def test_from_json_and_input():
    item = CdnaSequence.from_json(
        {"query": "ENST00000237014", "id": "ENST00000237014", "seq": "ACGT"}
    )
    assert item.input() == "ENST00000237014"


def test_abstract_endpoint_cannot_be_instantiated():
    with pytest.raises(TypeError):
        EnsemblPostEndpoint()


def test_ensembl_error_message():
    err = EnsemblError(400, "bad-id", "Bad Request: nope")
    assert str(err) == (
        "Error accessing Ensembl data. Ensembl gave this response:\nBad Request: nope"
    )
    assert err.status_code == 400
    assert err.input == "bad-id"


def test_ensembl_error_raises_and_compares():
    with pytest.raises(EnsemblError) as info:
        raise EnsemblError(404, "x", "Not Found: Badly formatted request.")
    assert info.value == EnsemblError(404, "x", "Not Found: Badly formatted request.")
    assert info.value != EnsemblError(403, "x", "Not Found: Badly formatted request.")


def test_ensembl_error_hashable():
    a = EnsemblError(429, "id", "slow down")
    b = EnsemblError(429, "id", "slow down")
    assert len({a, b}) == 1


def test_top_level_error_equality():
    assert EnsemblTopLevelError("boom") == EnsemblTopLevelError(error="boom")
    assert EnsemblTopLevelError("boom").error == "boom"