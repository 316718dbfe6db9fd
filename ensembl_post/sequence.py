"""Results of the Ensembl sequence endpoint."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from itertools import groupby
from typing import Any

from .endpoint import EnsemblPostEndpoint

__all__ = ["CdnaSequence", "CodingSequence", "GenomicSequence"]


def _text(data: Mapping[str, Any], key: str) -> str:
    if key not in data:
        raise ValueError(f"missing field {key!r}")
    value = data[key]
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string, not {value!r}")
    return value


def _optional_text(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string, not {value!r}")
    return value


def _sequence_fields(data: Any) -> dict[str, Any]:
    """Check one decoded JSON object and pull out the sequence fields."""
    if not isinstance(data, Mapping):
        raise ValueError(f"a sequence must be a JSON object, not {data!r}")
    return {
        "query": _text(data, "query"),
        "id": _text(data, "id"),
        "desc": _optional_text(data, "desc"),
        "seq": _text(data, "seq"),
    }


@dataclass(frozen=True)
class _Sequence(EnsemblPostEndpoint):
    """A sequence returned for one queried identifier."""

    query: str
    id: str
    desc: str | None
    seq: str

    @classmethod
    def extension(cls) -> str:
        return "/sequence/id"


@dataclass(frozen=True)
class CdnaSequence(_Sequence):
    """The cDNA sequence of a transcript or exon."""

    @classmethod
    def payload_template(cls) -> str:
        return '{"type": "cdna", "mask_feature" : 1, "ids" : {ids}}'

    @classmethod
    def from_json(cls, data: Any) -> CdnaSequence:
        """Build a cDNA sequence from one decoded JSON object."""
        return cls(**_sequence_fields(data))

    def input(self) -> str:
        return self.query


@dataclass(frozen=True)
class GenomicSequence(_Sequence):
    """The genomic sequence of a feature, exons in upper case, introns in lower."""

    @classmethod
    def payload_template(cls) -> str:
        return '{"type": "genomic", "mask_feature" : 1, "ids" : {ids}}'

    @classmethod
    def from_json(cls, data: Any) -> GenomicSequence:
        """Build a genomic sequence from one decoded JSON object."""
        return cls(**_sequence_fields(data))

    def input(self) -> str:
        return self.query

    def exons(self) -> list[str]:
        """The runs of upper-case bases, in order.

        Sequences shorter than two bases yield no exons.
        """
        if len(self.seq) < 2:
            return []
        return [
            "".join(run)
            for upper, run in groupby(self.seq, key=str.isupper)
            if upper
        ]


@dataclass(frozen=True)
class CodingSequence(_Sequence):
    """The coding sequence of a transcript."""

    @classmethod
    def payload_template(cls) -> str:
        return '{"type": "cds", "mask_feature" : 1, "ids" : {ids}}'

    @classmethod
    def from_json(cls, data: Any) -> CodingSequence:
        """Build a coding sequence from one decoded JSON object."""
        return cls(**_sequence_fields(data))

    def input(self) -> str:
        return self.query