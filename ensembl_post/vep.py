"""Results of the Variant Effect Predictor (VEP) endpoint."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeVar

from .descriptors import Biotype, Canonical, Consequence, HighInfPos
from .endpoint import EnsemblError, EnsemblPostEndpoint

__all__ = [
    "Allele",
    "AlleleParseError",
    "MotifConsequence",
    "ProteinConsequence",
    "RegulatoryConsequence",
    "TranscriptConsequence",
    "UnparseableTranscriptConsequence",
    "VEPAnalysis",
    "VEPResult",
    "VEPUnparseable",
    "parse_transcript_consequence",
    "parse_vep_response",
]

_VEP_EXTENSION = "/vep/human/hgvs"
_VEP_TEMPLATE = (
    '{"hgvs": 1, "numbers": 1, "canonical" : 1, "tsl": 1, "NMD" : 1, '
    '"hgvs_notations" : {ids}}'
)
_VEP_MAX_POST = 200

_MISSING: Any = object()
_T = TypeVar("_T")


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be a JSON object, not {data!r}")
    return data


def _check_str(value: Any, key: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string, not {value!r}")
    return value


def _check_int(value: Any, key: str, bits: int, signed: bool) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field {key!r} must be an integer, not {value!r}")
    if signed:
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        low, high = 0, (1 << bits) - 1
    if not low <= value <= high:
        raise ValueError(f"field {key!r} is out of range: {value}")
    return value


def _string(data: Mapping[str, Any], key: str, default: Any = _MISSING) -> str:
    value = data.get(key, _MISSING)
    if value is _MISSING:
        if default is _MISSING:
            raise ValueError(f"missing field {key!r}")
        return default
    return _check_str(value, key)


def _optional_string(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    return None if value is None else _check_str(value, key)


def _integer(
    data: Mapping[str, Any],
    key: str,
    bits: int,
    signed: bool,
    default: Any = _MISSING,
) -> int:
    value = data.get(key, _MISSING)
    if value is _MISSING:
        if default is _MISSING:
            raise ValueError(f"missing field {key!r}")
        return default
    return _check_int(value, key, bits, signed)


def _optional_integer(
    data: Mapping[str, Any], key: str, bits: int, signed: bool
) -> int | None:
    value = data.get(key)
    return None if value is None else _check_int(value, key, bits, signed)


def _sequence(
    data: Mapping[str, Any], key: str, convert: Callable[[Any], _T]
) -> tuple[_T, ...]:
    value = data.get(key, _MISSING)
    if value is _MISSING:
        return ()
    if not isinstance(value, list):
        raise ValueError(f"field {key!r} must be a list, not {value!r}")
    return tuple(convert(item) for item in value)


def _string_fields(data: Mapping[str, Any], exclude: frozenset[str]) -> dict[str, str]:
    fields = {key: value for key, value in data.items() if key not in exclude}
    for key, value in fields.items():
        _check_str(value, key)
    return dict(sorted(fields.items()))


class AlleleParseError(ValueError):
    """Raised when an allele string has no ``/`` separator."""

    def __init__(self) -> None:
        super().__init__("Allele strings need to contain a /")


@dataclass(frozen=True)
class Allele:
    """Reference and variant bases; an empty string stands for a deletion."""

    normal: str
    variant: str

    @classmethod
    def parse(cls, text: str) -> Allele:
        """Parse ``"REF/ALT"``, where ``-`` means no bases."""
        normal, slash, variant = text.partition("/")
        if not slash:
            raise AlleleParseError()
        return cls(
            normal="" if normal == "-" else normal,
            variant="" if variant == "-" else variant,
        )

    def __str__(self) -> str:
        return f"{self.normal or '-'}/{self.variant or '-'}"


@dataclass(frozen=True)
class ProteinConsequence:
    """Coding and protein-level details of a transcript consequence."""

    hgvsp: str
    hgvsc: str
    cds_start: int
    cds_end: int
    protein_start: int
    protein_end: int
    codons: str
    amino_acids: str

    @classmethod
    def from_json(cls, data: Any) -> ProteinConsequence:
        data = _mapping(data, "a protein consequence")
        return cls(
            hgvsp=_string(data, "hgvsp"),
            hgvsc=_string(data, "hgvsc"),
            cds_start=_integer(data, "cds_start", 32, False),
            cds_end=_integer(data, "cds_end", 32, False),
            protein_start=_integer(data, "protein_start", 32, False),
            protein_end=_integer(data, "protein_end", 32, False),
            codons=_string(data, "codons"),
            amino_acids=_string(data, "amino_acids"),
        )


@dataclass(frozen=True)
class TranscriptConsequence:
    """The predicted effect of a variant on one transcript."""

    transcript_id: str
    impact: str | None = None
    gene_id: str = ""
    gene_symbol: str = ""
    biotype: Biotype = Biotype.Unknown
    consequence_terms: tuple[Consequence, ...] = ()
    canonical: Canonical = Canonical.NONCANONICAL
    tsl: int | None = None
    nmd: str | None = None
    protein_consequences: ProteinConsequence | None = None
    cdna_start: int | None = None
    cdna_end: int | None = None
    exon: str | None = None
    intron: str | None = None

    @classmethod
    def from_json(cls, data: Any) -> TranscriptConsequence:
        data = _mapping(data, "a transcript consequence")
        try:
            protein: ProteinConsequence | None = ProteinConsequence.from_json(data)
        except ValueError:
            protein = None
        if "biotype" in data:
            biotype = Biotype.parse(data["biotype"])
        else:
            biotype = Biotype.Unknown
        if "canonical" in data:
            canonical = Canonical.from_int(
                _check_int(data["canonical"], "canonical", 32, True)
            )
        else:
            canonical = Canonical.NONCANONICAL
        return cls(
            transcript_id=_string(data, "transcript_id"),
            impact=_optional_string(data, "impact"),
            gene_id=_string(data, "gene_id", ""),
            gene_symbol=_string(data, "gene_symbol", ""),
            biotype=biotype,
            consequence_terms=_sequence(data, "consequence_terms", Consequence.parse),
            canonical=canonical,
            tsl=_optional_integer(data, "tsl", 8, False),
            nmd=_optional_string(data, "nmd"),
            protein_consequences=protein,
            cdna_start=_optional_integer(data, "cdna_start", 32, False),
            cdna_end=_optional_integer(data, "cdna_end", 32, False),
            exon=_optional_string(data, "exon"),
            intron=_optional_string(data, "intron"),
        )


@dataclass(frozen=True)
class UnparseableTranscriptConsequence:
    """A transcript consequence kept as raw string fields."""

    fields: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: Any) -> UnparseableTranscriptConsequence:
        data = _mapping(data, "a transcript consequence")
        return cls(fields=_string_fields(data, frozenset()))


def parse_transcript_consequence(
    data: Any,
) -> TranscriptConsequence | UnparseableTranscriptConsequence:
    """Decode a transcript consequence, falling back to its raw string fields."""
    try:
        return TranscriptConsequence.from_json(data)
    except ValueError:
        pass
    try:
        return UnparseableTranscriptConsequence.from_json(data)
    except ValueError:
        raise ValueError(
            f"data did not match any transcript consequence form: {data!r}"
        ) from None


@dataclass(frozen=True)
class RegulatoryConsequence:
    """The predicted effect of a variant on a regulatory feature."""

    regulatory_feature_id: str = ""
    biotype: str = ""
    consequence_terms: tuple[Consequence, ...] = ()

    @classmethod
    def from_json(cls, data: Any) -> RegulatoryConsequence:
        data = _mapping(data, "a regulatory consequence")
        return cls(
            regulatory_feature_id=_string(data, "regulatory_feature_id", ""),
            biotype=_string(data, "biotype", ""),
            consequence_terms=_sequence(data, "consequence_terms", Consequence.parse),
        )


@dataclass(frozen=True)
class MotifConsequence:
    """The predicted effect of a variant on a transcription-factor motif."""

    motif_feature_id: str = ""
    motif_name: str = ""
    high_inf_pos: HighInfPos = HighInfPos.null
    consequence_terms: tuple[Consequence, ...] = ()
    transcription_factors: tuple[str, ...] = ()
    strand: int = 0
    variant_allele: str = ""
    motif_pos: int = 0

    @classmethod
    def from_json(cls, data: Any) -> MotifConsequence:
        data = _mapping(data, "a motif consequence")
        if "high_inf_pos" in data:
            high_inf_pos = HighInfPos.parse(data["high_inf_pos"])
        else:
            high_inf_pos = HighInfPos.null
        return cls(
            motif_feature_id=_string(data, "motif_feature_id", ""),
            motif_name=_string(data, "motif_name", ""),
            high_inf_pos=high_inf_pos,
            consequence_terms=_sequence(data, "consequence_terms", Consequence.parse),
            transcription_factors=_sequence(
                data,
                "transcription_factors",
                lambda item: _check_str(item, "transcription_factors"),
            ),
            strand=_integer(data, "strand", 8, True, 0),
            variant_allele=_string(data, "variant_allele", ""),
            motif_pos=_integer(data, "motif_pos", 16, False, 0),
        )


@dataclass(frozen=True)
class VEPAnalysis(EnsemblPostEndpoint):
    """A successful VEP analysis of one HGVS notation.

    ``query`` holds the ``input`` notation that was sent.
    """

    query: str
    strand: int
    assembly_name: str
    seq_region_name: str
    start: int
    end: int
    allele: Allele
    id: str = ""
    most_severe_consequence: Consequence = Consequence.Unknown
    colocated_variants: tuple[Any, ...] = ()
    transcript_consequences: tuple[
        TranscriptConsequence | UnparseableTranscriptConsequence, ...
    ] = ()
    regulatory_feature_consequences: tuple[RegulatoryConsequence, ...] = ()
    motif_feature_consequences: tuple[MotifConsequence, ...] = ()

    @classmethod
    def extension(cls) -> str:
        return _VEP_EXTENSION

    @classmethod
    def payload_template(cls) -> str:
        return _VEP_TEMPLATE

    @classmethod
    def max_post_size(cls) -> int:
        return _VEP_MAX_POST

    @classmethod
    def from_json(cls, data: Any) -> VEPAnalysis:
        data = _mapping(data, "a VEP analysis")
        if "most_severe_consequence" in data:
            most_severe = Consequence.parse(data["most_severe_consequence"])
        else:
            most_severe = Consequence.Unknown
        return cls(
            query=_string(data, "input"),
            id=_string(data, "id", ""),
            strand=_integer(data, "strand", 8, True),
            assembly_name=_string(data, "assembly_name"),
            seq_region_name=_string(data, "seq_region_name"),
            most_severe_consequence=most_severe,
            colocated_variants=_sequence(data, "colocated_variants", lambda item: item),
            start=_integer(data, "start", 32, False),
            end=_integer(data, "end", 32, False),
            allele=Allele.parse(_string(data, "allele_string")),
            transcript_consequences=_sequence(
                data, "transcript_consequences", parse_transcript_consequence
            ),
            regulatory_feature_consequences=_sequence(
                data, "regulatory_feature_consequences", RegulatoryConsequence.from_json
            ),
            motif_feature_consequences=_sequence(
                data, "motif_feature_consequences", MotifConsequence.from_json
            ),
        )

    def input(self) -> str:
        return self.query


@dataclass(frozen=True)
class VEPUnparseable:
    """A VEP result kept as raw string fields; ``query`` is its input."""

    query: str
    id: str = ""
    fields: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: Any) -> VEPUnparseable:
        data = _mapping(data, "a VEP result")
        return cls(
            query=_string(data, "input"),
            id=_string(data, "id", ""),
            fields=_string_fields(data, frozenset({"input", "id"})),
        )


def parse_vep_response(data: Any) -> VEPAnalysis | VEPUnparseable:
    """Decode a VEP result, falling back to its raw string fields."""
    try:
        return VEPAnalysis.from_json(data)
    except ValueError:
        pass
    try:
        return VEPUnparseable.from_json(data)
    except ValueError:
        raise ValueError(f"data did not match any VEP response form: {data!r}") from None


def _ensembl_error(data: Any) -> EnsemblError:
    data = _mapping(data, "an Ensembl error")
    return EnsemblError(
        status_code=_integer(data, "status_code", 16, True),
        input=_string(data, "input"),
        error=_string(data, "error"),
    )


@dataclass(frozen=True)
class VEPResult(EnsemblPostEndpoint):
    """A VEP analysis, an Ensembl error, or whatever raw JSON came back."""

    value: VEPAnalysis | EnsemblError | Any

    @classmethod
    def extension(cls) -> str:
        return _VEP_EXTENSION

    @classmethod
    def payload_template(cls) -> str:
        return _VEP_TEMPLATE

    @classmethod
    def max_post_size(cls) -> int:
        return _VEP_MAX_POST

    @classmethod
    def from_json(cls, data: Any) -> VEPResult:
        try:
            return cls(VEPAnalysis.from_json(data))
        except ValueError:
            pass
        try:
            return cls(_ensembl_error(data))
        except ValueError:
            pass
        return cls(data)

    def input(self) -> str:
        value = self.value
        if isinstance(value, VEPAnalysis):
            return value.query
        if isinstance(value, EnsemblError):
            return value.input
        if isinstance(value, Mapping) and "input" in value:
            raw = value["input"]
            return raw if isinstance(raw, str) else "VALUE_ERROR"
        return "ERROR"