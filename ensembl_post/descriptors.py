"""Enumerations describing transcripts, strands and variant consequences."""

from __future__ import annotations

import functools
from enum import Enum

__all__ = [
    "Biotype",
    "Canonical",
    "Consequence",
    "HighInfPos",
    "Strand",
    "StrandError",
]


@functools.total_ordering
class _OrderedEnum(Enum):
    """Enum whose members order by declaration position."""

    def __lt__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        names = type(self)._member_names_
        return names.index(self.name) < names.index(other.name)

    def __str__(self) -> str:
        return str(self.value)


def _parse_member(cls, text, aliases=None):
    """Look up a member of ``cls`` by its string value or an alias."""
    if isinstance(text, cls):
        return text
    if not isinstance(text, str):
        raise ValueError(f"{text!r} is not a valid {cls.__name__}")
    key = (aliases or {}).get(text, text)
    try:
        return cls(key)
    except ValueError:
        raise ValueError(f"{text!r} is not a valid {cls.__name__}") from None


class Canonical(_OrderedEnum):
    """Whether a transcript is the canonical one for its gene."""

    CANONICAL = 1
    NONCANONICAL = 0

    @classmethod
    def from_int(cls, value: int) -> Canonical:
        """Zero means non-canonical; any other number means canonical."""
        return cls.NONCANONICAL if value == 0 else cls.CANONICAL

    def to_int(self) -> int:
        return self.value


class StrandError(ValueError):
    """Raised when a value does not name a DNA strand."""

    def __init__(self, value: object) -> None:
        self.value = value
        if isinstance(value, int) and not isinstance(value, bool):
            hint = "Use '1' or '-1'."
        else:
            hint = "Use '+' or '-'."
        super().__init__(f"`{value}` is not a valid strand designator. {hint}")


class Strand(_OrderedEnum):
    """The strand of a genomic feature."""

    PLUS = "+"
    MINUS = "-"

    @classmethod
    def parse(cls, value: int | str | Strand) -> Strand:
        """Accept ``"+"``/``"1"``/``1`` or ``"-"``/``"-1"``/``-1``."""
        if isinstance(value, Strand):
            return value
        if isinstance(value, bool):
            raise StrandError(str(value))
        if isinstance(value, int):
            if value == 1:
                return cls.PLUS
            if value == -1:
                return cls.MINUS
            raise StrandError(value)
        if isinstance(value, str):
            if value in ("+", "1"):
                return cls.PLUS
            if value in ("-", "-1"):
                return cls.MINUS
        raise StrandError(str(value))

    def to_int(self) -> int:
        return 1 if self is Strand.PLUS else -1

    def __repr__(self) -> str:
        return self.value


_CONSEQUENCE_ALIASES = {
    "5_prime_UTR_variant": "five_prime_UTR_variant",
    "3_prime_UTR_variant": "three_prime_UTR_variant",
}


class Consequence(_OrderedEnum):
    """Sequence Ontology consequence terms, most severe first."""

    transcript_ablation = "transcript_ablation"
    splice_acceptor_variant = "splice_acceptor_variant"
    splice_donor_variant = "splice_donor_variant"
    stop_gained = "stop_gained"
    frameshift_variant = "frameshift_variant"
    stop_lost = "stop_lost"
    start_lost = "start_lost"
    transcript_amplification = "transcript_amplification"
    feature_elongation = "feature_elongation"
    feature_truncation = "feature_truncation"
    inframe_insertion = "inframe_insertion"
    inframe_deletion = "inframe_deletion"
    missense_variant = "missense_variant"
    protein_altering_variant = "protein_altering_variant"
    splice_donor_5th_base_variant = "splice_donor_5th_base_variant"
    splice_region_variant = "splice_region_variant"
    splice_donor_region_variant = "splice_donor_region_variant"
    splice_polypyrimidine_tract_variant = "splice_polypyrimidine_tract_variant"
    incomplete_terminal_codon_variant = "incomplete_terminal_codon_variant"
    start_retained_variant = "start_retained_variant"
    stop_retained_variant = "stop_retained_variant"
    synonymous_variant = "synonymous_variant"
    coding_sequence_variant = "coding_sequence_variant"
    mature_miRNA_variant = "mature_miRNA_variant"
    five_prime_UTR_variant = "five_prime_UTR_variant"
    three_prime_UTR_variant = "three_prime_UTR_variant"
    non_coding_transcript_exon_variant = "non_coding_transcript_exon_variant"
    intron_variant = "intron_variant"
    NMD_transcript_variant = "NMD_transcript_variant"
    non_coding_transcript_variant = "non_coding_transcript_variant"
    coding_transcript_variant = "coding_transcript_variant"
    upstream_gene_variant = "upstream_gene_variant"
    downstream_gene_variant = "downstream_gene_variant"
    TFBS_ablation = "TFBS_ablation"
    TFBS_amplification = "TFBS_amplification"
    TF_binding_site_variant = "TF_binding_site_variant"
    regulatory_region_ablation = "regulatory_region_ablation"
    regulatory_region_amplification = "regulatory_region_amplification"
    regulatory_region_variant = "regulatory_region_variant"
    intergenic_variant = "intergenic_variant"
    sequence_variant = "sequence_variant"
    Unknown = "Unknown"

    @classmethod
    def parse(cls, text: str) -> Consequence:
        """Parse a consequence term, accepting the numeric UTR spellings."""
        return _parse_member(cls, text, _CONSEQUENCE_ALIASES)


class HighInfPos(_OrderedEnum):
    """Whether a variant falls in a high-information position of a motif."""

    Y = "Y"
    N = "N"
    null = "null"

    @classmethod
    def parse(cls, text: str) -> HighInfPos:
        return _parse_member(cls, text)

    def __bool__(self) -> bool:
        return self is HighInfPos.Y


class Biotype(_OrderedEnum):
    """Ensembl gene and transcript biotypes."""

    TR_V_gene = "TR_V_gene"
    LRG_gene = "LRG_gene"
    miRNA = "miRNA"
    rRNA = "rRNA"
    tRNA = "tRNA"
    unprocessed_pseudogene = "unprocessed_pseudogene"
    transcribed_pseudogene = "transcribed_pseudogene"
    transcribed_processed_pseudogene = "transcribed_processed_pseudogene"
    IG_D_gene = "IG_D_gene"
    TR_D_gene = "TR_D_gene"
    lncRNA = "lncRNA"
    IG_V_pseudogene = "IG_V_pseudogene"
    TR_J_gene = "TR_J_gene"
    nonsense_mediated_decay = "nonsense_mediated_decay"
    transcribed_unitary_pseudogene = "transcribed_unitary_pseudogene"
    sRNA = "sRNA"
    TR_J_pseudogene = "TR_J_pseudogene"
    RNase_MRP_RNA = "RNase_MRP_RNA"
    telomerase_RNA = "telomerase_RNA"
    unitary_pseudogene = "unitary_pseudogene"
    snRNA = "snRNA"
    Y_RNA = "Y_RNA"
    IG_C_pseudogene = "IG_C_pseudogene"
    cdna_update = "cdna_update"
    IG_pseudogene = "IG_pseudogene"
    ribozyme = "ribozyme"
    ncRNA_pseudogene = "ncRNA_pseudogene"
    artifact = "artifact"
    pseudogene = "pseudogene"
    rRNA_pseudogene = "rRNA_pseudogene"
    Mt_rRNA = "Mt_rRNA"
    IG_J_pseudogene = "IG_J_pseudogene"
    non_stop_decay = "non_stop_decay"
    aligned_transcript = "aligned_transcript"
    TR_C_gene = "TR_C_gene"
    mRNA = "mRNA"
    processed_pseudogene = "processed_pseudogene"
    TEC = "TEC"
    scRNA = "scRNA"
    ccds_gene = "ccds_gene"
    scaRNA = "scaRNA"
    vault_RNA = "vault_RNA"
    Mt_tRNA = "Mt_tRNA"
    other = "other"
    misc_RNA = "misc_RNA"
    ncRNA = "ncRNA"
    retained_intron = "retained_intron"
    TR_V_pseudogene = "TR_V_pseudogene"
    protein_coding = "protein_coding"
    IG_J_gene = "IG_J_gene"
    snoRNA = "snoRNA"
    RNase_P_RNA = "RNase_P_RNA"
    translated_processed_pseudogene = "translated_processed_pseudogene"
    antisense_RNA = "antisense_RNA"
    transcribed_unprocessed_pseudogene = "transcribed_unprocessed_pseudogene"
    protein_coding_LoF = "protein_coding_LoF"
    protein_coding_CDS_not_defined = "protein_coding_CDS_not_defined"
    processed_transcript = "processed_transcript"
    IG_V_gene = "IG_V_gene"
    IG_C_gene = "IG_C_gene"
    Unknown = "Unknown"

    @classmethod
    def parse(cls, text: str) -> Biotype:
        return _parse_member(cls, text)