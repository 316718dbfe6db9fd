"""Command line entry point that fetches VEP analyses and cDNA sequences."""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Iterable, Sequence

import httpx

from .api import Getter
from .endpoint import EnsemblError
from .sequence import CdnaSequence
from .vep import VEPAnalysis

__all__ = ["DEFAULT_HGVS", "DEFAULT_SEQUENCES", "main", "run"]

DEFAULT_HGVS = ("3:g.46373453_46373484del", "10:g.72346580_72346583dup")
DEFAULT_SEQUENCES = ("ENST00000237014", "ENSE00003556666")


async def run(
    hgvs_ids: Iterable[str], sequence_ids: Iterable[str]
) -> tuple[list[VEPAnalysis], list[CdnaSequence]]:
    """Fetch VEP analyses and cDNA sequences; raise the first error met."""
    hgvs_ids = list(hgvs_ids)
    sequence_ids = list(sequence_ids)
    async with httpx.AsyncClient() as http:
        async with Getter(VEPAnalysis, http_client=http) as vep_getter, Getter(
            CdnaSequence, http_client=http
        ) as sequence_getter:
            vep_client = vep_getter.client()
            sequence_client = sequence_getter.client()
            results = await asyncio.gather(
                *(vep_client.get(i) for i in hgvs_ids),
                *(sequence_client.get(i) for i in sequence_ids),
                return_exceptions=True,
            )
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return list(results[: len(hgvs_ids)]), list(results[len(hgvs_ids) :])


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Fetch VEP analyses and cDNA sequences from Ensembl."
    )
    parser.add_argument(
        "--hgvs", action="append", default=[], metavar="ID", help="HGVS notation"
    )
    parser.add_argument(
        "--sequence",
        action="append",
        default=[],
        metavar="ID",
        help="transcript or exon identifier",
    )
    args = parser.parse_args(argv)
    if not args.hgvs and not args.sequence:
        args.hgvs = list(DEFAULT_HGVS)
        args.sequence = list(DEFAULT_SEQUENCES)
    try:
        veps, sequences = asyncio.run(run(args.hgvs, args.sequence))
    except (EnsemblError, RuntimeError) as err:
        print(err, file=sys.stderr)
        return 1
    for result in (*veps, *sequences):
        print(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())