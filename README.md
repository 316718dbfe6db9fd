# ensembl-post

This package gives asynchronous access to the POST endpoints of the Ensembl REST API. Lookups
from any number of clients are collected for a short time and merged into
POST requests. Each caller then gets back its own parsed result.

## Installation

```
pip install ensembl-post
```

## Usage

A `ensembl_post.api.Getter` runs a background task. The task waits
`wait_delay` seconds (0.5 by default), takes every queued request and posts
them in chunks of the endpoint's `max_post_size()`. Each `Client` from
`getter.client()` can be shared between tasks:

```python
import asyncio

from ensembl_post.api import Getter
from ensembl_post.vep import VEPAnalysis


async def main():
    async with Getter(VEPAnalysis) as getter:
        client = getter.client()
        results = await asyncio.gather(
            client.get("3:g.46373453_46373484del"),
            client.get("10:g.72346580_72346583dup"),
        )
    for analysis in results:
        print(analysis.input(), analysis.most_severe_consequence)


asyncio.run(main())
```

`Getter` also takes an existing `httpx.AsyncClient` (`http_client=`), a
different base URL (`server=`) and a different delay (`wait_delay=`). Outside
`async with`, call `start()` inside a running event loop, and `await close()`
when you are done. `close()` finishes the requests still in the queue. A
`Client.get` call after `close()` raises `RuntimeError`.

The supported endpoints are:

- `ensembl_post.vep.VEPAnalysis` and `ensembl_post.vep.VEPResult`, for the
  Variant Effect Predictor (`/vep/human/hgvs`). These take HGVS notations and
  send up to 200 per request. `VEPResult` holds a `VEPAnalysis`, an
  `EnsemblError`, or the raw JSON when neither fits.
- `ensembl_post.sequence.GenomicSequence`, `CdnaSequence` and
  `CodingSequence`, for `/sequence/id`. These take stable identifiers and
  send up to 50 per request.

Any other endpoint can be used by subclassing
`ensembl_post.endpoint.EnsemblPostEndpoint`. A subclass defines
`extension()`, `payload_template()` (with one `{ids}` slot), `from_json()`
and `input()`. It may also override `max_post_size()`.

## Errors

A failed lookup raises `ensembl_post.endpoint.EnsemblError`. The error has
`status_code`, `input` and `error` attributes. Responses with status 403, 408,
429, 502 and 503 are tried up to three times in all before the error is
raised. After such a response the getter pauses before it posts again: 5
minutes for 403, 1 minute for 408, 10 seconds for 502 and 503, and the
`X-RateLimit-Reset` header's value (60 seconds by default) for 429. An
identifier that gets no result in a successful response fails with status
404. Warnings are logged through the `logging` module under
`ensembl_post.api`.

## Sequences

Genomic sequences come back with introns in lower case. To get the exons:

```python
from ensembl_post.sequence import GenomicSequence

seq = GenomicSequence(query="", id="", desc=None, seq="acACGTacgtACGTacgt")
assert seq.exons() == ["ACGT", "ACGT"]
```

## Descriptors

`ensembl_post.descriptors` holds the enumerations used in VEP results:
`Consequence`, `Biotype`, `Canonical`, `HighInfPos` and `Strand`.
`ensembl_post.vep.Allele.parse("A/-")` splits an allele string into
`normal` and `variant`. A `-` becomes an empty string.

## Command line

```
ensembl-post --hgvs 3:g.46373453_46373484del --sequence ENST00000237014
```

This looks up each `--hgvs` notation with VEP and fetches each `--sequence`
identifier's cDNA sequence, then prints the results. Both options can be
repeated. With neither option, a pair of sample notations and a pair of
sample identifiers are used. The first error is printed to standard error,
and the exit status is then 1.

## Limits

Only the endpoints listed above are built in. VEP lookups go to the human
HGVS endpoint alone. Results are not cached, and the package has no server
or storage of its own.

## Tests

```
pip install -e ".[test]"
pytest
```