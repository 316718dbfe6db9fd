"""Batched asynchronous access to the Ensembl REST API POST endpoints: VEP and sequences."""

__version__ = "0.6.0"