"""Errors and the interface shared by every Ensembl POST endpoint."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

__all__ = ["EnsemblError", "EnsemblPostEndpoint", "EnsemblTopLevelError"]


class EnsemblError(Exception):
    """An error reported for one identifier sent to Ensembl."""

    def __init__(self, status_code: int, input: str, error: str) -> None:
        super().__init__(status_code, input, error)
        self.status_code = status_code
        self.input = input
        self.error = error

    def __str__(self) -> str:
        return (
            "Error accessing Ensembl data. Ensembl gave this response:\n"
            f"{self.error}"
        )

    def __repr__(self) -> str:
        return (
            f"EnsemblError(status_code={self.status_code!r}, "
            f"input={self.input!r}, error={self.error!r})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EnsemblError):
            return NotImplemented
        return (self.status_code, self.input, self.error) == (
            other.status_code,
            other.input,
            other.error,
        )

    def __hash__(self) -> int:
        return hash((self.status_code, self.input, self.error))


@dataclass(frozen=True)
class EnsemblTopLevelError:
    """An error object returned as the whole body of a response."""

    error: str


class EnsemblPostEndpoint(ABC):
    """What is needed to post identifiers to an endpoint and decode its results."""

    @classmethod
    @abstractmethod
    def extension(cls) -> str:
        """The URL path of the endpoint, e.g. ``"/vep/human/hgvs"``."""

    @classmethod
    @abstractmethod
    def payload_template(cls) -> str:
        """JSON body with a single ``{ids}`` slot for the identifier list."""

    @classmethod
    def max_post_size(cls) -> int:
        """Largest number of identifiers sent in one request."""
        return 50

    @classmethod
    def build_payload(cls, ids: Iterable[str]) -> str:
        """Fill the payload template with the given identifiers."""
        encoded = json.dumps(list(ids), separators=(",", ":"))
        return cls.payload_template().replace("{ids}", encoded)

    @classmethod
    @abstractmethod
    def from_json(cls, data: Any) -> EnsemblPostEndpoint:
        """Build an instance from one decoded JSON result."""

    @abstractmethod
    def input(self) -> str:
        """The identifier this result answers."""