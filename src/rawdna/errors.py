"""Exceptions and non-fatal diagnostics.

Fatal problems are exceptions (``FormatError``, ``ConfigurationError``).
Non-fatal ones (``ConflictWarning``, ``OrderingWarning``) are plain records:
the module that detects them logs them and keeps going.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class FormatError(ValueError):
    """Raised when a raw data record cannot be parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        line_number: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.line_number = line_number

    def __str__(self) -> str:
        where = []
        if self.path:
            where.append(str(self.path))
        if self.line_number is not None:
            where.append(f"line {self.line_number}")
        if where:
            return f"{':'.join(where)}: {self.message}"
        return self.message


class ConfigurationError(ValueError):
    """Raised before processing starts when the run cannot be configured."""


@dataclass(frozen=True)
class ConflictWarning:
    """Two files report different genotypes for the same SNP id."""

    snp_id: str
    new_file: str
    existing_file: str
    new_genotype: str
    existing_genotype: str

    def __str__(self) -> str:
        return (
            f"Conflict for {self.snp_id}: {self.new_file} vs {self.existing_file}, "
            f"values {self.new_genotype} vs {self.existing_genotype}"
        )


@dataclass(frozen=True)
class OrderingWarning:
    """Input is not sorted by chromosome, then position."""

    chromosome: int
    position: int
    previous_chromosome: int
    previous_position: int

    def __str__(self) -> str:
        if self.chromosome < self.previous_chromosome:
            return (
                f"Chr {self.chromosome} encountered after Chr {self.previous_chromosome}. "
                "The file is not properly sorted."
            )
        return (
            f"Chr {self.chromosome} position {self.position} encountered after position "
            f"{self.previous_position}. The file is not properly sorted."
        )
