"""
Batch labelling rules.

A card's print-runs are labelled A, B, ... Z in creation order. Once all 26
single letters are taken, labels continue as A1, A2, ...

Only the "A" prefix is used for suffixed labels. Existing data relies on
this numbering, so it is kept as is.
"""

import string
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from warfront.models.failure import ValidationError


class BatchType(str, Enum):
    NORMAL = "NORMAL"
    EXCLUSIVE = "EXCLUSIVE"
    LIMITED = "LIMITED"


SUFFIX_PREFIX = "A"


@dataclass(frozen=True)
class Batch:
    """Domain view of a batch."""

    id: int
    card_id: int
    label: str
    type: BatchType
    max_supply: int | None
    minted: int
    is_complete: bool

    @property
    def remaining(self) -> int | None:
        """Copies left to mint, or None when the batch is uncapped."""
        if self.max_supply is None:
            return None
        return self.max_supply - self.minted


def validate_supply(batch_type: BatchType, max_supply: int | None) -> None:
    """
    Check max supply against the batch type.

    Raises:
        ValidationError: NORMAL without a positive supply, or
            EXCLUSIVE/LIMITED with one.
    """
    if batch_type == BatchType.NORMAL and (not max_supply or max_supply <= 0):
        raise ValidationError("Normal batches require a positive max supply")
    if batch_type in (BatchType.EXCLUSIVE, BatchType.LIMITED) and max_supply:
        raise ValidationError("Exclusive and Limited batches should not have max supply")


def next_batch_label(used_labels: Iterable[str]) -> str:
    """Return the first free label for a card given the labels already used."""
    used = set(used_labels)

    for letter in string.ascii_uppercase:
        if letter not in used:
            return letter

    suffix = 1
    while f"{SUFFIX_PREFIX}{suffix}" in used:
        suffix += 1
    return f"{SUFFIX_PREFIX}{suffix}"
