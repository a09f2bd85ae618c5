"""Tests for batch labelling, creation, completion and minting."""

import string

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from warfront.db.operations import insert_batch
from warfront.models.batch import Batch, BatchType, next_batch_label, validate_supply
from warfront.models.db import CardDB, UserDB
from warfront.models.failure import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from warfront.services.batch_allocator import (
    add_batch,
    list_batches,
    mark_batch_complete,
    mint_from_batch,
)


class TestNextBatchLabel:
    def test_first_label_is_a(self) -> None:
        """A card with no batches starts at A."""
        assert next_batch_label([]) == "A"

    def test_next_letter(self) -> None:
        assert next_batch_label(["A"]) == "B"

    def test_fills_gaps(self) -> None:
        """A deleted batch's label is reused first."""
        assert next_batch_label(["A", "C"]) == "B"

    def test_suffix_after_alphabet(self) -> None:
        """All 26 letters used moves on to A1."""
        assert next_batch_label(string.ascii_uppercase) == "A1"

    def test_suffix_skips_used(self) -> None:
        used = list(string.ascii_uppercase) + ["A1", "A2"]
        assert next_batch_label(used) == "A3"

    def test_suffix_gap(self) -> None:
        used = list(string.ascii_uppercase) + ["A2"]
        assert next_batch_label(used) == "A1"


class TestValidateSupply:
    def test_normal_requires_supply(self) -> None:
        with pytest.raises(ValidationError, match="Normal batches require a positive max supply"):
            validate_supply(BatchType.NORMAL, None)

    @pytest.mark.parametrize("supply", [0, -5])
    def test_normal_rejects_non_positive(self, supply: int) -> None:
        with pytest.raises(ValidationError):
            validate_supply(BatchType.NORMAL, supply)

    @pytest.mark.parametrize("batch_type", [BatchType.EXCLUSIVE, BatchType.LIMITED])
    def test_special_batches_reject_supply(self, batch_type: BatchType) -> None:
        with pytest.raises(
            ValidationError, match="Exclusive and Limited batches should not have max supply"
        ):
            validate_supply(batch_type, 10)

    def test_valid_combinations(self) -> None:
        validate_supply(BatchType.NORMAL, 100)
        validate_supply(BatchType.EXCLUSIVE, None)
        validate_supply(BatchType.LIMITED, None)


class TestBatchModel:
    def test_remaining(self) -> None:
        batch = Batch(1, 1, "A", BatchType.NORMAL, 10, 4, False)
        assert batch.remaining == 6

    def test_remaining_uncapped(self) -> None:
        batch = Batch(1, 1, "A", BatchType.LIMITED, None, 4, False)
        assert batch.remaining is None


class TestAddBatch:
    async def test_first_batch(
        self, session: AsyncSession, card: CardDB, editor: tuple[UserDB, str]
    ) -> None:
        """First NORMAL batch gets label A with nothing minted."""
        user, _ = editor

        batch = await add_batch(session, user, "X1", BatchType.NORMAL, 100)

        assert batch.label == "A"
        assert batch.type == BatchType.NORMAL
        assert batch.max_supply == 100
        assert batch.minted == 0
        assert batch.is_complete is False

    async def test_second_batch_gets_b(
        self, session: AsyncSession, card: CardDB, editor: tuple[UserDB, str]
    ) -> None:
        user, _ = editor
        await add_batch(session, user, "X1", BatchType.NORMAL, 100)

        batch = await add_batch(session, user, "X1", BatchType.EXCLUSIVE)

        assert batch.label == "B"
        assert batch.max_supply is None

    async def test_exclusive_with_supply_rejected(
        self, session: AsyncSession, card: CardDB, editor: tuple[UserDB, str]
    ) -> None:
        user, _ = editor
        with pytest.raises(ValidationError):
            await add_batch(session, user, "X1", BatchType.EXCLUSIVE, 5)

        assert await list_batches(session, "X1") == []

    async def test_unknown_card(self, session: AsyncSession, editor: tuple[UserDB, str]) -> None:
        user, _ = editor
        with pytest.raises(NotFoundError, match="Card not found"):
            await add_batch(session, user, "NOPE", BatchType.LIMITED)

    async def test_requires_editor(
        self, session: AsyncSession, card: CardDB, player: tuple[UserDB, str]
    ) -> None:
        user, _ = player
        with pytest.raises(PermissionDeniedError):
            await add_batch(session, user, "X1", BatchType.LIMITED)

    async def test_suffix_labels_after_z(
        self, session: AsyncSession, card: CardDB, editor: tuple[UserDB, str]
    ) -> None:
        """The 27th batch is labelled A1."""
        user, _ = editor
        for letter in string.ascii_uppercase:
            await insert_batch(session, card.id, letter, BatchType.LIMITED, None)

        batch = await add_batch(session, user, "X1", BatchType.LIMITED)

        assert batch.label == "A1"

    async def test_list_batches_in_creation_order(
        self, session: AsyncSession, card: CardDB, editor: tuple[UserDB, str]
    ) -> None:
        user, _ = editor
        await add_batch(session, user, "X1", BatchType.NORMAL, 10)
        await add_batch(session, user, "X1", BatchType.LIMITED)

        labels = [b.label for b in await list_batches(session, "X1")]

        assert labels == ["A", "B"]


class TestCompleteAndMint:
    async def test_mark_complete(
        self, session: AsyncSession, card: CardDB, editor: tuple[UserDB, str]
    ) -> None:
        user, _ = editor
        batch = await add_batch(session, user, "X1", BatchType.NORMAL, 10)

        completed = await mark_batch_complete(session, user, batch.id)

        assert completed.is_complete is True

    async def test_mark_complete_missing(
        self, session: AsyncSession, editor: tuple[UserDB, str]
    ) -> None:
        user, _ = editor
        with pytest.raises(NotFoundError):
            await mark_batch_complete(session, user, 999)

    async def test_mint_within_supply(
        self, session: AsyncSession, card: CardDB, editor: tuple[UserDB, str]
    ) -> None:
        user, _ = editor
        batch = await add_batch(session, user, "X1", BatchType.NORMAL, 10)

        minted = await mint_from_batch(session, user, batch.id, 10)

        assert minted.minted == 10
        assert minted.remaining == 0

    async def test_mint_past_supply_refused(
        self, session: AsyncSession, card: CardDB, editor: tuple[UserDB, str]
    ) -> None:
        """Minting never pushes a batch past its max supply."""
        user, _ = editor
        batch = await add_batch(session, user, "X1", BatchType.NORMAL, 10)
        await mint_from_batch(session, user, batch.id, 8)

        with pytest.raises(ConflictError, match="exceed the max supply"):
            await mint_from_batch(session, user, batch.id, 3)

        [current] = await list_batches(session, "X1")
        assert current.minted == 8

    async def test_mint_complete_batch_refused(
        self, session: AsyncSession, card: CardDB, editor: tuple[UserDB, str]
    ) -> None:
        user, _ = editor
        batch = await add_batch(session, user, "X1", BatchType.LIMITED)
        await mark_batch_complete(session, user, batch.id)

        with pytest.raises(ConflictError, match="already complete"):
            await mint_from_batch(session, user, batch.id)

    async def test_mint_uncapped(
        self, session: AsyncSession, card: CardDB, editor: tuple[UserDB, str]
    ) -> None:
        user, _ = editor
        batch = await add_batch(session, user, "X1", BatchType.LIMITED)

        minted = await mint_from_batch(session, user, batch.id, 500)

        assert minted.minted == 500

    async def test_mint_non_positive_count(
        self, session: AsyncSession, card: CardDB, editor: tuple[UserDB, str]
    ) -> None:
        user, _ = editor
        batch = await add_batch(session, user, "X1", BatchType.LIMITED)

        with pytest.raises(ValidationError):
            await mint_from_batch(session, user, batch.id, 0)
