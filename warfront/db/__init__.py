from warfront.db.database import get_session, init_db
from warfront.db.operations import (
    batch_to_model,
    create_card,
    delete_card,
    get_batch,
    get_card,
    get_card_by_custom_id,
    insert_batch,
    insert_owned_card,
    list_batches_for_card,
    list_cards,
    list_owned_cards,
    mark_card_claimed,
)

__all__ = [
    "batch_to_model",
    "create_card",
    "delete_card",
    "get_batch",
    "get_card",
    "get_card_by_custom_id",
    "get_session",
    "init_db",
    "insert_batch",
    "insert_owned_card",
    "list_batches_for_card",
    "list_cards",
    "list_owned_cards",
    "mark_card_claimed",
]
