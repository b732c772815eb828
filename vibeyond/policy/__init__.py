from .cards import (
    CardState,
    CardStore,
    Rating,
    RetentionAlgorithm,
    RetentionCard,
    card_id,
    create_card,
    ensure_cards,
    review_card,
)
from .retention import FsrsRetention, make_retention_from_config
from .selector import select_next

__all__ = [
    "CardState",
    "CardStore",
    "Rating",
    "RetentionAlgorithm",
    "RetentionCard",
    "card_id",
    "create_card",
    "ensure_cards",
    "review_card",
    "FsrsRetention",
    "make_retention_from_config",
    "select_next",
]
