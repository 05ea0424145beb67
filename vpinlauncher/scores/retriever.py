"""High score retrieval for a selected table."""

import logging

from vpinlauncher.scores.nvram import ScoreStore, ScoreStoreError
from vpinlauncher.scores.score_types import ScoreResult
from vpinlauncher.scores.store_mapping import TitleToStoreResolver

logger = logging.getLogger(__name__)


class ScoreRetriever:
    """
    Fetch the persisted high score for a table title.

    Each call reads storage again; nothing is cached and nothing is retried.
    """

    def __init__(self, resolver: TitleToStoreResolver, store: ScoreStore):
        self.resolver = resolver
        self.store = store

    def fetch(self, display_title: str) -> ScoreResult:
        """
        Fetch the high score for a title.

        Args:
            display_title: Title as shown in the table list

        Returns:
            ScoreResult (found, unsupported, or failed); never raises for
            storage problems
        """
        store_id = self.resolver.resolve(display_title)
        if store_id is None:
            return ScoreResult.unsupported()

        try:
            contents = self.store.read(store_id)
        except ScoreStoreError as e:
            logger.warning(f"Failed reading score store {store_id}: {e}")
            return ScoreResult.failed(f"read error: {e}")

        try:
            score = self.store.parse(store_id, contents)
        except ScoreStoreError as e:
            logger.warning(f"Failed parsing score from {store_id}: {e}")
            return ScoreResult.failed(f"parse error: {e}")

        logger.debug(f"High score for '{display_title}' ({store_id}): {score}")
        return ScoreResult.found(score)
