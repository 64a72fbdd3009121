from edumanager.core.modules.sequence.service import SequenceService


class IdAllocator:
    """Hands out the next integer id for a named sequence."""

    def __init__(self, store: SequenceService) -> None:
        self._store = store

    async def next_id(self, sequence_name: str) -> int:
        """Return a value never returned before for this name, unless the sequence was reset in between."""
        await self._store.ensure_initialized(sequence_name)
        return await self._store.increment_and_get(sequence_name)
