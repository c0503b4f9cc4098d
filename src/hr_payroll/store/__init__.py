from . import intents
from .reducer import apply, prune_notifications
from .state_store import InMemoryPersistence, StateStore

__all__ = [
    'intents',
    'apply',
    'prune_notifications',
    'InMemoryPersistence',
    'StateStore',
]
