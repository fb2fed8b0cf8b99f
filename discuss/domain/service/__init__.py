"""Domain services."""

from .aggregator import FetchFailure, ScopeAggregator, ScopeView
from .base import Service
from .cache import CacheEntry, ViewCache
from .comment_service import CommentService
from .composition import (
    AbuseChallengeMediator,
    AttemptState,
    CompositionAttempt,
    CompositionView,
)
from .events import (
    CommentDeleted,
    CommentEdited,
    CommentEvent,
    CommentPosted,
    EventBus,
)
from .sanitize import sanitize_text
from .synchronizer import CacheSynchronizer, SyncReport
from .tree import ReplyTree, ReplyTreeBuilder, ThreadNode

__all__ = [
    "AbuseChallengeMediator",
    "AttemptState",
    "CacheEntry",
    "CacheSynchronizer",
    "CommentDeleted",
    "CommentEdited",
    "CommentEvent",
    "CommentPosted",
    "CommentService",
    "CompositionAttempt",
    "CompositionView",
    "EventBus",
    "FetchFailure",
    "ReplyTree",
    "ReplyTreeBuilder",
    "ScopeAggregator",
    "ScopeView",
    "Service",
    "SyncReport",
    "ThreadNode",
    "ViewCache",
    "sanitize_text",
]
