"""
Incremental page loading for lazily rendered lists.
"""

from pageable.controller import (
    FetchFailure,
    FetchPage,
    PageController,
    PageLoad,
    PageResult,
    default_key,
)
from pageable.observable import Observable, Subscription
from pageable.pagination import collect_all, iter_pages
from pageable.sentinel import ScrollSentinel

__all__ = [
    # Controller
    "FetchFailure",
    "FetchPage",
    "PageController",
    "PageLoad",
    "PageResult",
    "default_key",
    # Observation
    "Observable",
    "Subscription",
    # Drivers
    "collect_all",
    "iter_pages",
    "ScrollSentinel",
]
