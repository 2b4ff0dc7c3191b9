from .controller import FETCH_FAILED_MESSAGE, FeedState, PaginationController
from .trigger import VisibilityTrigger
from .visibility import ReportedVisibility

__all__ = [
    "FETCH_FAILED_MESSAGE",
    "FeedState",
    "PaginationController",
    "ReportedVisibility",
    "VisibilityTrigger",
]
