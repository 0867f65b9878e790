"""Repository dispatch notifications."""

from release_action.dispatch.base import DispatchNotifier
from release_action.dispatch.config import DispatchConfig
from release_action.dispatch.notifier import GitHubDispatcher

__all__ = ["DispatchConfig", "DispatchNotifier", "GitHubDispatcher"]
