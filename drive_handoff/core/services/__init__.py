"""
Upload services: destination resolution, session brokering, folder listing
and client-side batch coordination.
"""

from .batch_coordinator import BatchCoordinator, TaskListener
from .destination import DestinationResolver, select_destination
from .folder_directory import FolderDirectory
from .session_broker import SessionBroker
from .transfer_policy import disconnect_counts_as_success, is_success_status, progress_percent

__all__ = [
    "BatchCoordinator",
    "TaskListener",
    "DestinationResolver",
    "select_destination",
    "FolderDirectory",
    "SessionBroker",
    "disconnect_counts_as_success",
    "is_success_status",
    "progress_percent",
]
