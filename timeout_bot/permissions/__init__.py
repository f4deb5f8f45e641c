from .policy import is_authorized
from .synchronizer import Overwrite, PermissionSynchronizer, SyncReport

__all__ = ["is_authorized", "Overwrite", "PermissionSynchronizer", "SyncReport"]
