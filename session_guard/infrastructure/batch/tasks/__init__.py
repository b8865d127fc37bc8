from .cleanup import CLEANUP_TIMEOUT, ExpiredSessionCleanupTask

__all__ = ["CLEANUP_TIMEOUT", "ExpiredSessionCleanupTask"]
