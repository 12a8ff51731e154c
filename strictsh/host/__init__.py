from .managed_process import ManagedProcess, normalize_status, resolve_start_method

__all__ = [
    "ManagedProcess",
    "normalize_status",
    "resolve_start_method",
]
