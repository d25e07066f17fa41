from .urls import fix_url, same_url

__all__ = [
    "fix_url",
    "same_url",
]
