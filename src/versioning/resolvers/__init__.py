"""Version resolvers for installed package trees."""

from .npm import InstalledVersionResolver, InvalidSpecError

__all__ = [
    "InstalledVersionResolver",
    "InvalidSpecError",
]
