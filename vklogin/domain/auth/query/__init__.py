"""Auth domain queries."""

from .get_linked_profile import GetLinkedProfile, GetLinkedProfileHandler, LinkedProfile

__all__ = ["GetLinkedProfile", "GetLinkedProfileHandler", "LinkedProfile"]
