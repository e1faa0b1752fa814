from dataclasses import dataclass
from typing import Any, dataclass_transform


@dataclass_transform()
class _ServiceMeta(type):
    """Turns every Service subclass into a dataclass of its collaborators."""

    def __new__(mcs, name: str, bases: tuple[type, ...], namespace: dict[str, Any]):
        cls = super().__new__(mcs, name, bases, namespace)
        if not any(isinstance(base, mcs) for base in bases):
            return cls
        return dataclass(cls)


class Service(metaclass=_ServiceMeta):
    """Base for domain services.

    Collaborators are declared as underscore-prefixed fields and passed by
    keyword, e.g. ``AuthService(_link_repo=...)``.
    """
