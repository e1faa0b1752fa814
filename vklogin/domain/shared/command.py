"""Command and CommandHandler base classes with an authentication gate."""

from abc import ABCMeta, abstractmethod
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from functools import wraps
from typing import Any, ClassVar, Generic, TypeVar, dataclass_transform

from pydantic import BaseModel


class Command(BaseModel):
    __public__: ClassVar[bool] = False


class Result(BaseModel): ...


C = TypeVar("C", bound=Command)
R = TypeVar("R", bound=Result)

# Unbound async handler method: (self, cmd) -> Coroutine -> Result
_HandlerMethod = Callable[..., Coroutine[Any, Any, Any]]


def _wrap_run_with_auth(original_run: _HandlerMethod) -> _HandlerMethod:
    """Wrap run() so non-public messages require an authenticated principal."""

    @wraps(original_run)
    async def auth_wrapped_run(self: Any, cmd: Any) -> Any:
        from vklogin.domain.auth.model.principal import CurrentAccount
        from vklogin.domain.shared.error import AuthorizationError

        if getattr(type(cmd), "__public__", False):
            return await original_run(self, cmd)

        principal = getattr(self, "principal", None)
        if not isinstance(principal, CurrentAccount):
            raise AuthorizationError(
                "Authentication required",
                code="missing_token",
            )

        return await original_run(self, cmd)

    return auth_wrapped_run


@dataclass_transform()
class _CommandHandlerMeta(ABCMeta):
    """Metaclass that combines ABC with auto-dataclass and the auth gate for subclasses."""

    def __new__(mcs, name: str, bases: tuple[type, ...], namespace: dict[str, Any]):
        cls = super().__new__(mcs, name, bases, namespace)
        if any(isinstance(b, mcs) for b in bases):
            cls = dataclass(cls)

            original_run = cls.__dict__.get("run")
            if original_run is not None:
                cls.run = _wrap_run_with_auth(original_run)

        return cls


class CommandHandler(Generic[C, R], metaclass=_CommandHandlerMeta):
    """Base class for command handlers. Subclasses are automatically dataclasses.

    Commands are private unless they set ``__public__ = True``; private ones
    need the handler to carry a ``principal: CurrentAccount`` field.
    """

    @abstractmethod
    async def run(self, cmd: C) -> R: ...
