import abc
import argparse
import asyncio
import dataclasses
from typing import Any, Generic, Self, TypeVar

from rich.console import Console


def cli_arg(
    flag: str,
    *,
    required: bool = False,
    default: Any = None,
    type: Any = str,
    help: str = "",
    action: str | None = None,
) -> Any:
    '''
    A dataclass field that also knows how to add itself
    to an argparse parser, flags (`store_true`) take no `type`.
    '''
    argparse_kwargs: dict[str, Any] = {"default": default, "help": help}
    if required:
        argparse_kwargs["required"] = True
    if action is None:
        argparse_kwargs["type"] = type
    else:
        argparse_kwargs["action"] = action

    return dataclasses.field(
        default=default,
        metadata={"flag": flag, "argparse": argparse_kwargs},
    )


class ArgparseModel:
    '''
    Base for `@dataclass` argument models whose fields
    are declared with `cli_arg`.
    '''

    @classmethod
    def register(cls, parser: argparse.ArgumentParser) -> None:
        for field in dataclasses.fields(cls):  # type: ignore[arg-type]
            parser.add_argument(
                field.metadata["flag"],
                dest=field.name,
                **field.metadata["argparse"],
            )

    @classmethod
    def from_namespace(cls, args: argparse.Namespace) -> Self:
        values = vars(args)
        return cls(**{  # type: ignore[call-arg]
            field.name: values[field.name]
            for field in dataclasses.fields(cls)  # type: ignore[arg-type]
            if field.name in values
        })


ModelT = TypeVar("ModelT", bound=ArgparseModel)


class CLIGroup(abc.ABC, Generic[ModelT]):
    '''
    One subcommand. Registers its model's arguments on the
    subparser and runs `routine` on a fresh event loop, the
    returned int is the process exit code.
    '''
    model: type[ModelT]

    def __init__(
        self,
        parser: argparse.ArgumentParser,
        console: Console | None = None,
    ) -> None:
        self.console = console or Console()
        self.model.register(parser)

    @abc.abstractmethod
    async def routine(self, args: ModelT) -> int: ...

    def __call__(self, args: argparse.Namespace) -> int:
        return asyncio.run(self.routine(self.model.from_namespace(args)))
