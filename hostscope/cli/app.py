import argparse
import sys
from collections.abc import Sequence
from dataclasses import dataclass

import msgspec
from loguru import logger
from rich.console import Console

from hostscope._version import __version__
from hostscope.cli.internals import ArgparseModel, CLIGroup, cli_arg
from hostscope.core import _logging
from hostscope.core.config import load_settings
from hostscope.core.utils import load_hostname_list, split_hostnames
from hostscope.resolver.engine import resolve, resolve_batch, reverse_lookup
from hostscope.resolver.models import ResolverResult
from hostscope.resolver.render import result_table, stringify_result


@dataclass
class ResolveArgs(ArgparseModel):
    name: str = cli_arg(
        "--name",
        required=True,
        help="Hostname or URL to resolve, e.g. example.com or https://example.com/path",
    )
    json: bool = cli_arg(
        "--json",
        default=False,
        action="store_true",
        help="Print the result as JSON",
    )

@dataclass
class BatchArgs(ArgparseModel):
    names: str | None = cli_arg(
        "--names",
        help="Comma separated hostnames to resolve",
    )
    file: str | None = cli_arg(
        "--file",
        help="Path to a file with one hostname per line",
    )
    concurrency: int | None = cli_arg(
        "--concurrency",
        type=int,
        help="Maximum number of hostnames resolved at once",
    )
    json: bool = cli_arg(
        "--json",
        default=False,
        action="store_true",
        help="Print the results as JSON",
    )

@dataclass
class ReverseArgs(ArgparseModel):
    ip: str = cli_arg(
        "--ip",
        required=True,
        help="IP address to look up",
    )
    json: bool = cli_arg(
        "--json",
        default=False,
        action="store_true",
        help="Print the result as JSON",
    )


def _exit_code(results: Sequence[ResolverResult]) -> int:
    return 0 if all(result.ok for result in results) else 1


class ResolveGroup(CLIGroup[ResolveArgs]):
    model = ResolveArgs

    async def routine(self, args: ResolveArgs) -> int:
        result = await resolve(args.name)
        if args.json:
            self.console.out(result.to_json(), highlight=False)
        else:
            self.console.print(stringify_result(result))
        return _exit_code([result])


class BatchGroup(CLIGroup[BatchArgs]):
    model = BatchArgs

    def collect_hostnames(self, args: BatchArgs) -> list[str]:
        hostnames: list[str] = []
        if args.names:
            hostnames.extend(split_hostnames(args.names))
        if args.file:
            hostnames.extend(load_hostname_list(args.file))
        return hostnames

    async def routine(self, args: BatchArgs) -> int:
        try:
            hostnames = self.collect_hostnames(args)
        except FileNotFoundError as exc:
            self.console.print(f"[red]Error:[/red] {exc}")
            return 2

        if not hostnames:
            self.console.print("[red]Error: --names or --file is required[/red]")
            return 2

        settings = None
        if args.concurrency is not None:
            try:
                settings = load_settings(batch_concurrency=args.concurrency)
            except ValueError as exc:
                self.console.print(f"[red]Error:[/red] {exc}")
                return 2

        results = await resolve_batch(hostnames, settings=settings)
        if args.json:
            encoded = msgspec.json.encode(results)
            self.console.out(msgspec.json.format(encoded, indent=2).decode(), highlight=False)
        else:
            for result in results:
                self.console.print(stringify_result(result))
            result_table(results, console=self.console)
        return _exit_code(results)


class ReverseGroup(CLIGroup[ReverseArgs]):
    model = ReverseArgs

    async def routine(self, args: ReverseArgs) -> int:
        result = await reverse_lookup(args.ip)
        if args.json:
            self.console.out(result.to_json(), highlight=False)
        else:
            self.console.print(stringify_result(result))
        return _exit_code([result])


def create_app(console: Console | None = None) -> argparse.ArgumentParser:
    app_schema = {
        "resolve": {
            "class": ResolveGroup,
            "help": "Resolve a hostname through DoH, passive and connectivity probes",
        },
        "batch": {
            "class": BatchGroup,
            "help": "Resolve many hostnames concurrently",
        },
        "reverse": {
            "class": ReverseGroup,
            "help": "Reverse lookup of an IP address (reports the capability gap)",
        },
    }

    parser = argparse.ArgumentParser(
        prog="hostscope",
        description="Hostname resolution toolkit",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=("TRACE", "DEBUG", "INFO", "WARNING", "ERROR"),
        help="Log level for diagnostics written to stderr",
    )
    parser.add_argument(
        "--rich-tracebacks",
        default=False,
        action="store_true",
        help="Install rich tracebacks",
    )
    subparsers = parser.add_subparsers(
        title="subcommands",
        description="valid subcommands",
        help="additional help",
        dest="command",
    )

    for app_name, config in app_schema.items():
        app_class: type[CLIGroup] = config["class"]

        subparser = subparsers.add_parser(
            app_name,
            help=config["help"],
            formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        )
        group: CLIGroup = app_class(subparser, console=console)
        subparser.set_defaults(func=group)

    return parser


def run(argv: Sequence[str] | None = None, console: Console | None = None) -> int:
    parser = create_app(console=console)
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 0

    _logging.configure_lib_logger(
        level_name=args.log_level,
        rich_tracebacks=args.rich_tracebacks,
    )
    logger.debug(f"Running `{args.command}`")
    return args.func(args)


def main() -> None:
    sys.exit(run())
