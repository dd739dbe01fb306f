from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from hostscope.resolver.models import DNSRecord, ResolverResult


def render_record(record: DNSRecord) -> str:
    style = 'italic green' if record.kind.is_dns else 'yellow'
    message = f'  [bold]{record.kind.value}[/bold]: [{style}]{escape(record.address)}[/{style}]'
    details = []
    if record.priority is not None:
        details.append(f'priority {record.priority}')
    if record.ttl is not None:
        details.append(f'ttl {record.ttl}s')
    details.append(f'{record.response_time_ms}ms')
    return f'{message} [dim]({", ".join(details)})[/dim]\n'


def stringify_result(result: ResolverResult) -> str:
    '''
    Renders a single result as a rich markup block.
    '''
    methods = ', '.join(result.methods_attempted) or 'None'
    message = (
        f'[bold underline]Resolution Results for {escape(result.hostname)}[/bold underline]\n'
        f'[bold]Methods Attempted:[/bold] {methods}\n'
        f'[bold]Total Time:[/bold] {result.total_time_ms}ms\n'
    )
    if result.error:
        return message + f'[bold red]Error:[/bold red] {escape(result.error)}\n'

    message += f'\n[bold underline]Records ({len(result.records)}):[/bold underline]\n'
    for record in result.records:
        message += render_record(record)
    return message


def result_table(results: Sequence[ResolverResult], *, console: Console | None = None) -> Table:
    console = console or Console()
    table = Table(title='Hostname Resolution Results')
    table.add_column('Hostname', style='cyan', no_wrap=True)
    table.add_column('Methods', style='magenta')
    table.add_column('Records', style='green')
    table.add_column('Error', style='red')
    table.add_column('Time', justify='right')

    for result in results:
        counts: dict[str, int] = {}
        for record in result.records:
            counts[record.kind.value] = counts.get(record.kind.value, 0) + 1
        record_summary = '\n'.join(
            f'{kind}: {count}' for kind, count in counts.items()
        ) or 'No records found'

        table.add_row(
            escape(result.hostname) or '<empty>',
            '\n'.join(result.methods_attempted) or '-',
            record_summary,
            escape(result.error or 'None'),
            f'{result.total_time_ms}ms',
        )

    console.print(table)
    return table
