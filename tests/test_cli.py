import io
import json

import httpx
import pytest
from loguru import logger
from rich.console import Console

from conftest import make_record, mock_client
from hostscope.cli import app
from hostscope.core import _logging
from hostscope.core.http import (
    ClientEvents,
    HttpxMiddleware,
    RequestTracer,
    create_httpx_client,
    tracing_events,
)
from hostscope.core.utils import load_hostname_list, split_hostnames
from hostscope.resolver.models import ResolverResult


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=200)


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(_logging, 'configure_lib_logger', lambda **kwargs: None)


def output(console: Console) -> str:
    return console.file.getvalue()  # type: ignore[attr-defined]


class TestCli:
    """argparse subcommands."""

    def test_reverse(self, console):
        code = app.run(['reverse', '--ip', '10.0.0.1'], console=console)
        assert code == 1
        assert 'not supported' in output(console)

    def test_reverse_json(self, console):
        code = app.run(['reverse', '--ip', 'not-an-ip', '--json'], console=console)
        payload = json.loads(output(console))
        assert code == 1
        assert payload['error'] == 'Invalid IP address format'
        assert payload['methods_attempted'] == []

    def test_resolve(self, console, monkeypatch):
        async def fake_resolve(name):
            return ResolverResult(
                hostname=name,
                records=(make_record(hostname=name),),
                methods_attempted=('DNS-over-HTTPS', 'Connectivity Test'),
            )

        monkeypatch.setattr(app, 'resolve', fake_resolve)
        code = app.run(['resolve', '--name', 'example.com'], console=console)

        assert code == 0
        assert '93.184.216.34' in output(console)

    def test_batch_json(self, console, monkeypatch, tmp_path):
        seen = {}

        async def fake_batch(hostnames, settings=None):
            seen['hostnames'] = list(hostnames)
            seen['settings'] = settings
            return [ResolverResult(hostname=name, error='x') for name in hostnames]

        hosts = tmp_path / 'hosts.txt'
        hosts.write_text('c.test\n')
        monkeypatch.setattr(app, 'resolve_batch', fake_batch)
        code = app.run(
            [
                'batch', '--names', 'a.test, b.test', '--file', str(hosts),
                '--concurrency', '3', '--json',
            ],
            console=console,
        )

        assert code == 1
        assert seen['hostnames'] == ['a.test', 'b.test', 'c.test']
        assert seen['settings'].batch_concurrency == 3
        assert [r['hostname'] for r in json.loads(output(console))] == seen['hostnames']

    def test_batch_requires_input(self, console):
        assert app.run(['batch'], console=console) == 2
        assert '--names or --file' in output(console)

    def test_batch_missing_file(self, console, tmp_path):
        code = app.run(['batch', '--file', str(tmp_path / 'missing.txt')], console=console)
        assert code == 2

    def test_batch_rejects_bad_concurrency(self, console):
        code = app.run(['batch', '--names', 'a.test', '--concurrency', '0'], console=console)
        assert code == 2

    def test_no_command_prints_help(self, console, capsys):
        assert app.run([], console=console) == 0
        assert 'usage' in capsys.readouterr().out

    def test_resolve_requires_name(self, console):
        with pytest.raises(SystemExit):
            app.run(['resolve'], console=console)


class TestHostnameList:
    """Hostname list files."""

    def test_load(self, tmp_path):
        path = tmp_path / 'hosts.txt'
        path.write_text('example.com\n\n# comment\n  other.example  # trailing\n')
        assert load_hostname_list(str(path)) == ['example.com', 'other.example']

    def test_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_hostname_list(str(tmp_path / 'nope.txt'))

    def test_split(self):
        assert split_hostnames(' a.test,,b.test , ') == ['a.test', 'b.test']


class TestHttpClient:
    """Client factory and event hooks."""

    @pytest.mark.asyncio
    async def test_default_user_agent(self):
        seen: list[httpx.Request] = []

        def handler(request):
            seen.append(request)
            return httpx.Response(204)

        async with mock_client(handler) as client:
            await client.get('https://example.com/')

        assert seen[0].headers['User-Agent'].startswith('hostscope/')

    @pytest.mark.asyncio
    async def test_middleware_hooks_fire(self):
        calls: list[str] = []

        class Recording(HttpxMiddleware):
            async def on_request(self, request):
                calls.append(f'request {request.url.host}')

            async def on_response(self, response):
                calls.append(f'response {response.status_code}')

        events = ClientEvents()
        events.register(middleware=Recording())
        assert len(events.request_hooks) == 1
        assert len(events.response_hooks) == 1

        client = create_httpx_client(
            events=events,
            transport=httpx.MockTransport(lambda request: httpx.Response(418)),
        )
        async with client:
            await client.head('http://example.com/favicon.ico')

        assert calls == ['request example.com', 'response 418']

    def test_tracing_events(self):
        events = tracing_events()
        hooks = events.httpx_args()
        assert len(hooks['request']) == len(hooks['response']) == 1
        assert isinstance(hooks['request'][0].__self__, RequestTracer)


class TestLibraryLogging:
    """hostscope stays quiet unless the CLI turns logging on."""

    def test_disabled_until_enabled(self, tmp_path):
        path = tmp_path / 'hosts.txt'
        path.write_text('example.com\n')
        messages: list[str] = []
        sink = logger.add(messages.append, level='DEBUG', format='{message}')
        try:
            _logging.disable_lib_logger()
            load_hostname_list(str(path))
            assert messages == []

            logger.enable('hostscope')
            load_hostname_list(str(path))
            assert any('Loaded 1 hostnames' in message for message in messages)
        finally:
            logger.remove(sink)
            _logging.disable_lib_logger()
