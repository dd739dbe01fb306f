import re
from typing import Final

_SCHEME_RE: Final = re.compile(r'^https?://')
_PATH_RE: Final = re.compile(r'/.*$', re.DOTALL)
_PORT_RE: Final = re.compile(r':[0-9]+$')

_LABEL: Final = r'[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?'
_HOSTNAME_RE: Final = re.compile(rf'{_LABEL}(?:\.{_LABEL})*', re.IGNORECASE | re.ASCII)

_IPV4_RE: Final = re.compile(r'(?:[0-9]{1,3}\.){3}[0-9]{1,3}')
_IPV6_RE: Final = re.compile(r'(?:[0-9a-f]{1,4}:){7}[0-9a-f]{1,4}', re.IGNORECASE | re.ASCII)

MAX_HOSTNAME_LENGTH: Final[int] = 253


def normalize(raw: str) -> str:
    '''
    Canonicalizes user input into a bare hostname: trims and
    lower-cases, then strips a leading http(s) scheme, any path
    and a trailing port. Never fails, the result may still be
    invalid.

    >>> normalize(' HTTPS://Example.com/path:1 ')
    'example.com'
    '''
    name = raw.strip().lower()
    name = _SCHEME_RE.sub('', name)
    name = _PATH_RE.sub('', name)
    return _PORT_RE.sub('', name)


def is_valid_hostname(name: str) -> bool:
    '''
    Dot separated labels of 1-63 letters, digits or hyphens that
    neither start nor end with a hyphen, at most 253 characters.

    IP literals get no special treatment, dotted IPv4 addresses
    happen to satisfy the label grammar while IPv6 ones do not.
    '''
    if not name or len(name) > MAX_HOSTNAME_LENGTH:
        return False
    return _HOSTNAME_RE.fullmatch(name) is not None


def is_valid_ip(value: str) -> bool:
    '''
    Shape check only: dotted quad IPv4 (octets are not range
    checked) or fully expanded IPv6. Compressed IPv6 (`::`) is
    rejected.
    '''
    return bool(_IPV4_RE.fullmatch(value) or _IPV6_RE.fullmatch(value))
