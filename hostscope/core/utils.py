from pathlib import Path

from loguru import logger


def load_hostname_list(file_path: str) -> list[str]:
    '''
    Reads hostnames from a text file, one per line. Blank
    lines and `#` comments are skipped, entries are returned
    raw so the resolver can normalize and report on them.

    Raises
    ------
    FileNotFoundError
    '''
    txt_file = Path(file_path)
    if not txt_file.is_file():
        raise FileNotFoundError(f"Hostname list file not found: {file_path}")

    hostnames: list[str] = []
    for line in txt_file.read_text().splitlines():
        line = line.split('#', 1)[0].strip()
        if not line:
            continue
        hostnames.append(line)

    logger.debug(f"Loaded {len(hostnames)} hostnames from {file_path}")
    return hostnames


def split_hostnames(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(',') if part.strip()]
