from pathlib import Path

from .errors import SourceError

EXTENSION = ".tly"


def fetch_code(filename):
    # validate file extension
    path = Path(filename)
    if path.suffix != EXTENSION:
        raise SourceError(f"your code must be written in a {EXTENSION} file, got '{filename}'")

    if not path.is_file():
        raise SourceError(f"invalid path to the file: '{filename}'")

    # return source code
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceError(f"error while reading '{filename}': {e}") from e
