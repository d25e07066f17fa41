import logging
from pathlib import Path

logger = logging.getLogger("nodriverfetch.js.load")

def load_text(filename: str, encoding: str = "utf-8") -> str:
    # resolve next to this file so the cwd never matters
    path = Path(__file__).resolve().parent.joinpath(filename)
    logger.debug("loading text from %s", path)
    with path.open("r", encoding=encoding) as fh:
        return fh.read()


def render(filename: str, **values: str) -> str:
    """load a script and substitute `__NAME__` placeholders.

    values are substituted verbatim, so callers pass already-encoded js
    literals (e.g. `json.dumps(url)`).
    """
    script = load_text(filename)
    for name, value in values.items():
        script = script.replace(f"__{name.upper()}__", value)
    return script
