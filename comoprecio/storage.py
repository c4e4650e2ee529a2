from pathlib import Path
from datetime import datetime, timezone
import orjson


def utc_now_iso() -> str:
    # e.g. 2024-05-01T10:15:30.123Z
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def write_json(path: Path, obj) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        f.write(orjson.dumps(obj, option=orjson.OPT_INDENT_2))
    return path


def read_json(path: Path):
    return orjson.loads(Path(path).read_bytes())
