import json
import os
import time

LOG = "audit.jsonl"

def _default(value):
    if isinstance(value, bytes):
        return "0x" + value.hex()
    raise TypeError(f"not JSON serializable: {type(value).__name__}")

def append(entry: dict, path: str = LOG) -> dict:
    entry = dict(entry)
    entry["ts_ns"] = time.time_ns()
    # Serialize with minimal separators to be byte-dense and JSONL format
    entry_line = json.dumps(entry, separators=(",", ":"), default=_default) + "\n"

    with open(path, "a", buffering=1) as f:
        f.write(entry_line)
        f.flush()
        os.fsync(f.fileno())
    return entry

def read(path: str = LOG) -> list:
    if not os.path.exists(path):
        return []
    with open(path) as f:
        return [json.loads(line) for line in f if line.strip()]
