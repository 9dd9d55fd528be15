import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
TESTS = Path(__file__).resolve().parent

for path in (ROOT, TESTS):
    path_str = str(path)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)
