import sys
from pathlib import Path

# (1) Add repository root and src/ to sys.path to enable absolute imports
#     The root directory contains scripts/, src/ and config/.
ROOT = Path(__file__).resolve().parents[1]
for path in (ROOT, ROOT / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))
