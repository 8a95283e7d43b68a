from __future__ import annotations

import sys
from pathlib import Path

# Garante que o pacote toolkit seja importável durante os testes locais
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
