from __future__ import annotations

from . import collector
from . import export
from . import run
