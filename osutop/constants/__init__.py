from __future__ import annotations

from . import mods
from . import ranking
