from __future__ import annotations

from . import credentials
from . import row
from . import window
