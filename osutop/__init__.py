from __future__ import annotations

from . import api
from . import config
from . import constants
from . import errors
from . import log
from . import models
from . import objects
from . import usecases
