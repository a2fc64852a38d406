# Schemas package (re-export feature modules for stable imports)
from .appointments.appointment import *
from .availability.availability import *
from .common.common import *
