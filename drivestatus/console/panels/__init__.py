"""Console panels for the drive status observer."""

from .drives import DrivePanel
from .events import EventPanel
from .header import HeaderPanel
