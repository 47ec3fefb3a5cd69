from . import simplify_warnings
from .data_manager import DataManager
