"""Utility modules"""

from rde_import.utils.password_utils import generate_auth_info
from rde_import.utils.trid import TridGenerator, is_valid_server_trid

__all__ = [
    "TridGenerator",
    "generate_auth_info",
    "is_valid_server_trid",
]
