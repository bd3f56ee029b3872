from .base import Matte
from .connected import ConnectedMatte
from .feathered import GlobalMatte

__all__ = [
    "Matte",
    "GlobalMatte",
    "ConnectedMatte",
]
