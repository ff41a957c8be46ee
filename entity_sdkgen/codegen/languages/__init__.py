"""
Backend-specific client SDK generators.
"""

from .unity import UnityGenerator, UnityTypeMapper
from .ue4 import UE4Generator, UE4TypeMapper

__all__ = [
    "UnityGenerator",
    "UnityTypeMapper",
    "UE4Generator",
    "UE4TypeMapper",
]
