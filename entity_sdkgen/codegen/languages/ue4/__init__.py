"""
Unreal Engine 4 client generator module.

Generates C++ headers for the UE4 client plugin.
"""

from .generator import UE4Generator
from .naming import create_cpp_sanitizer
from .types import UE4TypeMapper

__all__ = [
    "UE4Generator",
    "UE4TypeMapper",
    "create_cpp_sanitizer",
]
