"""
Unity client generator module.

Generates C# sources for the Unity client plugin.
"""

from .generator import UnityGenerator
from .naming import create_csharp_sanitizer
from .types import UnityTypeMapper

__all__ = [
    "UnityGenerator",
    "UnityTypeMapper",
    "create_csharp_sanitizer",
]
