"""
entity-sdkgen: client SDK stub generator for entity schemas.

Generates a type-declaration file and one base class per client-visible
entity module for the Unity and Unreal Engine 4 client plugins.
"""

__version__ = "0.1.0"
