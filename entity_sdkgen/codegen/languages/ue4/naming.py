"""
C++ naming utilities and sanitization.
"""

from ...core.naming import NameSanitizer


CPP_RESERVED_WORDS = {
    "alignas", "alignof", "and", "asm", "auto", "bool", "break", "case",
    "catch", "char", "class", "const", "constexpr", "continue", "decltype",
    "default", "delete", "do", "double", "else", "enum", "explicit",
    "export", "extern", "false", "float", "for", "friend", "goto", "if",
    "inline", "int", "long", "mutable", "namespace", "new", "noexcept",
    "not", "nullptr", "operator", "or", "private", "protected", "public",
    "register", "return", "short", "signed", "sizeof", "static", "struct",
    "switch", "template", "this", "throw", "true", "try", "typedef",
    "typename", "union", "unsigned", "using", "virtual", "void",
    "volatile", "while",
}

# UE4 type names that would shadow engine types when used as members
UE4_BUILTIN_TYPES = {
    "int8", "int16", "int32", "int64", "uint8", "uint16", "uint32",
    "uint64", "FString", "FVector", "FVector2D", "FVector4", "TArray",
}


def create_cpp_sanitizer() -> NameSanitizer:
    """Create a name sanitizer configured for UE4 C++."""
    return NameSanitizer(CPP_RESERVED_WORDS, UE4_BUILTIN_TYPES)
