"""Exceptions raised while turning spec scripts into test code."""


class SpecTestGenError(Exception):
    """Base exception for all generator errors."""
    pass


class ScriptParseError(SpecTestGenError):
    """Raised when a script cannot be converted into a command stream."""
    pass


class UnsupportedCommand(ScriptParseError):
    """Raised for a well-formed command the generator has no test form for."""
    pass


class DisassemblyError(SpecTestGenError):
    """Raised when a module binary cannot be turned back into text."""
    pass


class MalformedScriptError(SpecTestGenError):
    """Raised when the command stream breaks an ordering rule, e.g. an action before any module."""
    pass
