"""Dependency scanner for C and assembly sources."""

__all__ = ["asm_file", "c_file", "cli", "source_file"]