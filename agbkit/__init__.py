"""GBA tile, palette, PNG and compression helpers and a dependency scanner."""

__version__ = "0.1.0"
__all__ = ["gbagfx", "scaninc"]