"""Converters for GBA tiles, palettes, PNG images and compressed data."""

__all__ = ["huff", "image", "jasc", "lz", "png", "rl", "util"]