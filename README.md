# agbkit

Asset and build helpers for Game Boy Advance projects, using only the
Python standard library.

- **`agbkit.gbagfx`** is a Python API for tiled GBA graphics, PNG images,
  GBA and JASC palettes, and the BIOS-compatible LZ77, run-length and
  Huffman compression formats.
- **`scaninc`** is a command that lists the files a C or assembly source
  depends on, both through `#include` / `.include` and through
  `INCBIN_*` / `.incbin`.

## scaninc

```
scaninc [-I INCLUDE_DIR]... FILE_PATH
```

Prints every dependency of `FILE_PATH`, one per line and sorted. Included
files are looked up in the given include directories and in the
directory of the file that includes them, and those that are found are
scanned in turn. Includes in angle brackets (`#include <...>`) are
ignored. Supported source types are `.c`, `.h`, `.s` and `.inc`; in
assembly files an include that cannot be found is still listed under its
own name.

```
scaninc -I include src/main.c
```

The same scan is available from Python:

```python
from agbkit.scaninc.cli import scan_dependencies

for path in scan_dependencies("src/main.c", ["include/"]):
    print(path)
```

Include directories passed to `scan_dependencies` are used as plain
prefixes, so they should end in `/`. `agbkit.scaninc.source_file.SourceFile`
gives the `includes`, `incbins` and `file_type` of a single file without
following anything.

## Graphics and compression API

### Compression

```python
from agbkit.gbagfx.lz import lz_compress, lz_decompress
from agbkit.gbagfx.rl import rl_compress, rl_decompress
from agbkit.gbagfx.huff import huff_compress, huff_decompress

data = bytes(range(16)) * 8
assert lz_decompress(lz_compress(data, 2)) == data
assert rl_decompress(rl_compress(data)) == data
assert huff_decompress(huff_compress(data, 4)) == data
```

- `lz_compress(data, min_distance=2)`: `min_distance` is the shortest
  back-reference searched; the default of 2 keeps the output safe for
  VRAM decompression. `lz_decompress` cuts short a back-reference that
  runs past the size in the header and issues a `RuntimeWarning`.
- `huff_compress(data, bit_depth=4)` takes 4- or 8-bit symbols.
- Compressed output is padded to a multiple of four bytes.

### Tiles and palettes

`agbkit.gbagfx.image` holds the `Color`, `Palette` and `Image` data
classes and the converters between them and GBA data:

- `tiles_to_image(data, tiles_width, bit_depth, metatile_width, metatile_height, invert_colors)`
  and `image_to_tiles(image, num_tiles, bit_depth, metatile_width, metatile_height, invert_colors)`
  for 1, 4 and 8 bpp tiles (`num_tiles` 0 means every tile);
  `read_image` and `write_image` do the same with files.
- `decode_gba_palette` / `encode_gba_palette` and
  `read_gba_palette` / `write_gba_palette` for 15-bit GBA palettes.

`agbkit.gbagfx.jasc` reads and writes JASC-PAL palettes
(`parse_jasc_palette`, `format_jasc_palette`, `read_jasc_palette`,
`write_jasc_palette`).

`agbkit.gbagfx.png` reads grayscale and paletted PNGs into packed pixels
of a chosen bit depth (`decode_png`, `read_png`), writes non-interlaced
PNGs (`encode_png`, `write_png`, with colour 0 transparent when
`has_transparency` is set) and extracts PNG palettes
(`decode_png_palette`, `read_png_palette`).

```python
from agbkit.gbagfx.image import read_gba_palette, read_image
from agbkit.gbagfx.jasc import write_jasc_palette
from agbkit.gbagfx.png import write_png

palette = read_gba_palette("sprite.gbapal")
write_jasc_palette("sprite.pal", palette)

image = read_image("sprite.4bpp", 4, 4, 1, 1, False)
image.has_palette = True
image.palette = palette
write_png("sprite.png", image)
```

Invalid input raises `agbkit.gbagfx.util.GfxError` or
`agbkit.scaninc.asm_file.ScanincError`. The `scaninc` command reports the
message on standard error and exits with status 1.

## What agbkit does not do

- There is no graphics-conversion command: tiles, palettes, PNGs and
  compressed data are converted only through the Python API above.
- Font sheets (Latin and half- and full-width Japanese glyph layouts)
  are not handled.