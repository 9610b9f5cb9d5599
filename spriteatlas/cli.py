import argparse
import os
import sys
import time

from .errors import AtlasError
from .formats import AtlasFormat
from .generator import AtlasOptions, generate_atlas, is_power_of_two
from .images import ResizeFilter, ResizeMode


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='spriteatlas', description='Pack sprite images into a single atlas')
    parser.add_argument('-i', '--input', required=True,
                        help='Input directory or glob pattern (e.g. "sprites/**/*.png")')
    parser.add_argument('-o', '--output', required=True,
                        help='Output path without extension (e.g. "dist/atlas")')
    parser.add_argument('-f', '--format', default=AtlasFormat.PHASER3_HASH.value,
                        choices=[f.value for f in AtlasFormat], help='Metadata format')
    parser.add_argument('-m', '--max-size', type=int, default=2048,
                        help='Maximum atlas size (must be a power of 2)')
    parser.add_argument('-p', '--padding', type=int, default=2, help='Padding between sprites')
    parser.add_argument('-s', '--spacing', type=int, default=0, help='Extra spacing added to the padding')
    parser.add_argument('-t', '--trim', action='store_true', help='Trim transparent borders from sprites')
    parser.add_argument('--scale', type=float, default=1.0, help='Scale factor recorded in the metadata')
    parser.add_argument('--resize-to', type=int, help='Resize every sprite to fit <size>×<size> pixels')
    parser.add_argument('--resize-mode', default=ResizeMode.CONTAIN.value,
                        choices=[m.value for m in ResizeMode], help='How sprites are fitted when resizing')
    parser.add_argument('--resize-filter', default=ResizeFilter.LANCZOS.value,
                        choices=[f.value for f in ResizeFilter], help='Resampling filter used when resizing')
    parser.add_argument('--grid-size', type=int, help='Lay sprites out on a fixed grid of <size> pixels')
    parser.add_argument('--grid-metadata', action='store_true', help='Include grid positions in the metadata')
    parser.add_argument('--stable-order', action='store_true',
                        help='Order sprites by key and keep tile ids stable between builds')
    parser.add_argument('--no-preserve-ids', dest='preserve_ids', action='store_false',
                        help='With --stable-order, ignore and do not write the sprite manifest')
    return parser


def options_from_args(args: argparse.Namespace) -> AtlasOptions:
    return AtlasOptions(
        input=args.input,
        output=args.output,
        format=AtlasFormat(args.format),
        max_size=args.max_size,
        padding=args.padding,
        spacing=args.spacing,
        trim=args.trim,
        scale=args.scale,
        resize_to=args.resize_to,
        resize_mode=ResizeMode(args.resize_mode),
        resize_filter=ResizeFilter(args.resize_filter),
        grid_size=args.grid_size,
        grid_metadata=args.grid_metadata,
        stable_order=args.stable_order,
        preserve_ids=args.preserve_ids,
    )


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not is_power_of_two(args.max_size):
        parser.error(f"max size must be a power of 2 (e.g. 512, 1024, 2048, 4096), got {args.max_size}")

    options = options_from_args(args)

    print("Sprite Atlas Generator")
    print(f"Input:     {options.input}")
    print(f"Output:    {options.output}")
    print(f"Format:    {options.format.value}")
    print(f"Max size:  {options.max_size}×{options.max_size}")
    print(f"Padding:   {options.padding}px (spacing {options.spacing}px)")
    print(f"Trim:      {'yes' if options.trim else 'no'}")
    print(f"Scale:     {options.scale}")
    if options.resize_to:
        print(f"Resize to: {options.resize_to}px ({options.resize_mode.value}, {options.resize_filter.value})")
    if options.grid_size:
        print(f"Grid size: {options.grid_size}px (metadata: {'yes' if options.grid_metadata else 'no'})")
    if options.stable_order:
        print(f"Stable order: yes (preserve ids: {'yes' if options.preserve_ids else 'no'})")

    start = time.perf_counter()
    try:
        # Create output directory if it doesn't exist
        output_dir = os.path.dirname(options.output)
        if output_dir:
            os.makedirs(output_dir, exist_ok=True)
        result = generate_atlas(options)
    except (AtlasError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    duration_ms = (time.perf_counter() - start) * 1000

    print("\nAtlas generated successfully")
    print(f"Sprites:    {result.sprite_count}")
    print(f"Atlas size: {result.width}×{result.height}")
    print(f"Duration:   {duration_ms:.0f}ms")
    print(f"Image:      {result.image_path}")
    print(f"Metadata:   {result.json_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
