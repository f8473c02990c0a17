import argparse
import asyncio
import logging
import sys

from custom_fonts_in_emails import CustomFonts, CustomFontsError

FORMATS = {
    "svg": lambda fonts, options: fonts.render_vector(options),
    "img": lambda fonts, options: fonts.render_image_tag(options),
    "png": lambda fonts, options: fonts.render_raster(options),
    "png2x": lambda fonts, options: fonts.render_raster_2x(options),
    "png3x": lambda fonts, options: fonts.render_raster_3x(options),
}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Render text in a custom font as SVG or an HTML image tag"
    )
    parser.add_argument("text", metavar="TEXT", nargs="?", default="", help="Text to render")
    parser.add_argument(
        "--font",
        dest="font_name_or_path",
        metavar="NAME_OR_PATH",
        default=None,
        help="Font name or font file path. Default: Arial",
    )
    parser.add_argument(
        "--format",
        choices=sorted(FORMATS),
        default="svg",
        help="Output format. Default: svg",
    )
    parser.add_argument("--font-size", metavar="SIZE", default=None, help="e.g. 24px")
    parser.add_argument("--font-color", metavar="COLOR", default=None)
    parser.add_argument("--background-color", metavar="COLOR", default=None)
    parser.add_argument(
        "--no-fallback",
        dest="supports_fallback",
        action="store_false",
        default=None,
        help="Do not add title, alt and style attributes to image tags.",
    )
    parser.add_argument(
        "--trim",
        action="store_true",
        default=None,
        help="Trim the background around raster output.",
    )
    parser.add_argument(
        "--trim-tolerance",
        metavar="PERCENT",
        type=float,
        default=None,
        help="Trim tolerance between 1 and 99. Default: 10",
    )
    parser.add_argument(
        "--resize",
        dest="resize_to_font_size",
        action="store_true",
        default=None,
        help="Resize raster output to the font size.",
    )
    parser.add_argument(
        "--output", metavar="PATH", default=None, help="Output file. Default: stdout"
    )
    parser.add_argument(
        "--list-fonts",
        action="store_true",
        help="List the available font names and paths, then exit.",
    )
    parser.add_argument(
        "--loglevel",
        metavar="LEVEL",
        default="WARNING",
        help="Logging level, default WARNING",
    )
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> str:
    fonts = CustomFonts()
    if args.list_fonts:
        paths_by_name = await fonts.get_font_paths_by_name()
        return "\n".join(f"{name}\t{path}" for name, path in sorted(paths_by_name.items()))

    options = {
        "text": args.text,
        "font_name_or_path": args.font_name_or_path,
        "font_size": args.font_size,
        "font_color": args.font_color,
        "background_color": args.background_color,
        "supports_fallback": args.supports_fallback,
        "trim": args.trim,
        "trim_tolerance": args.trim_tolerance,
        "resize_to_font_size": args.resize_to_font_size,
    }
    return await FORMATS[args.format](fonts, options)


def main(argv: list[str] | None = None) -> int:
    """Render text from the command line."""
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.loglevel.upper(), "WARNING"))
    try:
        result = asyncio.run(run(args))
    except CustomFontsError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(result + "\n")
    else:
        print(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
