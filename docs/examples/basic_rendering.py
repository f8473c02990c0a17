"""Render one line of text in every output format."""

import asyncio
import logging

from custom_fonts_in_emails import CustomFonts

logging.basicConfig(level=logging.INFO)

options = {
    "text": "Make something people want",
    "font_name_or_path": "Georgia",
    "font_color": "white",
    "background_color": "#ff6600",
    "font_size": 40,
}


async def main() -> None:
    fonts = CustomFonts()
    results = await asyncio.gather(
        fonts.render_vector(options),
        fonts.render_image_tag(options),
        fonts.render_raster(options),
        fonts.render_raster_2x(options),
        fonts.render_raster_3x(options),
    )
    for html in results:
        print(f"<br />\n{html}\n<br />")


asyncio.run(main())
