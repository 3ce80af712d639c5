"""
Equipment label generator
Draws a Code128 label for an equipment code with PIL/Pillow and python-barcode
"""
import io
import base64
import logging
from typing import Optional

from PIL import Image, ImageDraw, ImageFont
import barcode
from barcode.writer import ImageWriter

logger = logging.getLogger(__name__)


def _load_fonts():
    for bold, regular in (
        ('/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf', '/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf'),
        ('arialbd.ttf', 'arial.ttf'),
    ):
        try:
            return (
                ImageFont.truetype(bold, 18),
                ImageFont.truetype(regular, 14),
                ImageFont.truetype(regular, 12),
            )
        except (OSError, IOError):
            continue
    default = ImageFont.load_default()
    return default, default, default


def _draw_centered(draw, width, y, text, font):
    bbox = draw.textbbox((0, 0), text, font=font)
    draw.text(((width - (bbox[2] - bbox[0])) // 2, y), text, fill='black', font=font)


def generate_equipment_label(
    equipment_name: str,
    code: str,
    project_name: Optional[str] = None,
    category: Optional[str] = None,
    width: int = 400,
    height: int = 200,
) -> str:
    """
    Render a label: name (and category) on top, the barcode of ``code`` in
    the middle, the code and current project below.

    Returns:
        Base64-encoded PNG image as data URL string
    """
    max_name_length = 30
    if len(equipment_name) > max_name_length:
        equipment_name = equipment_name[:max_name_length] + '...'

    img = Image.new('RGB', (width, height), color='white')
    draw = ImageDraw.Draw(img)
    font_large, font_medium, font_small = _load_fonts()

    margin = 10
    first_line_y = 8
    barcode_y = first_line_y + 22
    last_line_y = height - 12

    top_line = equipment_name if not category else f"{equipment_name} | {category}"
    _draw_centered(draw, width, first_line_y, top_line, font_large)

    barcode_available_height = last_line_y - barcode_y - 20
    bottom_line = code if not project_name else f"{code} - {project_name[:20]}"

    try:
        code128 = barcode.get_barcode_class('code128')
        barcode_img = code128(code, writer=ImageWriter()).render({
            'write_text': False,
            'module_width': 0.3,
            'module_height': 20.0,
            'quiet_zone': 2.0,
            'font_size': 0,
            'text_distance': 0,
            'background': 'white',
            'foreground': 'black',
        })

        barcode_img_width, barcode_img_height = barcode_img.size
        barcode_width = width - (2 * margin)
        scale_factor = barcode_width / barcode_img_width
        scaled_height = int(barcode_img_height * scale_factor)
        if scaled_height > barcode_available_height:
            scale_factor = barcode_available_height / barcode_img_height
            scaled_height = barcode_available_height
            barcode_width = int(barcode_img_width * scale_factor)

        barcode_img = barcode_img.resize((barcode_width, scaled_height), Image.Resampling.BILINEAR)
        img.paste(barcode_img, ((width - barcode_width) // 2, barcode_y))

        _draw_centered(draw, width, barcode_y + scaled_height + 5, bottom_line, font_medium)
    except Exception as e:
        # Fall back to a text-only label
        logger.error(f"Barcode generation failed for '{code}': {e}", exc_info=True)
        _draw_centered(draw, width, barcode_y, f'CODE: {code}', font_small)
        _draw_centered(draw, width, barcode_y + 20, bottom_line, font_medium)

    buffer = io.BytesIO()
    img.save(buffer, format='PNG', optimize=False, compress_level=1)
    image_base64 = base64.b64encode(buffer.getvalue()).decode('utf-8')
    buffer.close()
    img.close()

    return f'data:image/png;base64,{image_base64}'
