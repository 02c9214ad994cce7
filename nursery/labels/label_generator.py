"""
Barcode previews rendered locally.

Uses python-barcode with its Pillow ImageWriter and returns a PNG data URL
the browser can show directly.
"""
import io
import base64

import barcode
from barcode.errors import BarcodeError
from barcode.writer import ImageWriter

SUPPORTED_SYMBOLOGIES = ('code128', 'ean13', 'ean8', 'upca', 'code39', 'isbn13')


def render_barcode_png(value: str, symbology: str = 'code128', module_height: float = 12.0,
                       show_text: bool = True) -> str:
    """
    Render ``value`` as a barcode image.

    Raises ValueError for an empty value, an unsupported symbology, or a
    value the symbology cannot encode (e.g. letters in an EAN).
    """
    if not value:
        raise ValueError('Barcode value is required')
    symbology = (symbology or 'code128').lower()
    if symbology not in SUPPORTED_SYMBOLOGIES:
        raise ValueError(f'Unsupported symbology: {symbology}. Use one of: {", ".join(SUPPORTED_SYMBOLOGIES)}')

    try:
        barcode_class = barcode.get_barcode_class(symbology)
        code = barcode_class(str(value), writer=ImageWriter())
    except BarcodeError as e:
        raise ValueError(f'Cannot encode {value!r} as {symbology}: {str(e)}') from e

    buffer = io.BytesIO()
    code.write(buffer, options={
        'module_height': module_height,
        'write_text': show_text,
        'quiet_zone': 2.0,
        'format': 'PNG',
    })
    image_base64 = base64.b64encode(buffer.getvalue()).decode('utf-8')
    buffer.close()

    return f'data:image/png;base64,{image_base64}'
