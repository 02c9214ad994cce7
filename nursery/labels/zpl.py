"""
ZPL for sale (price) labels and batch labels.

Sizes are laid out in millimetres and converted to printer dots from the
printer's resolution: 203 dpi is 8 dots/mm, 300 dpi 12 and 600 dpi 24.
"""
import re
from typing import Optional

MIN_COPIES = 1
MAX_COPIES = 999

_SPECIAL = re.compile(r'([\^~\\])')
_NEWLINES = re.compile(r'\r\n|\r|\n')


def dots_per_mm(dpi) -> int:
    if dpi == 300:
        return 12
    if dpi == 600:
        return 24
    return 8


def mm(value, dpmm) -> int:
    return int(round(value * dpmm))


def escape_zpl(value) -> str:
    """Make text safe inside ^FD; control characters are backslash-escaped and newlines become spaces"""
    text = '' if value is None else str(value)
    return _NEWLINES.sub(' ', _SPECIAL.sub(r'\\\1', text))


def clamp_copies(copies) -> int:
    try:
        copies = int(copies)
    except (TypeError, ValueError):
        return MIN_COPIES
    return max(MIN_COPIES, min(MAX_COPIES, copies))


def _print_quantity(copies):
    copies = clamp_copies(copies)
    return f'^PQ{copies},0,1,Y' if copies > 1 else ''


def build_sale_label(title: str, barcode: str, price_text: str, size: Optional[str] = None,
                     multibuy_text: Optional[str] = None, lot_number: Optional[str] = None,
                     copies=1, dpi=203) -> str:
    """
    Retail price label, 50 x 30 mm.

    Title and size across the top, the price large on the left with any
    multibuy offer under it, a Code 128 barcode at the bottom and the lot
    number in the bottom corner.
    """
    dpmm = dots_per_mm(dpi)
    width = mm(50, dpmm)
    height = mm(30, dpmm)
    margin = mm(1.5, dpmm)
    full_width = width - 2 * margin

    title_font = mm(3.5, dpmm)
    info_font = mm(2.5, dpmm)
    price_font = mm(6, dpmm)

    title_y = margin
    size_y = title_y + mm(4, dpmm)
    price_y = size_y + mm(3.5, dpmm)
    multibuy_y = price_y + mm(6.5, dpmm)
    barcode_y = height - margin - mm(8, dpmm)
    barcode_height = mm(6, dpmm)
    module = 2 if dpmm == 8 else 3 if dpmm == 12 else 6

    lines = [
        '^XA',
        '^CI28',
        f'^PW{width}',
        f'^LL{height}',
        '^LH0,0',
        _print_quantity(copies),

        f'^FO{margin},{title_y}',
        f'^A0N,{title_font},{title_font}',
        f'^FB{full_width},1,0,L,0',
        f'^FD{escape_zpl(title)}^FS',
    ]

    if size:
        lines += [
            f'^FO{margin},{size_y}',
            f'^A0N,{info_font},{info_font}',
            f'^FD{escape_zpl(size)}^FS',
        ]

    lines += [
        f'^FO{margin},{price_y}',
        f'^A0N,{price_font},{price_font}',
        f'^FD{escape_zpl(price_text)}^FS',
    ]

    if multibuy_text:
        lines += [
            f'^FO{margin},{multibuy_y}',
            f'^A0N,{info_font},{info_font}',
            f'^FD{escape_zpl(multibuy_text)}^FS',
        ]

    lines += [
        f'^FO{margin},{barcode_y}',
        f'^BY{module}',
        f'^BCN,{barcode_height},N,N,N',
        f'^FD{escape_zpl(barcode)}^FS',
    ]

    if lot_number:
        lines += [
            f'^FO{margin},{height - margin - info_font}',
            f'^A0N,{info_font},{info_font}',
            f'^FB{full_width},1,0,R,0',
            f'^FD{escape_zpl(lot_number)}^FS',
        ]

    lines.append('^XZ')
    return '\n'.join(line for line in lines if line)


def batch_payload(batch_number) -> str:
    return f'ht:batch:{batch_number}'


def build_batch_label(batch_number, variety: str, family: str, quantity, size: str,
                      location: Optional[str] = None, payload: Optional[str] = None,
                      copies=1, dpi=300) -> str:
    """
    Batch label, 70 x 50 mm.

    A DataMatrix with the batch payload top left, variety and family beside
    it, then a size / quantity / location line and the batch number large
    at the bottom.
    """
    dpmm = dots_per_mm(dpi)
    width = mm(70, dpmm)
    height = mm(50, dpmm)
    margin = mm(2, dpmm)

    dm_side = mm(18, dpmm)
    dm_module = 10 if dpi == 300 else 20 if dpi == 600 else 7

    text_x = margin + dm_side + mm(3, dpmm)
    text_width = width - text_x - margin
    full_width = width - 2 * margin

    variety_font = mm(7, dpmm)
    info_font = mm(5, dpmm)
    batch_font = mm(9, dpmm)

    variety_y = margin + mm(1, dpmm)
    family_y = margin + mm(9, dpmm)
    info_y = margin + dm_side + mm(2, dpmm)
    batch_y = height - margin - mm(9, dpmm)

    # info line carries no colons
    info_items = [size or '', f'Qty {quantity}']
    if location:
        info_items.append(location)
    info_line = '  /  '.join(info_items)

    lines = [
        '^XA',
        '^CI28',
        f'^PW{width}',
        f'^LL{height}',
        '^LH0,0',
        _print_quantity(copies),

        f'^FO{margin},{margin}',
        f'^BXN,{dm_module},200',
        f'^FD{escape_zpl(payload or batch_payload(batch_number))}^FS',

        f'^FO{text_x},{variety_y}',
        f'^A0N,{variety_font},{variety_font}',
        f'^FB{text_width},2,0,L,0',
        f'^FD{escape_zpl(variety)}^FS',

        f'^FO{text_x},{family_y}',
        f'^A0N,{info_font},{info_font}',
        f'^FB{text_width},1,0,L,0',
        f'^FD{escape_zpl(family)}^FS',

        f'^FO{margin},{info_y}',
        f'^A0N,{info_font},{info_font}',
        f'^FD{escape_zpl(info_line)}^FS',

        f'^FO{margin},{batch_y}',
        f'^A0N,{batch_font},{batch_font}',
        f'^FB{full_width},1,0,R,0',
        f'^FD#{escape_zpl(batch_number)}^FS',

        '^XZ',
    ]
    return '\n'.join(line for line in lines if line)


def build_test_label(printer_name, dpi=203) -> str:
    """Small label to check a printer is reachable and aligned"""
    dpmm = dots_per_mm(dpi)
    font = mm(4, dpmm)
    return '\n'.join([
        '^XA',
        '^CI28',
        f'^FO{mm(2, dpmm)},{mm(2, dpmm)}',
        f'^A0N,{font},{font}',
        f'^FDTest print {escape_zpl(printer_name)}^FS',
        '^XZ',
    ])


CURRENCY_SYMBOLS = {'EUR': '€', 'GBP': '£'}


def price_text(amount, currency='EUR') -> str:
    """``€5.99``; unknown currencies fall back to the ISO code"""
    symbol = CURRENCY_SYMBOLS.get(currency)
    formatted = f'{amount:.2f}'
    return f'{symbol}{formatted}' if symbol else f'{currency} {formatted}'


def multibuy_text(quantity, price, currency='EUR') -> str:
    """``3 for €10.00``, or an empty string when there is no offer"""
    if not quantity or price is None:
        return ''
    return f'{quantity} for {price_text(price, currency)}'
