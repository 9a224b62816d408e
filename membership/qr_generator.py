"""
Verification code generator
Renders the QR code printed on a member's card. Scanning it opens the
public verification page for that record.
"""

from io import BytesIO

import qrcode


def verification_url(base_url, record_id):
    return f"{base_url.rstrip('/')}/verify/{record_id}"


def render_verification_code(url, box_size=10, border=2):
    """Render ``url`` as a PNG QR code and return the image bytes.

    The same URL always produces the same image.
    """
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_H,
        box_size=box_size,
        border=border,
    )
    qr.add_data(url)
    qr.make(fit=True)

    img = qr.make_image(fill_color='black', back_color='white')
    buffer = BytesIO()
    img.save(buffer, 'PNG')
    return buffer.getvalue()
