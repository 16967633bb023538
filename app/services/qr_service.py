"""
QR Code Service

Renders the short link of a URL as an SVG QR code with the qrcode library.
"""

from io import BytesIO

import qrcode
import qrcode.image.svg

SVG_MEDIA_TYPE = "image/svg+xml"


class QRCodeService:
    """Generates QR codes for short links."""

    def __init__(self, box_size: int = 10, border: int = 4):
        self.box_size = box_size
        self.border = border

    def generate_svg(self, url: str) -> bytes:
        """
        Render a URL as a standalone SVG document.

        Args:
            url: Content encoded in the QR code

        Returns:
            SVG bytes
        """
        image = qrcode.make(
            url,
            image_factory=qrcode.image.svg.SvgPathImage,
            box_size=self.box_size,
            border=self.border,
        )
        buffer = BytesIO()
        image.save(buffer)
        return buffer.getvalue()
