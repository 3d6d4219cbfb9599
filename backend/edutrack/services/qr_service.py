"""QR Code generation service."""
import base64
import io

import qrcode


class QRService:
    """Service for QR code operations."""

    @staticmethod
    def generate_qr_image(data: str, box_size: int = 10, border: int = 2) -> str:
        """Encode ``data`` as a PNG QR code and return it as a data URL."""
        qr = qrcode.QRCode(
            version=None,  # Auto-determine size
            error_correction=qrcode.constants.ERROR_CORRECT_H,
            box_size=box_size,
            border=border,
        )
        qr.add_data(data)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")

        buffered = io.BytesIO()
        img.save(buffered, format="PNG")
        img_str = base64.b64encode(buffered.getvalue()).decode()

        return f"data:image/png;base64,{img_str}"
