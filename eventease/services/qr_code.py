"""Renders check-in tokens as PNG QR codes."""

import base64
import io
import logging
from typing import Optional
import qrcode
from qrcode.exceptions import DataOverflowError

logger = logging.getLogger(__name__)

ERROR_CORRECTION_LEVELS = {
    "L": qrcode.constants.ERROR_CORRECT_L,  # ~7%
    "M": qrcode.constants.ERROR_CORRECT_M,  # ~15%
    "Q": qrcode.constants.ERROR_CORRECT_Q,  # ~25%
    "H": qrcode.constants.ERROR_CORRECT_H,  # ~30%
}


class EncodingError(Exception):
    pass


class QRCodeEncoder:
    def __init__(self, box_size: int = 8, border: int = 1, error_correction: str = "M"):
        self.box_size = box_size
        self.border = border
        self.error_correction = self._level(error_correction)

    @staticmethod
    def _level(error_correction: str) -> int:
        try:
            return ERROR_CORRECTION_LEVELS[error_correction.upper()]
        except (KeyError, AttributeError):
            raise ValueError(
                f"Unknown QR error correction level {error_correction!r}; "
                f"expected one of {sorted(ERROR_CORRECTION_LEVELS)}"
            )

    def encode(self, data: str, version: Optional[int] = None,
               error_correction: Optional[str] = None) -> bytes:
        """Render ``data`` as PNG bytes.

        With ``version`` left as None the smallest symbol that fits is chosen.
        A fixed ``version`` (1-40) is never grown; data that does not fit
        raises EncodingError instead of being truncated.
        """
        if version is not None and not 1 <= version <= 40:
            raise ValueError(f"QR version must be between 1 and 40, got {version}")
        level = self._level(error_correction) if error_correction else self.error_correction

        qr = qrcode.QRCode(
            version=version,
            error_correction=level,
            box_size=self.box_size,
            border=self.border,
        )
        qr.add_data(data)
        try:
            qr.make(fit=version is None)
        except (DataOverflowError, ValueError) as e:
            # Auto-fit past version 40 surfaces as ValueError from best_fit
            logger.warning(
                f"QR payload of {len(data)} characters does not fit version={version}"
            )
            raise EncodingError(
                f"Data of length {len(data)} exceeds QR capacity for version={version}"
            ) from e

        image = qr.make_image(fill_color="black", back_color="white")
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()

    def encode_base64(self, data: str, **kwargs) -> str:
        return base64.b64encode(self.encode(data, **kwargs)).decode("ascii")
