import io

import qrcode
from qrcode.constants import ERROR_CORRECT_H

from src.service.ticketing.app.interface.i_qr_code_renderer import IQrCodeRenderer


class QrCodeRendererImpl(IQrCodeRenderer):
    # 500px target: box size is derived from the module count after fitting
    TARGET_SIZE_PX = 500
    BORDER = 2

    def render_png(self, *, data: str) -> bytes:
        qr = qrcode.QRCode(version=None, error_correction=ERROR_CORRECT_H, border=self.BORDER)
        qr.add_data(data)
        qr.make(fit=True)

        modules = qr.modules_count + 2 * self.BORDER
        qr.box_size = max(1, self.TARGET_SIZE_PX // modules)

        img = qr.make_image(fill_color='black', back_color='white').get_image()
        buffer = io.BytesIO()
        img.save(buffer, format='PNG')
        return buffer.getvalue()
