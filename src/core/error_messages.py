"""Tabla código de error del backend -> mensaje para el usuario.

La tabla se mantiene fuera de la lógica de clasificación: `core.errors` solo
la consulta por código. Los textos son los que muestra la aplicación web.
"""

from __future__ import annotations

ERROR_MESSAGES: dict[str, str] = {
    # Cursos
    "COURSE001": "Khóa học đã tồn tại",
    "COURSE002": "Không thể xóa khóa học đang diễn ra",
    "COURSE003": "Bạn không có quyền thực hiện hành động này",
    # Formularios
    "FORM001": "Vui lòng điền đầy đủ thông tin",
    "SUCCESS001": "Thao tác thành công",
    # Subida de ficheros
    "FILE001": "Định dạng file không hợp lệ. Chỉ chấp nhận ảnh hoặc PDF.",
    "FILE002": "File quá lớn. Kích thước tối đa là 5MB.",
    "FILE003": "Không thể tải file lên. Vui lòng thử lại.",
}


def lookup_message(code: str | None) -> str | None:
    if not code:
        return None
    return ERROR_MESSAGES.get(code.strip().upper())
