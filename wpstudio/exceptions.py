"""
Errores del servicio
Cada fallo se lanza donde ocurre y se propaga hasta quien llamó
"""

from typing import Any, Optional


class WordPressError(Exception):
    """Error base de la integración con WordPress"""


class MissingCredentialsError(WordPressError):
    """Faltan la URL del sitio, el usuario o la contraseña de aplicación"""


class MissingParameterError(WordPressError):
    """Falta un parámetro obligatorio (búsqueda vacía, ID ausente...)"""


class WordPressConnectionError(WordPressError):
    """Fallo de red o de transporte"""


class RemoteRejectedError(WordPressError):
    """WordPress respondió con un estado HTTP de error"""

    def __init__(self, message: str, status_code: int, code: Optional[str] = None,
                 data: Optional[dict] = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.data = data or {}


class InvalidResponseError(WordPressError):
    """La respuesta no es JSON válido (probablemente la URL del sitio es incorrecta)"""


class AmbiguousResponseError(WordPressError):
    """Respuesta exitosa pero sin 'link' o 'id'"""


class ContentGenerationError(Exception):
    """Error generando contenido con IA"""


class StoreError(Exception):
    """Error del almacén de historial y conexiones"""


class StorePermissionError(StoreError):
    """No se pudo escribir o leer un documento del almacén"""

    def __init__(self, path: str, operation: str, request_resource_data: Any = None):
        self.path = path
        self.operation = operation
        self.request_resource_data = request_resource_data
        on_path = f" on path '{path}'" if path else ""
        super().__init__(f"Store Permission Denied: Cannot {operation}{on_path}")

    def to_context_dict(self) -> dict:
        return {
            "message": str(self),
            "context": {
                "path": self.path,
                "operation": self.operation,
                "request_resource_data": self.request_resource_data,
            },
        }
