"""
Cliente del REST API de WordPress
Publica, actualiza y busca posts/páginas usando Basic Auth con contraseña de aplicación
"""

import re
import logging
from base64 import b64encode
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from . import config
from .exceptions import (
    AmbiguousResponseError,
    InvalidResponseError,
    MissingCredentialsError,
    MissingParameterError,
    RemoteRejectedError,
    WordPressConnectionError,
    WordPressError,
)
from .models import GeneratedContent, PublishResult, WpPost, WpTag, to_collection

logger = logging.getLogger(__name__)

POST_FIELDS = "id,title,content,excerpt"

_SCHEME_RE = re.compile(r'^https?://', re.IGNORECASE)
_WP_ADMIN_RE = re.compile(r'/wp-admin/?$')


def normalize_site_url(url: str) -> str:
    """
    Normaliza la URL de un sitio WordPress

    Añade https:// si falta el esquema, quita un /wp-admin final y la barra final.
    Aplicarla dos veces da el mismo resultado.
    """
    url = (url or '').strip()

    match = _SCHEME_RE.match(url)
    if match:
        scheme, rest = url[:match.end()], url[match.end():]
    else:
        scheme, rest = 'https://', url

    # Repetir hasta que no cambie (ej: /wp-admin// o dos barras finales)
    while True:
        stripped = _WP_ADMIN_RE.sub('', rest)
        if stripped.endswith('/'):
            stripped = stripped[:-1]
        if stripped == rest:
            break
        rest = stripped

    return scheme + rest


def build_auth_header(username: str, password: str) -> str:
    """Crea la cabecera Authorization de Basic Auth"""
    credentials = f"{username}:{password}"
    token = b64encode(credentials.encode()).decode('ascii')
    return f'Basic {token}'


class WordPressAPI:
    """Cliente para interactuar con el REST API de WordPress"""

    def __init__(self, url: str, username: str, password: str,
                 timeout: float = config.WP_TIMEOUT,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = normalize_site_url(url) if url and url.strip() else ''
        self.username = username
        self.password = password
        self.timeout = timeout
        self._transport = transport

        self.headers = {
            'Authorization': build_auth_header(username or '', password or ''),
            'Content-Type': 'application/json',
            'Accept': 'application/json'
        }

    def _require_credentials(self):
        if not all([self.url, self.username, self.password]):
            raise MissingCredentialsError(
                "Faltan credenciales de WordPress: URL del sitio, usuario y contraseña de aplicación son obligatorios"
            )

    async def _request(self, method: str, endpoint: str, data: Optional[Dict] = None,
                       params: Optional[Dict] = None) -> Any:
        """Realiza petición HTTP al API de WordPress y devuelve el JSON de la respuesta"""
        url = f"{self.url}/wp-json/wp/v2/{endpoint}"

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.request(method, url, headers=self.headers, json=data, params=params)
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                raise WordPressConnectionError(f"Error de conexión con {self.url}: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise InvalidResponseError(
                f"Respuesta no válida de {url} (HTTP {response.status_code}). "
                "Comprueba la URL del sitio y que el REST API esté activo"
            ) from e

        if not response.is_success:
            message = None
            code = None
            details = None
            if isinstance(payload, dict):
                message = payload.get('message')
                code = payload.get('code')
                details = payload.get('data') if isinstance(payload.get('data'), dict) else None
            raise RemoteRejectedError(
                f"Error de WordPress (HTTP {response.status_code}): {message or response.reason_phrase}",
                status_code=response.status_code,
                code=code,
                data=details,
            )

        return payload

    # === Tags ===
    async def list_tags(self, per_page: int = 100) -> List[Dict]:
        """Lista las etiquetas más usadas"""
        params = {'per_page': per_page, 'orderby': 'count', 'order': 'desc'}
        return await self._request('GET', 'tags', params=params)

    async def create_tag(self, name: str) -> Dict:
        """Crea una nueva etiqueta"""
        return await self._request('POST', 'tags', data={'name': name})

    async def resolve_tags(self, tag_names: List[str]) -> List[int]:
        """
        Convierte nombres de etiquetas en IDs, creando las que no existan

        Nunca lanza excepciones: las etiquetas que no se pueden resolver se omiten
        para no bloquear la publicación.

        Args:
            tag_names: Nombres de etiquetas en el orden deseado

        Returns:
            Lista de IDs en el mismo orden (sin las que fallaron)
        """
        if not tag_names:
            return []

        existing: Dict[str, int] = {}
        try:
            tags = await self.list_tags(per_page=100)
            if isinstance(tags, list):
                for tag in tags:
                    try:
                        wp_tag = WpTag.model_validate(tag)
                    except ValidationError:
                        continue
                    existing[wp_tag.name.lower()] = wp_tag.id
        except WordPressError as e:
            logger.warning(f"⚠️ No se pudieron obtener las etiquetas existentes: {e}")

        tag_ids = []
        for tag_name in tag_names:
            key = tag_name.lower()
            if key in existing:
                tag_ids.append(existing[key])
                continue

            try:
                new_tag = await self.create_tag(tag_name)
                tag_id = new_tag.get('id') if isinstance(new_tag, dict) else None
                if tag_id is None:
                    raise InvalidResponseError(f"La etiqueta creada no tiene ID: {new_tag}")
            except RemoteRejectedError as e:
                # Ya existe pero no estaba entre las 100 más usadas
                tag_id = e.data.get('term_id') if e.code == 'term_exists' else None
                if tag_id is None:
                    logger.error(f"❌ Error creando tag {tag_name}: {e}")
                    continue
            except WordPressError as e:
                logger.error(f"❌ Error creando tag {tag_name}: {e}")
                continue

            logger.info(f"Tag creado: {tag_name} (ID: {tag_id})")
            existing[key] = tag_id
            tag_ids.append(tag_id)

        return tag_ids

    # === Posts y páginas ===
    async def publish(self, content: GeneratedContent) -> PublishResult:
        """
        Publica un contenido nuevo o actualiza uno existente

        Si el contenido trae post_id se actualiza {colección}/{id}, si no se crea en {colección}.
        Ambos casos usan POST.
        """
        self._require_credentials()

        collection = to_collection(content.post_type)
        endpoint = f"{collection}/{content.post_id}" if content.post_id else collection

        data = {
            'title': content.title,
            'content': content.body,
            'status': 'publish'
        }
        if collection == 'posts' and content.tags:
            tag_ids = await self.resolve_tags(content.tags)
            if tag_ids:
                data['tags'] = tag_ids

        action = 'Actualizando' if content.post_id else 'Publicando'
        logger.info(f"📝 {action} en {self.url}: {endpoint}")

        result = await self._request('POST', endpoint, data=data)

        if not isinstance(result, dict) or not result.get('link') or result.get('id') is None:
            raise AmbiguousResponseError(
                "WordPress respondió con éxito pero sin 'link' o 'id'. "
                "Revisa el sitio antes de volver a publicar"
            )

        return PublishResult(post_url=result['link'], post_id=result['id'])

    async def search(self, query: str, post_type: str = 'posts') -> List[WpPost]:
        """Busca posts o páginas publicados por término"""
        self._require_credentials()
        if not query or not query.strip():
            raise MissingParameterError("El término de búsqueda no puede estar vacío")

        collection = to_collection(post_type)
        params = {'search': query, 'status': 'publish', '_fields': POST_FIELDS}
        result = await self._request('GET', collection, params=params)

        if not isinstance(result, list):
            raise InvalidResponseError("Se esperaba una lista de resultados. Comprueba la URL del sitio")
        try:
            return [WpPost.model_validate(item) for item in result]
        except ValidationError as e:
            raise InvalidResponseError(f"Resultados con formato inesperado: {e}") from e

    async def get_post(self, post_id: Optional[int], post_type: str = 'posts') -> WpPost:
        """Obtiene un post o página por ID"""
        self._require_credentials()
        if post_id is None or post_id == '':
            raise MissingParameterError("El ID del contenido es obligatorio")

        collection = to_collection(post_type)
        result = await self._request('GET', f"{collection}/{post_id}", params={'_fields': POST_FIELDS})

        try:
            return WpPost.model_validate(result)
        except ValidationError as e:
            raise InvalidResponseError(f"Contenido con formato inesperado: {e}") from e
