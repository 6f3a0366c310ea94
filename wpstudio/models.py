"""
Modelos de WP Content Studio
Modelos de datos para contenido, credenciales y respuestas del API de WordPress
"""

from pydantic import BaseModel, BeforeValidator, Field, field_validator
from typing import Annotated, List, Optional, Literal, Any
from dataclasses import dataclass

WpPostType = Literal["posts", "pages"]
HistoryEventType = Literal["creation", "edition", "connection"]

# Alias aceptados para el tipo de colección
POST_TYPE_ALIASES = {
    "post": "posts",
    "posts": "posts",
    "page": "pages",
    "pages": "pages",
}


def to_collection(post_type: Optional[str]) -> str:
    """Convierte 'post'/'page' (o sus plurales) en la ruta de la colección. Por defecto 'posts'"""
    if not post_type:
        return "posts"
    try:
        return POST_TYPE_ALIASES[post_type.lower()]
    except KeyError:
        raise ValueError(f"Tipo de contenido no soportado: {post_type}")


def _post_type_alias(value: Any) -> Any:
    if value is None:
        return "posts"
    if isinstance(value, str):
        return POST_TYPE_ALIASES.get(value.lower(), value)
    return value


# Acepta también "post"/"page"
PostTypeField = Annotated[WpPostType, BeforeValidator(_post_type_alias)]


@dataclass
class SiteCredentials:
    """Credenciales de un sitio WordPress (usuario + contraseña de aplicación)"""
    site_url: str
    username: str
    application_password: str

    def is_complete(self) -> bool:
        return bool(self.site_url and self.username and self.application_password)


@dataclass
class PublishResult:
    """Resultado de publicar o actualizar un contenido"""
    post_url: str
    post_id: int


class GeneratedContent(BaseModel):
    """Contenido listo para publicar (generado por IA o editado a mano)"""
    title: str = Field(description="Título del post")
    body: str = Field(description="Contenido del post (HTML permitido)")
    tags: List[str] = Field(default_factory=list, description="Nombres de etiquetas")
    post_id: Optional[str] = Field(default=None, description="ID a actualizar; vacío = crear")
    post_type: PostTypeField = Field(default="posts", description="Colección destino")

    @field_validator("post_id", mode="before")
    @classmethod
    def _stringify_post_id(cls, value: Any) -> Any:
        if value is None or value == "":
            return None
        return str(value)


class PhotoSuggestions(BaseModel):
    """Temas e ideas sugeridos a partir de una foto"""
    suggested_topics: List[str] = Field(default_factory=list)
    content_ideas: List[str] = Field(default_factory=list)


class WpTag(BaseModel):
    id: int
    name: str


class Rendered(BaseModel):
    rendered: str = ""


class WpPost(BaseModel):
    """Post o página tal como lo devuelve WordPress (HTML renderizado)"""
    id: int
    title: Rendered = Field(default_factory=Rendered)
    content: Rendered = Field(default_factory=Rendered)
    excerpt: Rendered = Field(default_factory=Rendered)


class HistoryEventDetails(BaseModel):
    post_url: Optional[str] = None
    post_title: Optional[str] = None
    wp_url: Optional[str] = None
    post_type: Optional[WpPostType] = None
    wp_username: Optional[str] = None
    post_id: Optional[int] = None


class HistoryEvent(BaseModel):
    """Evento del historial de actividad de un usuario"""
    id: Optional[str] = None
    type: HistoryEventType
    timestamp: Optional[str] = None
    details: HistoryEventDetails = Field(default_factory=HistoryEventDetails)


class WpConnection(BaseModel):
    """Conexión guardada a un sitio (nunca guarda la contraseña)"""
    id: Optional[str] = None
    wp_url: str
    wp_username: str
    last_used: Optional[str] = None


# === Modelos de Request ===

class WordPressSiteRequest(BaseModel):
    """Datos de conexión enviados en cada petición"""
    wp_url: str = ""
    wp_username: str = ""
    wp_app_password: str = ""

    def credentials(self) -> SiteCredentials:
        return SiteCredentials(self.wp_url, self.wp_username, self.wp_app_password)


class GenerateFromCommentRequest(BaseModel):
    """Request para generar contenido a partir de un comentario"""
    comment: str


class GenerateFromPhotoRequest(BaseModel):
    """Request para generar contenido a partir de una foto (data URI en base64)"""
    photo_data_uri: str


class ImprovePostRequest(BaseModel):
    """Request para reescribir un post existente con otro estilo"""
    existing_post: str
    desired_style: str


class PublishRequest(WordPressSiteRequest):
    """Request para publicar o actualizar contenido"""
    content: GeneratedContent


class SearchRequest(WordPressSiteRequest):
    """Request para buscar posts o páginas"""
    query: str = ""
    post_type: PostTypeField = "posts"


class GetPostRequest(WordPressSiteRequest):
    """Request para obtener un post o página por ID"""
    post_id: Optional[int] = None
    post_type: PostTypeField = "posts"
