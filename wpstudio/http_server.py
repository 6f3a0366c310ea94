#!/usr/bin/env python3
"""
Servidor HTTP (REST API) de WP Content Studio
Genera contenido con IA, lo publica en WordPress y guarda el historial de cada usuario
"""

import logging
from typing import List, Optional

import httpx
from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__, config
from .actions import (
    generate_from_comment_action,
    generate_from_photo_action,
    get_wordpress_post_action,
    improve_post_action,
    publish_to_wordpress_action,
    search_wordpress_posts_action,
)
from .ai_content_generator import AIContentGenerator
from .exceptions import (
    AmbiguousResponseError,
    ContentGenerationError,
    InvalidResponseError,
    MissingCredentialsError,
    MissingParameterError,
    RemoteRejectedError,
    StoreError,
    WordPressConnectionError,
)
from .models import (
    GeneratedContent,
    GenerateFromCommentRequest,
    GenerateFromPhotoRequest,
    GetPostRequest,
    HistoryEvent,
    HistoryEventDetails,
    ImprovePostRequest,
    PublishRequest,
    SearchRequest,
    WpConnection,
    WpPost,
)
from .store import DocumentStore

logger = logging.getLogger(__name__)

# Crear aplicación FastAPI
app = FastAPI(
    title="WP Content Studio API",
    description="Genera contenido para WordPress con IA y publícalo desde un solo lugar",
    version=__version__
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Clientes globales (se crean al primer uso)
_ai_generator: Optional[AIContentGenerator] = None
_store: Optional[DocumentStore] = None


# === Dependencias ===

def get_ai_generator() -> AIContentGenerator:
    global _ai_generator
    if _ai_generator is None:
        _ai_generator = AIContentGenerator()
    return _ai_generator


def get_store() -> DocumentStore:
    global _store
    if _store is None:
        _store = DocumentStore()
    return _store


def get_wp_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Transporte HTTP para WordPress (None = red real)"""
    return None


def require_ai(generator: AIContentGenerator = Depends(get_ai_generator)) -> AIContentGenerator:
    if not generator.is_available():
        raise HTTPException(
            status_code=503,
            detail="Generador de IA no disponible. Configure AI_API_KEY"
        )
    return generator


def require_user(x_user_id: Optional[str] = Header(default=None)) -> str:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Debes iniciar sesión")
    return x_user_id


def record_event(store: DocumentStore, user_id: Optional[str], event: HistoryEvent):
    """Guarda un evento del historial sin interrumpir la acción principal"""
    if not user_id:
        return
    try:
        store.add_history_event(user_id, event)
    except StoreError as e:
        logger.error(f"❌ Error guardando historial: {e}")


# === Manejo de errores ===

@app.exception_handler(MissingCredentialsError)
@app.exception_handler(MissingParameterError)
@app.exception_handler(ValueError)
async def bad_request_handler(request: Request, exc: Exception):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(RemoteRejectedError)
async def remote_rejected_handler(request: Request, exc: RemoteRejectedError):
    return JSONResponse(
        status_code=502,
        content={"detail": str(exc), "wp_status": exc.status_code, "wp_code": exc.code}
    )


@app.exception_handler(InvalidResponseError)
@app.exception_handler(AmbiguousResponseError)
async def bad_gateway_handler(request: Request, exc: Exception):
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.exception_handler(WordPressConnectionError)
async def connection_error_handler(request: Request, exc: WordPressConnectionError):
    return JSONResponse(status_code=504, content={"detail": str(exc)})


@app.exception_handler(ContentGenerationError)
async def generation_error_handler(request: Request, exc: ContentGenerationError):
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error(f"❌ Error del almacén: {exc}")
    return JSONResponse(status_code=500, content={"detail": str(exc)})


# === Endpoints de Salud ===

@app.get("/")
async def root(generator: AIContentGenerator = Depends(get_ai_generator)):
    """Endpoint raíz - información del servidor"""
    return {
        "name": "WP Content Studio API",
        "version": __version__,
        "status": "running",
        "ai_available": generator.is_available()
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


# === Endpoints de IA ===

@app.post("/ai/generate-from-comment", response_model=GeneratedContent)
def generate_from_comment(request: GenerateFromCommentRequest,
                          generator: AIContentGenerator = Depends(require_ai)):
    """Genera título, contenido y etiquetas a partir de un comentario (sin publicar)"""
    return generate_from_comment_action(generator, request.comment)


@app.post("/ai/generate-from-photo", response_model=GeneratedContent)
def generate_from_photo(request: GenerateFromPhotoRequest,
                        generator: AIContentGenerator = Depends(require_ai)):
    """Analiza una foto y genera un post a partir de ella"""
    return generate_from_photo_action(generator, request.photo_data_uri)


@app.post("/ai/improve-post", response_model=GeneratedContent)
def improve_post(request: ImprovePostRequest,
                 generator: AIContentGenerator = Depends(require_ai)):
    """Reescribe un post existente con el estilo deseado"""
    return improve_post_action(generator, request.existing_post, request.desired_style)


# === Endpoints de WordPress ===

@app.post("/wordpress/publish")
async def publish(request: PublishRequest,
                  x_user_id: Optional[str] = Header(default=None),
                  store: DocumentStore = Depends(get_store),
                  transport: Optional[httpx.AsyncBaseTransport] = Depends(get_wp_transport)):
    """
    Publica el contenido o actualiza uno existente (si trae post_id)

    Ejemplo:
    POST /wordpress/publish
    Body: {
        "wp_url": "misitio.com",
        "wp_username": "admin",
        "wp_app_password": "xxxx xxxx xxxx xxxx",
        "content": {"title": "Hola", "body": "<p>Mundo</p>", "tags": ["noticias"]}
    }
    """
    content = request.content
    result = await publish_to_wordpress_action(content, request.credentials(), transport=transport)
    logger.info(f"✅ Contenido publicado: {result.post_url}")

    record_event(store, x_user_id, HistoryEvent(
        type="edition" if content.post_id else "creation",
        details=HistoryEventDetails(
            post_url=result.post_url,
            post_id=result.post_id,
            post_title=content.title,
            wp_url=request.wp_url,
            wp_username=request.wp_username,
            post_type=content.post_type,
        )
    ))

    return {
        "success": True,
        "updated": bool(content.post_id),
        "post_url": result.post_url,
        "post_id": result.post_id
    }


@app.post("/wordpress/search", response_model=List[WpPost])
async def search(request: SearchRequest,
                 x_user_id: Optional[str] = Header(default=None),
                 store: DocumentStore = Depends(get_store),
                 transport: Optional[httpx.AsyncBaseTransport] = Depends(get_wp_transport)):
    """Busca posts o páginas publicados; si hay resultados guarda la conexión"""
    results = await search_wordpress_posts_action(
        request.query, request.credentials(), request.post_type, transport=transport
    )

    if results and x_user_id:
        store.add_or_update_connection(x_user_id, request.wp_url, request.wp_username)
        record_event(store, x_user_id, HistoryEvent(
            type="connection",
            details=HistoryEventDetails(wp_url=request.wp_url, wp_username=request.wp_username)
        ))

    return results


@app.post("/wordpress/post", response_model=WpPost)
async def get_post(request: GetPostRequest,
                   transport: Optional[httpx.AsyncBaseTransport] = Depends(get_wp_transport)):
    """Obtiene un post o página por ID"""
    return await get_wordpress_post_action(
        request.post_id, request.credentials(), request.post_type, transport=transport
    )


# === Historial y conexiones ===

@app.get("/history", response_model=List[HistoryEvent])
async def history(limit: int = 50,
                  user_id: str = Depends(require_user),
                  store: DocumentStore = Depends(get_store)):
    return store.list_history(user_id, limit=limit)


@app.get("/connections", response_model=List[WpConnection])
async def connections(user_id: str = Depends(require_user),
                      store: DocumentStore = Depends(get_store)):
    return store.list_connections(user_id)


# === Main ===

def main():
    """Arranca el servidor HTTP con uvicorn (python -m wpstudio.http_server o http_server_wrapper.py)"""
    import uvicorn

    logging.basicConfig(
        level=config.LOG_LEVEL,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    print("=" * 60)
    print("🚀 WP Content Studio HTTP Server")
    print("=" * 60)
    print(f"Puerto: {config.PORT}")
    print()
    print("Endpoints principales:")
    print("  POST /ai/generate-from-comment  - Generar contenido con IA")
    print("  POST /wordpress/publish         - Publicar o actualizar")
    print("  POST /wordpress/search          - Buscar posts/páginas")
    print()

    uvicorn.run(app, host="0.0.0.0", port=config.PORT)


if __name__ == "__main__":
    main()
