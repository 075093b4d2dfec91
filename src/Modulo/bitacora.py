# -*- coding: utf-8 -*-
"""
Módulo de Lógica de Negocio (Modelo) — Bitácora Entre Dos Mundos.

Contiene el modelo de publicaciones, el adaptador hacia el almacén local y
las funciones puras que derivan la vista (filtro -> búsqueda -> orden ->
destacado -> más historias -> selección).
"""
from __future__ import annotations  # Anotaciones diferidas para tipos

import json  # Serialización de la colección completa
import logging  # Registro de eventos del modelo
import uuid  # Identificadores opacos para nuevos posts
from datetime import datetime, timezone  # Marcas de tiempo ISO-8601
from typing import Any, Dict, List, Optional, Sequence  # Tipado para claridad

import gestor_datos  # Persistencia (almacén local) desacoplada del modelo

logger = logging.getLogger(__name__)

# =========================
# Constantes del dominio
# =========================

STORAGE_POSTS = "bitacora-blog-posts"

TAG_TODOS = "Todos"
TAGS = ("Dev", "Arte", "Vida personal", "Estudios")

ESTADO_BORRADOR = "Borrador"
ESTADO_PUBLICADO = "Publicado"
ESTADOS = (ESTADO_BORRADOR, ESTADO_PUBLICADO)

ORDEN_RECIENTES = "newest"
ORDEN_ANTIGUAS = "oldest"
ORDENES = (ORDEN_RECIENTES, ORDEN_ANTIGUAS)

CAMPOS_POST = ("id", "title", "content", "tag", "status", "createdAt")
CAMPOS_FORMULARIO = ("title", "content", "tag", "status")

TAG_POR_DEFECTO = "Dev"
ESTADO_POR_DEFECTO = ESTADO_BORRADOR


# =========================
# Excepciones de dominio
# =========================

class ErrorDeDominio(Exception):
    """Error base de la bitácora."""


class ValidacionError(ErrorDeDominio):
    """Datos de un artículo o de un control fuera de lo permitido."""


class PostNoEncontrado(ErrorDeDominio):
    """No existe un artículo con el identificador indicado."""


# =========================
# Helpers y validaciones
# =========================

def _ahora_iso() -> str:
    """Obtiene la fecha y hora actual en UTC.

    Returns:
        str: Marca de tiempo ISO-8601 con milisegundos y sufijo 'Z'.
    """
    ahora = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return ahora.replace("+00:00", "Z")


def _generar_id() -> str:
    return str(uuid.uuid4())


def _es_str_no_vacio(valor: Any) -> bool:
    """Indica si el valor es una cadena no vacía tras strip().

    Args:
        valor: Valor a evaluar.

    Returns:
        bool: True si es str y no está vacío; False en caso contrario.
    """
    return isinstance(valor, str) and valor.strip() != ""


def _marca_tiempo(post: Dict[str, Any]) -> float:
    """Convierte 'createdAt' a segundos desde epoch.

    Las fechas ausentes o ilegibles se consideran las más antiguas posibles.

    Args:
        post: Publicación a evaluar.

    Returns:
        float: Segundos desde epoch (o -inf).
    """
    valor = post.get("createdAt")
    if not _es_str_no_vacio(valor):
        return float("-inf")
    texto = valor.strip()
    if texto.endswith("Z"):
        texto = texto[:-1] + "+00:00"
    try:
        fecha = datetime.fromisoformat(texto)
    except ValueError:
        return float("-inf")
    if fecha.tzinfo is None:
        fecha = fecha.replace(tzinfo=timezone.utc)
    return fecha.timestamp()


def validar_tag(tag: Any, *, permitir_todos: bool = False) -> str:
    """Valida que el tag pertenezca a las categorías fijas.

    Args:
        tag: Valor a validar.
        permitir_todos: Si True, acepta también el pseudo-tag 'Todos'.

    Returns:
        str: El tag validado.

    Raises:
        ValidacionError: Si el tag no es una categoría conocida.
    """
    permitidos = (TAG_TODOS, *TAGS) if permitir_todos else TAGS
    if tag not in permitidos:
        raise ValidacionError(f"Categoría desconocida: '{tag}'.")
    return tag


def validar_estado(estado: Any) -> str:
    """Valida que el estado sea 'Borrador' o 'Publicado'.

    Raises:
        ValidacionError: Si el estado no es válido.
    """
    if estado not in ESTADOS:
        raise ValidacionError(f"Estado desconocido: '{estado}'.")
    return estado


def validar_orden(orden: Any) -> str:
    if orden not in ORDENES:
        raise ValidacionError(f"Orden desconocido: '{orden}'.")
    return orden


def validar_formulario(formulario: Dict[str, Any]) -> Dict[str, str]:
    """Valida y normaliza los campos editables de un artículo.

    Título y contenido deben quedar no vacíos tras strip(); tag y estado deben
    pertenecer a sus conjuntos cerrados.

    Args:
        formulario: Diccionario con 'title', 'content', 'tag' y 'status'.

    Returns:
        Dict[str, str]: Campos limpios listos para guardar.

    Raises:
        ValidacionError: Si algún campo es inválido.
    """
    titulo = formulario.get("title")
    contenido = formulario.get("content")
    if not _es_str_no_vacio(titulo):
        raise ValidacionError("El título es obligatorio.")
    if not _es_str_no_vacio(contenido):
        raise ValidacionError("El contenido es obligatorio.")
    return {
        "title": titulo.strip(),
        "content": contenido.strip(),
        "tag": validar_tag(formulario.get("tag")),
        "status": validar_estado(formulario.get("status")),
    }


def formulario_vacio() -> Dict[str, str]:
    """Devuelve el formulario en blanco con sus valores por defecto."""
    return {
        "title": "",
        "content": "",
        "tag": TAG_POR_DEFECTO,
        "status": ESTADO_POR_DEFECTO,
    }


# =========================
# Posts
# =========================

def crear_post(formulario: Dict[str, Any]) -> Dict[str, str]:
    """Crea un nuevo artículo a partir de los datos del formulario.

    Acuña un id nuevo y sella 'createdAt' con la hora actual.

    Args:
        formulario: Campos 'title', 'content', 'tag' y 'status'.

    Returns:
        Dict[str, str]: Post creado.

    Raises:
        ValidacionError: Si los datos son inválidos.
    """
    limpio = validar_formulario(formulario)
    return {
        "id": _generar_id(),
        "title": limpio["title"],
        "content": limpio["content"],
        "tag": limpio["tag"],
        "status": limpio["status"],
        "createdAt": _ahora_iso(),
    }


def aplicar_cambios(post: Dict[str, Any], formulario: Dict[str, Any]) \
        -> Dict[str, Any]:
    """Devuelve una copia del post con sus campos editables reemplazados.

    'id' y 'createdAt' nunca cambian.

    Raises:
        ValidacionError: Si los datos son inválidos.
    """
    limpio = validar_formulario(formulario)
    actualizado = dict(post)  # copia
    actualizado.update(limpio)
    return actualizado


def buscar_post_por_id(posts: Sequence[Dict[str, Any]], id_post: Optional[str]) \
        -> Optional[Dict[str, Any]]:
    """Obtiene un post por su ID.

    Args:
        posts: Colección donde buscar.
        id_post: ID del post.

    Returns:
        Optional[Dict[str, Any]]: Post encontrado o None.
    """
    if id_post is None:
        return None
    for p in posts:
        if p.get("id") == id_post:
            return p
    return None


def posts_semilla() -> List[Dict[str, str]]:
    """Construye el conjunto inicial de tres artículos.

    Returns:
        List[Dict[str, str]]: Posts de ejemplo, todos con la misma fecha.
    """
    ahora = _ahora_iso()
    return [
        {
            "id": "1",
            "title": "Bienvenida a la Bitácora Entre Dos Mundos",
            "content": (
                "Este es un mini blog creado con React para mi portafolio. Aquí "
                "mezclo desarrollo, arte y vida personal, tal como soy en la "
                "realidad. La idea es tener un espacio donde pueda escribir sobre "
                "lo que aprendo, lo que creo y lo que siento."
            ),
            "tag": "Vida personal",
            "status": ESTADO_PUBLICADO,
            "createdAt": ahora,
        },
        {
            "id": "2",
            "title": "Control Ninja: finanzas personales en modo dev",
            "content": (
                "Control Ninja es un organizador de finanzas en React con filtros "
                "por día, semana y mes, categorías personalizables y localStorage. "
                "Lo diseñé pensando en gente real que necesita entender en qué se "
                "le va la plata sin morir en Excel."
            ),
            "tag": "Dev",
            "status": ESTADO_PUBLICADO,
            "createdAt": ahora,
        },
        {
            "id": "3",
            "title": "Katanas & Coffee Store: de acuarelas a ecommerce",
            "content": (
                "Un mini ecommerce ficticio donde junto ilustración, stickers y un "
                "carrito hecho en React. Me sirve para practicar UI, estados y "
                "también imaginar cómo se vería una tienda con todo lo que me gusta."
            ),
            "tag": "Arte",
            "status": ESTADO_BORRADOR,
            "createdAt": ahora,
        },
    ]


# =========================
# Adaptador del almacén
# =========================

def _es_coleccion_valida(datos: Any) -> bool:
    """Indica si el valor guardado es una lista no vacía de posts completos.

    Cada elemento debe ser un diccionario con 'id', 'title', 'content',
    'tag', 'status' y 'createdAt' como cadenas.

    Args:
        datos: Valor ya decodificado del almacén.

    Returns:
        bool: True si la colección se puede usar tal cual.
    """
    if not isinstance(datos, list) or not datos:
        return False
    return all(
        isinstance(p, dict) and all(isinstance(p.get(c), str) for c in CAMPOS_POST)
        for p in datos
    )


def cargar_posts(almacen_filepath: str) -> List[Dict[str, Any]]:
    """Carga la colección guardada o, si no es utilizable, la semilla.

    Un valor ausente, ilegible, que no sea una lista no vacía de posts con
    todos sus campos como texto se reemplaza por ``posts_semilla()``. Nunca lanza por esos casos.

    Args:
        almacen_filepath: Ruta al JSON del almacén local.

    Returns:
        List[Dict[str, Any]]: Colección no vacía.
    """
    guardado = gestor_datos.leer_valor(almacen_filepath, STORAGE_POSTS)
    if guardado:
        try:
            datos = json.loads(guardado)
        except json.JSONDecodeError:
            logger.warning("Colección guardada ilegible; se usa la semilla.")
        else:
            if _es_coleccion_valida(datos):
                logger.info("Cargados %d posts desde %s", len(datos),
                            almacen_filepath)
                return datos
            logger.warning("Colección guardada vacía o inválida; se usa la semilla.")
    else:
        logger.info("Sin colección guardada; se usa la semilla.")
    return posts_semilla()


def guardar_posts(almacen_filepath: str, posts: Sequence[Dict[str, Any]]) -> bool:
    """Guarda la colección completa si no está vacía.

    Args:
        almacen_filepath: Ruta al JSON del almacén local.
        posts: Colección a persistir.

    Returns:
        bool: True si se escribió; False si la colección estaba vacía.
    """
    if not posts:
        logger.debug("Colección vacía: no se guarda.")
        return False
    contenido = json.dumps(list(posts), ensure_ascii=False)
    gestor_datos.escribir_valor(almacen_filepath, STORAGE_POSTS, contenido)
    return True


# =========================
# Vista derivada
# =========================

def filtrar_por_tag(posts: Sequence[Dict[str, Any]], tag: str) \
        -> List[Dict[str, Any]]:
    """Conserva los posts de la categoría indicada ('Todos' no filtra)."""
    if tag == TAG_TODOS:
        return list(posts)
    return [p for p in posts if p.get("tag") == tag]


def filtrar_por_busqueda(posts: Sequence[Dict[str, Any]], busqueda: str) \
        -> List[Dict[str, Any]]:
    """Conserva los posts cuyo título o contenido contiene el término.

    La comparación es insensible a mayúsculas. Un término vacío o solo con
    espacios no filtra.

    Args:
        posts: Posts a filtrar.
        busqueda: Texto libre ingresado por el usuario.

    Returns:
        List[Dict[str, Any]]: Posts coincidentes en su orden original.
    """
    if not _es_str_no_vacio(busqueda):
        return list(posts)
    termino = busqueda.lower()
    return [
        p for p in posts
        if termino in str(p.get("title", "")).lower()
        or termino in str(p.get("content", "")).lower()
    ]


def ordenar_por_fecha(posts: Sequence[Dict[str, Any]], orden: str) \
        -> List[Dict[str, Any]]:
    """Ordena por 'createdAt' de forma estable.

    Args:
        posts: Posts a ordenar.
        orden: 'newest' (descendente) u 'oldest' (ascendente).

    Returns:
        List[Dict[str, Any]]: Nueva lista ordenada.
    """
    return sorted(posts, key=_marca_tiempo, reverse=(orden == ORDEN_RECIENTES))


def elegir_hero(posts: Sequence[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Primer publicado; si no hay, el primero de la lista; si está vacía, None."""
    for p in posts:
        if p.get("status") == ESTADO_PUBLICADO:
            return p
    return posts[0] if posts else None


def mas_historias(posts: Sequence[Dict[str, Any]],
                  hero: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
    id_hero = hero.get("id") if hero else None
    return [p for p in posts if p.get("id") != id_hero]


def resolver_seleccion(posts: Sequence[Dict[str, Any]], id_seleccionado: Optional[str],
                       hero: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Post a mostrar en el panel de lectura.

    Args:
        posts: Lista filtrada y ordenada.
        id_seleccionado: ID guardado como selección.
        hero: Post destacado de la misma lista.

    Returns:
        Optional[Dict[str, Any]]: Post seleccionado, el destacado o None.
    """
    return buscar_post_por_id(posts, id_seleccionado) or hero


def contar_resumen(posts: Sequence[Dict[str, Any]]) -> Dict[str, int]:
    """Totales sobre la colección completa, sin filtros."""
    return {
        "total": len(posts),
        "publicados": sum(1 for p in posts if p.get("status") == ESTADO_PUBLICADO),
        "borradores": sum(1 for p in posts if p.get("status") == ESTADO_BORRADOR),
    }


def derivar_vista(
    posts: Sequence[Dict[str, Any]],
    *,
    filtro_tag: str = TAG_TODOS,
    busqueda: str = "",
    orden: str = ORDEN_RECIENTES,
    id_seleccionado: Optional[str] = None,
) -> Dict[str, Any]:
    """Calcula todo lo que la portada necesita mostrar.

    Pasos en orden fijo: filtro por tag, búsqueda de texto, orden por fecha,
    destacado, más historias y resolución de la selección. Los conteos del
    resumen se calculan sobre la colección completa.

    Args:
        posts: Colección completa.
        filtro_tag: Categoría activa o 'Todos'.
        busqueda: Texto libre de búsqueda.
        orden: 'newest' u 'oldest'.
        id_seleccionado: ID guardado como selección.

    Returns:
        Dict[str, Any]: Claves 'filtrados', 'publicados', 'borradores', 'hero',
        'mas_historias', 'seleccionado' y 'resumen'.
    """
    filtrados = filtrar_por_tag(posts, filtro_tag)
    filtrados = filtrar_por_busqueda(filtrados, busqueda)
    filtrados = ordenar_por_fecha(filtrados, orden)

    hero = elegir_hero(filtrados)
    return {
        "filtrados": filtrados,
        "publicados": [p for p in filtrados if p.get("status") == ESTADO_PUBLICADO],
        "borradores": [p for p in filtrados if p.get("status") == ESTADO_BORRADOR],
        "hero": hero,
        "mas_historias": mas_historias(filtrados, hero),
        "seleccionado": resolver_seleccion(filtrados, id_seleccionado, hero),
        "resumen": contar_resumen(posts),
    }


__all__ = [
    # Constantes
    "STORAGE_POSTS",
    "TAG_TODOS",
    "TAGS",
    "ESTADO_BORRADOR",
    "ESTADO_PUBLICADO",
    "ESTADOS",
    "ORDEN_RECIENTES",
    "ORDEN_ANTIGUAS",
    "ORDENES",
    # Excepciones
    "ErrorDeDominio",
    "ValidacionError",
    "PostNoEncontrado",
    # Validación
    "validar_tag",
    "validar_estado",
    "validar_orden",
    "validar_formulario",
    "formulario_vacio",
    # Posts
    "crear_post",
    "aplicar_cambios",
    "buscar_post_por_id",
    "posts_semilla",
    # Almacén
    "cargar_posts",
    "guardar_posts",
    # Vista
    "filtrar_por_tag",
    "filtrar_por_busqueda",
    "ordenar_por_fecha",
    "elegir_hero",
    "mas_historias",
    "resolver_seleccion",
    "contar_resumen",
    "derivar_vista",
]
