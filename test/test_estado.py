# -*- coding: utf-8 -*-
"""
Pruebas unitarias para src/Modulo/estado.py.

Cubre los comandos de EstadoBitacora:
- Carga inicial desde el almacén (con semilla) y selección inicial
- Formulario: creación, edición, rechazo silencioso de datos vacíos, cancelación
- Eliminación con cascada sobre selección y formulario
- Filtros, búsqueda y orden con reparación de la selección
- Persistencia de la colección completa tras cada cambio

Las pruebas usan un directorio temporal para no afectar data real.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, List

import pytest

MODULE_DIR = Path(__file__).resolve().parents[1] / "src" / "Modulo"
if str(MODULE_DIR) not in sys.path:
    sys.path.insert(0, str(MODULE_DIR))

import bitacora as modelo  # noqa: E402
import gestor_datos  # noqa: E402
from estado import EstadoBitacora  # noqa: E402

TOTAL_SEMILLA = 3


@pytest.fixture
def almacen(tmp_path: Path) -> str:
    return str(tmp_path / "data" / "almacen_local.json")


@pytest.fixture
def estado(almacen: str) -> EstadoBitacora:
    """Estado recién cargado desde un almacén vacío (usa la semilla)."""
    return EstadoBitacora(almacen)


def _ids(posts: List[Dict[str, Any]]) -> List[str]:
    return [p["id"] for p in posts]


def _posts_con_fechas() -> List[Dict[str, Any]]:
    return [
        {"id": "a", "title": "Alfa", "content": "uno", "tag": "Dev",
         "status": "Publicado", "createdAt": "2025-01-01T00:00:00.000Z"},
        {"id": "b", "title": "Beta", "content": "dos", "tag": "Arte",
         "status": "Borrador", "createdAt": "2025-01-02T00:00:00.000Z"},
        {"id": "c", "title": "Gamma", "content": "tres", "tag": "Dev",
         "status": "Publicado", "createdAt": "2025-01-03T00:00:00.000Z"},
    ]


# -------------------
# Carga inicial
# -------------------

def test_estado_inicial_con_semilla(estado: EstadoBitacora, almacen: str) -> None:
    """Sin datos guardados carga la semilla, selecciona el primero y la guarda."""
    assert _ids(estado.posts) == ["1", "2", "3"]
    assert estado.id_seleccionado == "1"
    assert estado.filtro_tag == "Todos"
    assert estado.busqueda == ""
    assert estado.orden == "newest"
    assert not estado.en_edicion
    assert estado.formulario == modelo.formulario_vacio()
    assert gestor_datos.leer_valor(almacen, modelo.STORAGE_POSTS) is not None


def test_estado_recarga_lo_guardado(estado: EstadoBitacora, almacen: str) -> None:
    """Un segundo arranque lee la colección guardada, no la semilla."""
    estado.actualizar_formulario(title="Persistido", content="Sí")
    creado = estado.enviar_formulario()

    otro = EstadoBitacora(almacen)
    assert _ids(otro.posts) == [creado["id"], "1", "2", "3"]
    assert otro.id_seleccionado == creado["id"]


def test_estado_con_coleccion_explicita_no_escribe(almacen: str) -> None:
    """Pasar la colección explícita no toca el almacén hasta el primer cambio."""
    estado = EstadoBitacora(almacen, posts=_posts_con_fechas())
    assert estado.id_seleccionado == "a"
    assert gestor_datos.leer_valor(almacen, modelo.STORAGE_POSTS) is None


# -------------------
# Formulario: creación
# -------------------

def test_crear_post_desde_formulario(estado: EstadoBitacora) -> None:
    """Crear 'Hola'/'Mundo' agrega un borrador al inicio y lo selecciona."""
    borradores_antes = estado.resumen["borradores"]
    estado.actualizar_formulario(title="Hola", content="Mundo", tag="Dev", status="Borrador")
    post = estado.enviar_formulario()

    assert len(estado.posts) == TOTAL_SEMILLA + 1
    assert estado.posts[0] is post
    assert estado.id_seleccionado == post["id"]
    assert estado.vista()["seleccionado"]["id"] == post["id"]
    assert estado.resumen["borradores"] == borradores_antes + 1
    assert estado.formulario == modelo.formulario_vacio()
    assert not estado.en_edicion


def test_envio_invalido_no_cambia_nada(estado: EstadoBitacora, almacen: str) -> None:
    """Título vacío: colección igual y el formulario conserva el contenido."""
    guardado_antes = gestor_datos.leer_valor(almacen, modelo.STORAGE_POSTS)
    estado.actualizar_formulario(title="", content="algo")

    with pytest.raises(modelo.ValidacionError):
        estado.enviar_formulario()

    assert len(estado.posts) == TOTAL_SEMILLA
    assert estado.formulario["content"] == "algo"
    assert not estado.en_edicion
    assert gestor_datos.leer_valor(almacen, modelo.STORAGE_POSTS) == guardado_antes


@pytest.mark.parametrize(("titulo", "contenido"), [("  ", "x"), ("x", "\n "), ("", "")])
def test_envio_invalido_en_edicion_no_sale_de_edicion(
    estado: EstadoBitacora, titulo: str, contenido: str
) -> None:
    """Datos vacíos en edición: no cambia la colección ni se sale del modo edición."""
    estado.editar("2")
    estado.actualizar_formulario(title=titulo, content=contenido)

    with pytest.raises(modelo.ValidacionError):
        estado.enviar_formulario()

    assert estado.editando_id == "2"
    assert len(estado.posts) == TOTAL_SEMILLA
    assert estado.posts[1]["title"].startswith("Control Ninja")


def test_ids_unicos_en_varias_creaciones(estado: EstadoBitacora) -> None:
    for i in range(20):
        estado.actualizar_formulario(title=f"t{i}", content="c")
        estado.enviar_formulario()
    ids = _ids(estado.posts)
    assert len(ids) == len(set(ids))


def test_actualizar_formulario_campo_desconocido(estado: EstadoBitacora) -> None:
    with pytest.raises(modelo.ValidacionError):
        estado.actualizar_formulario(autor="Noemí")


# -------------------
# Formulario: edición
# -------------------

def test_editar_precarga_formulario(estado: EstadoBitacora) -> None:
    estado.editar("3")
    assert estado.en_edicion
    assert estado.formulario == {
        "title": "Katanas & Coffee Store: de acuarelas a ecommerce",
        "content": estado.posts[2]["content"],
        "tag": "Arte",
        "status": "Borrador",
    }


def test_editar_post_conserva_id_fecha_y_posicion(estado: EstadoBitacora) -> None:
    """Editar el post '1' a 'Publicado' conserva id, createdAt y posición."""
    original = dict(estado.posts[0])
    estado.editar("1")
    estado.actualizar_formulario(status="Publicado", title="  Bienvenida editada ")
    post = estado.enviar_formulario()

    assert len(estado.posts) == TOTAL_SEMILLA
    assert estado.posts[0] is post
    assert post["id"] == original["id"]
    assert post["createdAt"] == original["createdAt"]
    assert post["status"] == "Publicado"
    assert post["title"] == "Bienvenida editada"
    assert not estado.en_edicion
    assert estado.formulario == modelo.formulario_vacio()


def test_publicar_borrador_actualiza_resumen(estado: EstadoBitacora, almacen: str) -> None:
    estado.editar("3")
    estado.actualizar_formulario(status="Publicado")
    estado.enviar_formulario()

    assert estado.resumen == {"total": 3, "publicados": 3, "borradores": 0}
    recargado = modelo.cargar_posts(almacen)
    assert recargado[2]["status"] == "Publicado"


def test_editar_inexistente_lanza(estado: EstadoBitacora) -> None:
    with pytest.raises(modelo.PostNoEncontrado):
        estado.editar("no-existe")
    assert not estado.en_edicion


def test_cancelar_edicion_vuelve_a_formulario_vacio(estado: EstadoBitacora) -> None:
    estado.editar("2")
    estado.cancelar_edicion()
    assert not estado.en_edicion
    assert estado.formulario == modelo.formulario_vacio()
    assert estado.posts[1]["tag"] == "Dev"


# -------------------
# Eliminación
# -------------------

def test_eliminar_seleccionado_pasa_al_primero_filtrado(estado: EstadoBitacora) -> None:
    """Borrar el post abierto selecciona el primero que queda en la vista."""
    assert estado.id_seleccionado == "1"
    assert estado.eliminar("1") is True
    assert _ids(estado.posts) == ["2", "3"]
    assert estado.id_seleccionado == "2"


def test_eliminar_ultimo_de_la_vista_limpia_seleccion(estado: EstadoBitacora) -> None:
    """Con filtro 'Arte', borrar el único post visible deja sin selección."""
    estado.cambiar_filtro("Arte")
    assert estado.id_seleccionado == "3"
    estado.eliminar("3")
    assert estado.id_seleccionado is None
    assert estado.vista()["seleccionado"] is None


def test_eliminar_post_en_edicion_reinicia_formulario(estado: EstadoBitacora) -> None:
    estado.editar("2")
    estado.eliminar("2")
    assert not estado.en_edicion
    assert estado.formulario == modelo.formulario_vacio()
    # La selección no cambia si se borró otro post
    assert estado.id_seleccionado == "1"


def test_eliminar_inexistente_retorna_false(estado: EstadoBitacora) -> None:
    assert estado.eliminar("zzz") is False
    assert len(estado.posts) == TOTAL_SEMILLA


def test_eliminar_todo_no_guarda_coleccion_vacia(estado: EstadoBitacora, almacen: str) -> None:
    """La colección vacía nunca se guarda: queda el último estado no vacío."""
    for id_post in ("1", "2", "3"):
        estado.eliminar(id_post)
    assert estado.posts == []
    assert estado.id_seleccionado is None

    assert _ids(EstadoBitacora(almacen).posts) == ["3"]


# -------------------
# Filtros, búsqueda y orden
# -------------------

def test_cambiar_filtro_repara_seleccion(estado: EstadoBitacora) -> None:
    estado.cambiar_filtro("Dev")
    assert _ids(estado.vista()["filtrados"]) == ["2"]
    assert estado.id_seleccionado == "2"

    estado.cambiar_filtro("Todos")
    assert estado.id_seleccionado == "2"


def test_cambiar_filtro_invalido(estado: EstadoBitacora) -> None:
    with pytest.raises(modelo.ValidacionError):
        estado.cambiar_filtro("Cocina")
    assert estado.filtro_tag == "Todos"


def test_busqueda_sin_resultados_conserva_seleccion(estado: EstadoBitacora) -> None:
    """Una vista vacía no borra la selección de un post que sigue existiendo."""
    estado.cambiar_busqueda("zzz")
    vista = estado.vista()
    assert vista["filtrados"] == []
    assert vista["hero"] is None
    assert vista["seleccionado"] is None
    assert estado.id_seleccionado == "1"

    estado.cambiar_busqueda("")
    assert estado.vista()["seleccionado"]["id"] == "1"


def test_busqueda_case_insensitive(estado: EstadoBitacora) -> None:
    estado.cambiar_busqueda("FINANZAS")
    assert _ids(estado.vista()["filtrados"]) == ["2"]
    assert estado.id_seleccionado == "2"


def test_cambiar_orden(almacen: str) -> None:
    estado = EstadoBitacora(almacen, posts=_posts_con_fechas())
    assert _ids(estado.vista()["filtrados"]) == ["c", "b", "a"]
    estado.cambiar_orden("oldest")
    assert _ids(estado.vista()["filtrados"]) == ["a", "b", "c"]
    with pytest.raises(modelo.ValidacionError):
        estado.cambiar_orden("alfabetico")
    assert estado.orden == "oldest"


def test_vista_hero_y_mas_historias(almacen: str) -> None:
    estado = EstadoBitacora(almacen, posts=_posts_con_fechas())
    vista = estado.vista()
    assert vista["hero"]["id"] == "c"
    assert _ids(vista["mas_historias"]) == ["b", "a"]
    # 'a' sigue seleccionado y visible
    assert vista["seleccionado"]["id"] == "a"


def test_seleccionar(estado: EstadoBitacora) -> None:
    estado.seleccionar("3")
    assert estado.vista()["seleccionado"]["id"] == "3"
    with pytest.raises(modelo.PostNoEncontrado):
        estado.seleccionar("zzz")
    assert estado.id_seleccionado == "3"


def test_crear_fuera_del_filtro_repara_seleccion(estado: EstadoBitacora) -> None:
    """Un post nuevo que no entra en el filtro activo no queda seleccionado."""
    estado.cambiar_filtro("Arte")
    estado.actualizar_formulario(title="Código", content="Nuevo", tag="Dev")
    post = estado.enviar_formulario()

    assert estado.posts[0]["id"] == post["id"]
    assert estado.id_seleccionado == "3"
