# -*- coding: utf-8 -*-
"""
Estado de la aplicación — Bitácora Entre Dos Mundos.

Un único objeto ``EstadoBitacora`` concentra la colección de posts, la
selección, los controles de filtro/búsqueda/orden y el formulario de
escritura. Cada comando que cambia la colección la guarda completa en el
almacén local y termina reparando la selección.
"""
from __future__ import annotations  # Anotaciones diferidas para tipos

import logging  # Registro de comandos aplicados
from typing import Any, Dict, List, Optional, Sequence  # Tipado para claridad

import bitacora as modelo  # Lógica de negocio (modelo del dominio)

logger = logging.getLogger(__name__)


class EstadoBitacora:
    """
    Estado explícito de la bitácora.

    Atributos:
        almacen_filepath (str): Ruta del almacén local donde se refleja la colección.
        posts (List[Dict[str, Any]]): Colección completa, fuente de verdad.
        id_seleccionado (Optional[str]): ID del post abierto en el panel de lectura.
        filtro_tag (str): Categoría activa o 'Todos'.
        busqueda (str): Texto libre de búsqueda.
        orden (str): 'newest' u 'oldest'.
        editando_id (Optional[str]): ID del post en edición; None al crear.
        formulario (Dict[str, str]): Borrador con 'title', 'content', 'tag', 'status'.
    """

    def __init__(
        self,
        almacen_filepath: str,
        posts: Optional[Sequence[Dict[str, Any]]] = None,
    ) -> None:
        """
        Construye el estado cargando la colección del almacén.

        Args:
            almacen_filepath: Ruta al JSON del almacén local.
            posts: Colección inicial; si es None se lee del almacén (con semilla).
        """
        self.almacen_filepath = almacen_filepath
        if posts is None:
            self.posts: List[Dict[str, Any]] = modelo.cargar_posts(almacen_filepath)
            self._persistir()
        else:
            self.posts = [dict(p) for p in posts]
        self.id_seleccionado: Optional[str] = (
            self.posts[0].get("id") if self.posts else None
        )
        self.filtro_tag = modelo.TAG_TODOS
        self.busqueda = ""
        self.orden = modelo.ORDEN_RECIENTES
        self.editando_id: Optional[str] = None
        self.formulario: Dict[str, str] = modelo.formulario_vacio()

    # --- Lectura ---

    @property
    def en_edicion(self) -> bool:
        return self.editando_id is not None

    @property
    def resumen(self) -> Dict[str, int]:
        return modelo.contar_resumen(self.posts)

    def vista(self) -> Dict[str, Any]:
        """
        Deriva la vista actual (ver ``bitacora.derivar_vista``).

        Returns:
            Dict[str, Any]: Filtrados, destacado, más historias, seleccionado y resumen.
        """
        return modelo.derivar_vista(
            self.posts,
            filtro_tag=self.filtro_tag,
            busqueda=self.busqueda,
            orden=self.orden,
            id_seleccionado=self.id_seleccionado,
        )

    # --- Controles ---

    def seleccionar(self, id_post: str) -> None:
        """
        Abre un post en el panel de lectura.

        Raises:
            PostNoEncontrado: Si el post no existe.
        """
        if modelo.buscar_post_por_id(self.posts, id_post) is None:
            raise modelo.PostNoEncontrado(f"No existe post con id='{id_post}'.")
        self.id_seleccionado = id_post
        self.reconciliar_seleccion()

    def cambiar_filtro(self, tag: str) -> None:
        self.filtro_tag = modelo.validar_tag(tag, permitir_todos=True)
        self.reconciliar_seleccion()

    def cambiar_busqueda(self, texto: str) -> None:
        self.busqueda = "" if texto is None else str(texto)
        self.reconciliar_seleccion()

    def cambiar_orden(self, orden: str) -> None:
        self.orden = modelo.validar_orden(orden)
        self.reconciliar_seleccion()

    # --- Formulario ---

    def actualizar_formulario(self, **campos: str) -> None:
        """
        Actualiza campos del borrador sin validar su contenido.

        Args:
            **campos: Cualquiera de 'title', 'content', 'tag', 'status'.

        Raises:
            ValidacionError: Si se indica un campo desconocido.
        """
        for nombre, valor in campos.items():
            if nombre not in modelo.CAMPOS_FORMULARIO:
                raise modelo.ValidacionError(f"Campo de formulario desconocido: '{nombre}'.")
            self.formulario[nombre] = "" if valor is None else str(valor)

    def editar(self, id_post: str) -> None:
        """
        Pasa a modo edición precargando el formulario con el post.

        Raises:
            PostNoEncontrado: Si el post no existe.
        """
        post = modelo.buscar_post_por_id(self.posts, id_post)
        if post is None:
            raise modelo.PostNoEncontrado(f"No existe post con id='{id_post}'.")
        self.editando_id = id_post
        self.formulario = {campo: post.get(campo, "") for campo in modelo.CAMPOS_FORMULARIO}

    def cancelar_edicion(self) -> None:
        self.editando_id = None
        self.formulario = modelo.formulario_vacio()

    def enviar_formulario(self) -> Dict[str, Any]:
        """
        Envía el formulario: crea un post nuevo o guarda la edición en curso.

        Si los datos no son válidos no cambia nada (ni la colección, ni el
        formulario, ni el modo edición).

        Returns:
            Dict[str, Any]: Post creado o actualizado.

        Raises:
            ValidacionError: Si título o contenido quedan vacíos tras strip(),
                o si tag/estado no son válidos.
            PostNoEncontrado: Si el post en edición ya no existe.
        """
        try:
            if self.editando_id is not None:
                post = self._guardar_edicion()
            else:
                post = self._crear_desde_formulario()
        except modelo.ValidacionError as e:
            logger.debug("Envío rechazado: %s", e)
            raise

        self.cancelar_edicion()
        self._persistir()
        self.reconciliar_seleccion()
        return post

    def _crear_desde_formulario(self) -> Dict[str, Any]:
        post = modelo.crear_post(self.formulario)
        self.posts.insert(0, post)
        self.id_seleccionado = post["id"]
        logger.info("Post creado: %s", post["id"])
        return post

    def _guardar_edicion(self) -> Dict[str, Any]:
        for i, p in enumerate(self.posts):
            if p.get("id") == self.editando_id:
                actualizado = modelo.aplicar_cambios(p, self.formulario)
                self.posts[i] = actualizado
                logger.info("Post actualizado: %s", self.editando_id)
                return actualizado
        raise modelo.PostNoEncontrado(f"No existe post con id='{self.editando_id}'.")

    # --- Eliminación ---

    def eliminar(self, id_post: str) -> bool:
        """
        Elimina un post de la colección.

        Si era el post en edición, el formulario vuelve a estar en blanco; la
        selección se repara contra la vista filtrada.

        Args:
            id_post: ID del post a eliminar.

        Returns:
            bool: True si se eliminó; False si no existía.
        """
        original = len(self.posts)
        self.posts = [p for p in self.posts if p.get("id") != id_post]
        if len(self.posts) == original:
            return False

        logger.info("Post eliminado: %s", id_post)
        if self.editando_id == id_post:
            self.cancelar_edicion()
        self._persistir()
        self.reconciliar_seleccion()
        return True

    # --- Invariantes ---

    def reconciliar_seleccion(self) -> None:
        """
        Repara la selección para que apunte a un post visible.

        Si el ID guardado no está en la vista filtrada pasa al primer post
        filtrado. Con la vista vacía solo se limpia si el post ya no existe.
        """
        filtrados = self.vista()["filtrados"]
        if modelo.buscar_post_por_id(filtrados, self.id_seleccionado) is not None:
            return
        if filtrados:
            self.id_seleccionado = filtrados[0].get("id")
        elif modelo.buscar_post_por_id(self.posts, self.id_seleccionado) is None:
            self.id_seleccionado = None

    def _persistir(self) -> None:
        modelo.guardar_posts(self.almacen_filepath, self.posts)
