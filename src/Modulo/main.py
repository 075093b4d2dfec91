# -*- coding: utf-8 -*-
"""
Módulo Principal - Interfaz de Usuario (UI) con Rich
Bitácora Entre Dos Mundos (consola)

- Portada tipo revista: navegación, historia destacada, últimas historias
- Panel de lectura con acciones de edición y eliminación
- Barra lateral: sobre mí, resumen del blog y formulario de escritura
- Filtro por categoría, búsqueda libre y orden por fecha

Este módulo orquesta la interacción de usuario y delega:
- Estado y comandos en estado (EstadoBitacora)
- Lógica de negocio en bitacora (Modelo)
- Persistencia en gestor_datos (almacén local)
"""

from __future__ import (
    annotations,  # Permite posponer evaluación de anotaciones de tipos
)

import logging  # Registro de eventos con salida en la consola Rich
import os  # Manejo de rutas y variables de entorno
from datetime import datetime, timezone  # Formato de fechas para mostrar
from typing import Any, Dict, List, Optional, Sequence  # Tipos auxiliares

import bitacora as modelo  # Lógica de negocio (modelo del dominio)
import gestor_datos  # Persistencia (almacén local clave/valor)
from dotenv import load_dotenv  # Configuración desde .env
from estado import EstadoBitacora  # Estado explícito de la aplicación

# --- Rich ---
from rich.columns import Columns  # Rejilla de tarjetas
from rich.console import Console, Group  # Consola y agrupador de componentes Rich
from rich.logging import RichHandler  # Handler de logging sobre la consola Rich
from rich.markup import escape  # Escapar contenido dinámico en markup
from rich.panel import Panel  # Paneles con bordes y títulos
from rich.prompt import Confirm, Prompt  # Prompts interactivos (texto y confirmación)
from rich.table import Table  # Tablas con estilos y columnas
from rich.text import Text  # Texto con estilos

console = Console()
logger = logging.getLogger(__name__)

# --- Constantes (evitar valores mágicos) ---
NOMBRE_BLOG = "ENTRE DOS MUNDOS"
EXTRACTO_HERO_MAX = 260
EXTRACTO_TARJETA_MAX = 120
MESES_CORTOS = (
    "ene", "feb", "mar", "abr", "may", "jun",
    "jul", "ago", "sept", "oct", "nov", "dic",
)
ETIQUETAS_ORDEN = {
    modelo.ORDEN_RECIENTES: "Más recientes",
    modelo.ORDEN_ANTIGUAS: "Más antiguas",
}

# --- Configuración de rutas y entorno ---
# La ruta a 'data/' es independiente del cwd (dos niveles arriba de este archivo)
load_dotenv()
BASE_DIR = os.path.abspath(
    os.path.join(os.path.dirname(__file__), "..", "..")
)
DIRECTORIO_DATOS = os.path.join(BASE_DIR, "data")
ALMACEN_JSON = os.getenv(
    "BITACORA_ALMACEN", os.path.join(DIRECTORIO_DATOS, "almacen_local.json")
)
NIVEL_LOG = os.getenv("BITACORA_LOG", "WARNING")


# --- Cancelación de formularios ---
class Cancelado(Exception):
    """El usuario ingresó "0" para abandonar la operación."""


def configurar_logging(nivel: str = NIVEL_LOG) -> None:
    """
    Configura el logging raíz para escribir a través de la consola Rich.

    Args:
        nivel: Nombre del nivel ('DEBUG', 'INFO', 'WARNING', ...). Un nombre
            desconocido equivale a WARNING.

    Returns:
        None
    """
    nivel_num = getattr(logging, str(nivel).upper(), logging.WARNING)
    if not isinstance(nivel_num, int):
        nivel_num = logging.WARNING
    logging.basicConfig(
        level=nivel_num,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def pedir(
    mensaje: str,
    *,
    default: Optional[str] = None,
) -> str:
    """
    Solicita un valor al usuario (Prompt) con opción de cancelar.

    Si el usuario ingresa "0" se cancela la operación mediante la excepción Cancelado.

    Args:
        mensaje: Texto a mostrar en el prompt.
        default: Valor por defecto si el usuario solo presiona Enter.

    Returns:
        str: Valor ingresado por el usuario (no None).

    Raises:
        Cancelado: Cuando el usuario ingresa "0".
    """
    etiqueta = f"[magenta]{mensaje}[/magenta] [dim](0 para salir)[/dim]"
    if default is None:
        raw = Prompt.ask(etiqueta)
    else:
        raw = Prompt.ask(etiqueta, default=str(default), show_default=bool(default))

    valor = "" if raw is None else str(raw)
    if valor.strip() == "0":
        raise Cancelado()
    return valor


def _elegir_opcion(mensaje: str, opciones: Sequence[str], actual: Optional[str] = None) \
        -> str:
    """
    Muestra opciones numeradas y devuelve la elegida.

    Args:
        mensaje: Texto del prompt.
        opciones: Valores posibles.
        actual: Valor marcado por defecto.

    Returns:
        str: Opción elegida.

    Raises:
        Cancelado: Cuando el usuario ingresa "0".
    """
    tabla = Table.grid(padding=(0, 2))
    tabla.add_column(justify="right", style="bold yellow")
    tabla.add_column(justify="left")
    for i, op in enumerate(opciones, start=1):
        marca = " [green](actual)[/green]" if op == actual else ""
        tabla.add_row(str(i), f"{escape(op)}{marca}")
    console.print(tabla)

    choices = [str(i) for i in range(len(opciones) + 1)]
    default = str(opciones.index(actual) + 1) if actual in opciones else None
    if default is None:
        elegido = Prompt.ask(f"[magenta]{mensaje}[/magenta] [dim](0 para salir)[/dim]",
                             choices=choices, show_choices=False)
    else:
        elegido = Prompt.ask(f"[magenta]{mensaje}[/magenta] [dim](0 para salir)[/dim]",
                             choices=choices, show_choices=False, default=default)
    if elegido == "0":
        raise Cancelado()
    return opciones[int(elegido) - 1]


def mostrar_advertencia(mensaje: str) -> None:
    """
    Muestra un panel de advertencia estilizado.

    Args:
        mensaje: Texto de la advertencia a mostrar.

    Returns:
        None
    """
    console.print(
        Panel(
            f"[yellow]{escape(mensaje)}[/yellow]",
            border_style="yellow",
            title="[bold yellow]Aviso[/bold yellow]",
        )
    )


def mostrar_error(mensaje: str) -> None:
    """
    Muestra un panel de error estilizado.

    Args:
        mensaje: Descripción del error.

    Returns:
        None
    """
    console.print(
        Panel(
            f"[bright_red]{escape(mensaje)}[/bright_red]",
            border_style="red",
            title="[bold red]Error[/bold red]",
        )
    )


def mostrar_ok(mensaje: str) -> None:
    console.print(
        Panel(
            f"[bright_green]{mensaje}[/bright_green]",
            border_style="green",
            title="[bold green]Éxito[/bold green]",
        )
    )


def banner() -> None:
    """
    Muestra el banner principal de la aplicación.

    Returns:
        None
    """
    console.print(
        Panel.fit(
            f"[bold cyan]{NOMBRE_BLOG}[/bold cyan]\n"
            "[dim]Bitácora de arte, código y vida[/dim]",
            border_style="bright_magenta",
        )
    )


# --- Helpers de formato ---
def formatear_fecha(iso: Optional[str]) -> str:
    """
    Formatea una fecha ISO-8601 como 'dd mmm yyyy' en hora local.

    Args:
        iso: Marca de tiempo guardada en 'createdAt'.

    Returns:
        str: Fecha legible, o cadena vacía si falta o es inválida.
    """
    if not iso or not isinstance(iso, str):
        return ""
    texto = iso.strip()
    if texto.endswith("Z"):
        texto = texto[:-1] + "+00:00"
    try:
        fecha = datetime.fromisoformat(texto)
    except ValueError:
        return ""
    if fecha.tzinfo is None:
        fecha = fecha.replace(tzinfo=timezone.utc)
    local = fecha.astimezone()
    return f"{local.day:02d} {MESES_CORTOS[local.month - 1]} {local.year}"


def recortar(texto: str, limite: int) -> str:
    """
    Recorta un texto a 'limite' caracteres añadiendo "…" si se excede.

    Args:
        texto: Texto original.
        limite: Número máximo de caracteres conservados.

    Returns:
        str: Texto completo o recortado.
    """
    return texto[:limite] + "…" if len(texto) > limite else texto


def meta_post(post: Dict[str, Any]) -> str:
    estado = (
        modelo.ESTADO_PUBLICADO
        if post.get("status") == modelo.ESTADO_PUBLICADO
        else modelo.ESTADO_BORRADOR
    )
    return f"{formatear_fecha(post.get('createdAt'))} · {estado}"


# --- Componentes de la portada ---
def render_nav(estado: EstadoBitacora) -> Panel:
    """
    Construye la barra de navegación: logo, categorías y búsqueda activa.

    Args:
        estado: Estado de la bitácora.

    Returns:
        Panel: Barra superior lista para imprimir.
    """
    enlaces: List[Text] = []
    for tag in (*modelo.TAGS, modelo.TAG_TODOS):
        etiqueta = "TODO" if tag == modelo.TAG_TODOS else tag.upper()
        estilo = "bold black on bright_yellow" if estado.filtro_tag == tag else "bold white"
        enlaces.append(Text(f" {etiqueta} ", style=estilo))

    nav = Table.grid(expand=True)
    nav.add_column(ratio=2)
    nav.add_column(ratio=5, justify="center")
    nav.add_column(ratio=2, justify="right")
    busqueda = (
        Text(f"Buscar: {estado.busqueda}", style="cyan")
        if estado.busqueda
        else Text("Buscar…", style="dim")
    )
    nav.add_row(
        Text(NOMBRE_BLOG, style="bold bright_magenta"),
        Text(" ").join(enlaces),
        busqueda,
    )
    return Panel(nav, border_style="bright_magenta")


def render_hero(post: Dict[str, Any]) -> Panel:
    """
    Renderiza la historia destacada.

    Args:
        post: Post destacado.

    Returns:
        Panel: Bloque principal de la portada.
    """
    cuerpo = Group(
        Text("HISTORIA DESTACADA", style="bold bright_yellow"),
        Text(post["title"], style="bold white"),
        Text(meta_post(post), style="dim"),
        Text(""),
        Text(recortar(post["content"], EXTRACTO_HERO_MAX), style="white"),
    )
    return Panel(
        cuerpo,
        title=Text(post["tag"], style="bold cyan"),
        title_align="left",
        border_style="bright_cyan",
        padding=(1, 2),
    )


def tarjeta_historia(post: Dict[str, Any]) -> Panel:
    cuerpo = Group(
        Text(post["title"], style="bold white"),
        Text(recortar(post["content"], EXTRACTO_TARJETA_MAX)),
        Text(meta_post(post), style="dim"),
    )
    return Panel(
        cuerpo,
        title=Text(post["tag"], style="cyan"),
        title_align="left",
        border_style="blue",
        width=42,
    )


def render_historias(vista: Dict[str, Any], orden: str) -> Panel:
    """
    Construye la sección 'Últimas historias' con sus tarjetas.

    Args:
        vista: Resultado de ``EstadoBitacora.vista()``.
        orden: Orden activo ('newest' u 'oldest').

    Returns:
        Panel: Sección con la rejilla o el mensaje de vacío.
    """
    if not vista["filtrados"]:
        contenido: Any = Text(
            "No hay artículos para mostrar con este filtro.", style="dim"
        )
    else:
        contenido = Columns(
            [tarjeta_historia(p) for p in vista["mas_historias"]],
            equal=True,
        )
    return Panel(
        contenido,
        title="[bold cyan]Últimas historias[/bold cyan]",
        subtitle=f"[dim]{ETIQUETAS_ORDEN.get(orden, orden)}[/dim]",
        subtitle_align="right",
        border_style="blue",
    )


def render_articulo(post: Dict[str, Any]) -> Panel:
    """
    Renderiza el artículo completo en formato de lectura.

    Args:
        post: Post seleccionado.

    Returns:
        Panel: Panel de lectura con contenido completo.
    """
    cabecera = Group(
        Text(post["tag"].upper(), style="bold cyan"),
        Text(post["title"], style="bold white"),
        Text(meta_post(post), style="dim"),
    )
    return Panel(
        Group(
            cabecera,
            Panel(Text(post["content"], style="white"), border_style="cyan",
                  padding=(1, 2)),
        ),
        title="[bold blue]Lectura[/bold blue]",
        border_style="blue",
        padding=(1, 1),
    )


def render_sobre_mi() -> Panel:
    return Panel(
        "Soy [bold]Noemí[/bold], mezclo [bold]arte[/bold] y [bold]código[/bold].\n"
        "Esta bitácora es mi lugar para escribir sobre proyectos, procesos "
        "y la vida entre esos dos mundos.",
        title="[bold magenta]Sobre mí[/bold magenta]",
        border_style="magenta",
    )


def render_resumen(resumen: Dict[str, int]) -> Panel:
    """
    Construye la tarjeta 'Resumen del blog' con los totales.

    Args:
        resumen: Conteos 'total', 'publicados' y 'borradores'.

    Returns:
        Panel: Tarjeta de estadísticas.
    """
    tabla = Table.grid(expand=True)
    tabla.add_column()
    tabla.add_column(justify="right", style="bold")
    tabla.add_row("Total artículos", str(resumen["total"]))
    tabla.add_row("Publicados", str(resumen["publicados"]))
    tabla.add_row("Borradores", str(resumen["borradores"]))
    return Panel(
        tabla,
        title="[bold magenta]Resumen del blog[/bold magenta]",
        border_style="magenta",
    )


def render_formulario(estado: EstadoBitacora) -> Panel:
    """
    Muestra el borrador actual del formulario de escritura.

    Args:
        estado: Estado de la bitácora.

    Returns:
        Panel: Tarjeta 'Nuevo artículo' o 'Editar artículo'.
    """
    form = estado.formulario
    tabla = Table.grid(padding=(0, 1))
    tabla.add_column(style="magenta")
    tabla.add_column()
    tabla.add_row("Título", escape(form["title"]) or "[dim]Ej. Mezclando arte y frontend[/dim]")
    tabla.add_row("Categoría", escape(form["tag"]))
    tabla.add_row("Estado", escape(form["status"]))
    tabla.add_row(
        "Contenido",
        escape(recortar(form["content"], EXTRACTO_TARJETA_MAX))
        or "[dim]Escribe aquí tu artículo…[/dim]",
    )
    titulo = "Editar artículo" if estado.en_edicion else "Nuevo artículo"
    return Panel(
        tabla,
        title=f"[bold magenta]{titulo}[/bold magenta]",
        subtitle="[dim]cancelar con la opción del menú[/dim]" if estado.en_edicion else None,
        border_style="magenta",
    )


def tabla_indice(posts: List[Dict[str, Any]]) -> Table:
    """
    Construye una tabla numerada para elegir un artículo.

    Args:
        posts: Posts filtrados y ordenados.

    Returns:
        Table: Tabla con número, título, categoría, estado y fecha.
    """
    tabla = Table(
        title="Artículos",
        border_style="blue",
        show_header=True,
        header_style="bold magenta",
        expand=True,
    )
    tabla.add_column("#", style="dim", width=4)
    tabla.add_column("Título")
    tabla.add_column("Categoría", width=14)
    tabla.add_column("Estado", width=10)
    tabla.add_column("Fecha", width=12)
    for i, p in enumerate(posts, start=1):
        tabla.add_row(str(i), p["title"], p["tag"], p["status"],
                      formatear_fecha(p.get("createdAt")))
    return tabla


def render_portada(estado: EstadoBitacora) -> None:
    """
    Imprime la portada completa a partir de la vista derivada.

    Args:
        estado: Estado de la bitácora.

    Returns:
        None
    """
    vista = estado.vista()
    console.print(render_nav(estado))
    if vista["hero"]:
        console.print(render_hero(vista["hero"]))
    console.print(render_historias(vista, estado.orden))
    if vista["seleccionado"]:
        console.print(render_articulo(vista["seleccionado"]))
    console.print(
        Columns(
            [render_sobre_mi(), render_resumen(vista["resumen"]), render_formulario(estado)],
            equal=True,
            expand=True,
        )
    )


# --- Flujos de UI ---
def leer_articulo_ui(estado: EstadoBitacora) -> None:
    """
    Elige un artículo de la vista filtrada y lo abre en el panel de lectura.

    Returns:
        None
    """
    filtrados = estado.vista()["filtrados"]
    if not filtrados:
        console.print("[yellow]No hay artículos para mostrar con este filtro.[/yellow]")
        return
    console.print(tabla_indice(filtrados))
    choices = [str(i) for i in range(len(filtrados) + 1)]
    elegido = Prompt.ask(
        "[magenta]Número del artículo[/magenta] [dim](0 para salir)[/dim]",
        choices=choices,
        show_choices=False,
    )
    if elegido == "0":
        console.print("[yellow]Operación cancelada.[/yellow]")
        return
    estado.seleccionar(filtrados[int(elegido) - 1]["id"])
    seleccionado = estado.vista()["seleccionado"]
    if seleccionado:
        console.print(render_articulo(seleccionado))


def filtrar_ui(estado: EstadoBitacora) -> None:
    try:
        tag = _elegir_opcion("Categoría", (modelo.TAG_TODOS, *modelo.TAGS), estado.filtro_tag)
    except Cancelado:
        console.print("[yellow]Operación cancelada.[/yellow]")
        return
    estado.cambiar_filtro(tag)


def buscar_ui(estado: EstadoBitacora) -> None:
    """
    Cambia el término de búsqueda; vacío limpia la búsqueda.

    Returns:
        None
    """
    raw = Prompt.ask(
        "[magenta]Buscar…[/magenta] [dim](Enter vacío para limpiar)[/dim]",
        default="",
        show_default=False,
    )
    estado.cambiar_busqueda(raw or "")


def ordenar_ui(estado: EstadoBitacora) -> None:
    etiquetas = [ETIQUETAS_ORDEN[o] for o in modelo.ORDENES]
    try:
        elegida = _elegir_opcion("Orden", etiquetas, ETIQUETAS_ORDEN[estado.orden])
    except Cancelado:
        console.print("[yellow]Operación cancelada.[/yellow]")
        return
    estado.cambiar_orden(modelo.ORDENES[etiquetas.index(elegida)])


def escribir_articulo_ui(estado: EstadoBitacora) -> Optional[Dict[str, Any]]:
    """
    Completa el formulario (nuevo o en edición) y lo envía.

    Los valores ya escritos se ofrecen por defecto; si el envío no es
    válido el borrador se conserva para corregirlo.

    Args:
        estado: Estado de la bitácora.

    Returns:
        Optional[Dict[str, Any]]: Post guardado, o None si se canceló o no
        fue válido.
    """
    titulo_panel = "Editar artículo" if estado.en_edicion else "Nuevo artículo"
    console.print(
        Panel.fit(f"[bold cyan]{titulo_panel}[/bold cyan]", border_style="bright_blue")
    )
    form = estado.formulario
    try:
        titulo = pedir("Título", default=form["title"])
        estado.actualizar_formulario(title=titulo)
        tag = _elegir_opcion("Categoría", modelo.TAGS, form["tag"])
        estado.actualizar_formulario(tag=tag)
        status = _elegir_opcion("Estado", modelo.ESTADOS, form["status"])
        estado.actualizar_formulario(status=status)
        contenido = pedir("Contenido", default=form["content"])
        estado.actualizar_formulario(content=contenido)
    except Cancelado:
        console.print("[yellow]Operación cancelada. El borrador se conserva.[/yellow]")
        return None

    en_edicion = estado.en_edicion
    try:
        post = estado.enviar_formulario()
    except modelo.ValidacionError as e:
        mostrar_advertencia(str(e))
        return None
    except modelo.PostNoEncontrado as e:
        mostrar_error(str(e))
        return None

    if en_edicion:
        mostrar_ok(f"Cambios guardados: {escape(post['title'])}")
    else:
        mostrar_ok(f"Artículo guardado: [bold yellow]{escape(post['title'])}[/bold yellow]")
    return post


def editar_articulo_ui(estado: EstadoBitacora) -> None:
    """
    Pone en edición el artículo abierto en el panel de lectura.

    Returns:
        None
    """
    seleccionado = estado.vista()["seleccionado"]
    if not seleccionado:
        mostrar_error("No hay un artículo abierto para editar.")
        return
    try:
        estado.editar(seleccionado["id"])
    except modelo.PostNoEncontrado as e:
        mostrar_error(str(e))
        return
    escribir_articulo_ui(estado)


def eliminar_articulo_ui(estado: EstadoBitacora) -> None:
    """
    Elimina el artículo abierto en el panel de lectura, tras confirmación.

    Returns:
        None
    """
    seleccionado = estado.vista()["seleccionado"]
    if not seleccionado:
        mostrar_error("No hay un artículo abierto para eliminar.")
        return
    if not Confirm.ask(
        f"[magenta]¿Seguro que desea eliminar '{escape(seleccionado['title'])}'?[/magenta]",
        default=False,
    ):
        console.print("[yellow]Operación cancelada.[/yellow]")
        return
    if estado.eliminar(seleccionado["id"]):
        mostrar_ok("Artículo eliminado.")
    else:
        mostrar_error("No existe un artículo con ese ID.")


def cancelar_edicion_ui(estado: EstadoBitacora) -> None:
    estado.cancelar_edicion()
    console.print("[yellow]Edición cancelada.[/yellow]")


# --- Menú principal ---
def opciones_menu(estado: EstadoBitacora) -> List[tuple]:
    """
    Lista las opciones disponibles según el estado.

    Returns:
        List[tuple]: Pares (clave, etiqueta).
    """
    escribir = "Continuar edición" if estado.en_edicion else "Nuevo artículo"
    opciones = [
        ("1", "Leer artículo"),
        ("2", "Filtrar por categoría"),
        ("3", "Buscar"),
        ("4", "Ordenar"),
        ("5", escribir),
        ("6", "Editar artículo abierto"),
        ("7", "Eliminar artículo abierto"),
    ]
    if estado.en_edicion:
        opciones.append(("8", "Cancelar edición"))
    opciones.append(("0", "Salir"))
    return opciones


def mostrar_menu_principal(estado: EstadoBitacora) -> None:
    """
    Muestra el menú principal con el filtro activo como subtítulo.

    Returns:
        None
    """
    lineas = "\n".join(
        f"[bold cyan]{clave})[/bold cyan] [bold yellow]{etiqueta}[/bold yellow]"
        for clave, etiqueta in opciones_menu(estado)
    )
    subtitulo = Text.assemble(
        Text("Categoría: ", style="bright_green"),
        Text(estado.filtro_tag, style="green"),
    )
    console.print(
        Panel(
            lineas,
            title="[bold cyan]MENÚ PRINCIPAL[/bold cyan]",
            border_style="bright_cyan",
            subtitle=subtitulo,
            subtitle_align="right",
        )
    )


def main() -> None:
    """
    Punto de entrada de la aplicación.

    Configura logging, carga el estado desde el almacén local y gestiona el
    bucle principal del menú.

    Returns:
        None
    """
    configurar_logging(NIVEL_LOG)
    gestor_datos.inicializar_almacen(ALMACEN_JSON)
    estado = EstadoBitacora(ALMACEN_JSON)
    logger.info("Posts cargados: %d", len(estado.posts))
    banner()
    console.print(f"Almacén local: [green]{escape(ALMACEN_JSON)}[/green]")

    acciones = {
        "1": leer_articulo_ui,
        "2": filtrar_ui,
        "3": buscar_ui,
        "4": ordenar_ui,
        "5": escribir_articulo_ui,
        "6": editar_articulo_ui,
        "7": eliminar_articulo_ui,
        "8": cancelar_edicion_ui,
    }
    while True:
        render_portada(estado)
        mostrar_menu_principal(estado)
        opcion = Prompt.ask(
            "[magenta]Opción[/magenta]",
            choices=[clave for clave, _ in opciones_menu(estado)],
            show_choices=False,
        )
        if opcion == "0":
            console.print("\n[bold magenta]¡Hasta luego![/bold magenta]")
            break
        try:
            acciones[opcion](estado)
        except modelo.ErrorDeDominio as e:
            mostrar_error(str(e))


def run() -> None:
    try:
        main()
    except KeyboardInterrupt:
        console.print(
            "\n\n[bold red]Programa interrumpido por el usuario. "
            "Adiós.[/bold red]"
        )


if __name__ == "__main__":
    run()
