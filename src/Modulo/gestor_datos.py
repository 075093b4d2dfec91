# -*- coding: utf-8 -*-
"""
Módulo de Persistencia de Datos (almacén local clave/valor).

El almacén es un único archivo JSON con un objeto ``{clave: valor}`` donde
cada valor es una cadena, igual que el almacenamiento local de un navegador.
"""
import json  # Manejo de estructuras y archivos JSON
import logging  # Registro de eventos de persistencia
import os  # Operaciones con rutas y sistema de archivos
import tempfile  # Archivos temporales para escritura atómica
from typing import Dict, Optional  # Anotaciones de tipos para claridad

logger = logging.getLogger(__name__)


def _asegurar_directorio(filepath: str) -> None:
    """Crea el directorio padre si no existe.

    Args:
        filepath: Ruta del archivo objetivo.

    Returns:
        None
    """
    directorio = os.path.dirname(os.path.abspath(filepath))
    if directorio and not os.path.exists(directorio):
        os.makedirs(directorio, exist_ok=True)


def _escritura_atomica(path_destino: str, contenido: str) -> None:
    """Escribe texto a un archivo de forma atómica.

    Crea un archivo temporal en el mismo directorio, escribe y reemplaza.

    Args:
        path_destino: Ruta del archivo destino.
        contenido: Texto a escribir (UTF-8).

    Returns:
        None
    """
    _asegurar_directorio(path_destino)
    directorio = os.path.dirname(os.path.abspath(path_destino)) or "."

    with tempfile.NamedTemporaryFile(mode="w", delete=False, dir=directorio,
                                     suffix=".tmpjson", encoding="utf-8") as tmp:
        tmp.write(contenido)
        tmp_path = tmp.name

    os.replace(tmp_path, path_destino)


def _leer_almacen(filepath: str) -> Dict[str, str]:
    """Lee el objeto completo del almacén.

    Un archivo inexistente, ilegible o que no contenga un objeto JSON se
    trata como almacén vacío.

    Args:
        filepath: Ruta del archivo del almacén.

    Returns:
        Dict[str, str]: Mapa clave -> valor.
    """
    if not os.path.exists(filepath):
        return {}
    try:
        with open(filepath, mode="r", encoding="utf-8") as json_file:
            datos = json.load(json_file)
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning("Almacén ilegible en %s: %s", filepath, e)
        return {}

    if not isinstance(datos, dict):
        logger.warning("Almacén con formato inesperado en %s", filepath)
        return {}
    return datos


def inicializar_almacen(filepath: str) -> None:
    """Inicializa el archivo del almacén con ``{}`` si no existe.

    Args:
        filepath: Ruta del archivo a inicializar.

    Returns:
        None
    """
    _asegurar_directorio(filepath)
    if not os.path.exists(filepath):
        with open(filepath, mode="w", encoding="utf-8") as json_file:
            json.dump({}, json_file, ensure_ascii=False, indent=4)


def leer_valor(filepath: str, clave: str) -> Optional[str]:
    """Obtiene el valor guardado bajo una clave.

    Args:
        filepath: Ruta del archivo del almacén.
        clave: Nombre de la ranura.

    Returns:
        Optional[str]: Valor guardado, o None si no existe o no es texto.
    """
    valor = _leer_almacen(filepath).get(clave)
    return valor if isinstance(valor, str) else None


def escribir_valor(filepath: str, clave: str, valor: str) -> None:
    """Sobrescribe el valor de una clave conservando las demás.

    Args:
        filepath: Ruta del archivo del almacén.
        clave: Nombre de la ranura.
        valor: Texto a guardar.

    Returns:
        None
    """
    datos = _leer_almacen(filepath)
    datos[clave] = str(valor)
    contenido = json.dumps(datos, ensure_ascii=False, indent=4)
    _escritura_atomica(filepath, contenido)
    logger.debug("Clave '%s' escrita en %s (%d caracteres)", clave, filepath,
                 len(datos[clave]))
