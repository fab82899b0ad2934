from __future__ import annotations


class StorageError(Exception):
    """Base de los errores de la capa de persistencia de contadores."""


class StorageUnavailable(StorageError):
    """No se puede abrir o inicializar la base de datos. Fatal en arranque."""


class StorageOperationFailed(StorageError):
    """Fallo de lectura/escritura sobre un store ya abierto. No se reintenta."""
