"""seren-sync: reenvío categorizado de telemetría a sockets locales.

Clasifica cada valor por path, aplica throttling por path y categoría
y lo entrega por una conexión persistente (con reconexión) por categoría.
"""

__version__ = "0.4.0"
