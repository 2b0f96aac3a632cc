"""Transportes de salida (sockets por categoría)."""
