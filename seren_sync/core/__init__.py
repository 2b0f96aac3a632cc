"""Core del pipeline: dominio, clasificación y normalización."""
