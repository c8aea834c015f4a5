"""Backends that turn an InstrumentModel into check scripts."""

from .stata_generator import RenderOptions, generate_do_file, save_do_file

__all__ = ["RenderOptions", "generate_do_file", "save_do_file"]
