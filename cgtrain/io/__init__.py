"""Configuration persistence and parameter checkpoints."""

from .checkpoint import NumpyCheckpointer, load_checkpoint
from .config_xml import (
    config_from_dict,
    config_from_xml,
    config_to_dict,
    config_to_xml,
    dump_config_xml,
    load_config_xml,
)
from .schema import FIELDS, ROOT_TAG

__all__ = [
    "FIELDS",
    "NumpyCheckpointer",
    "ROOT_TAG",
    "config_from_dict",
    "config_from_xml",
    "config_to_dict",
    "config_to_xml",
    "dump_config_xml",
    "load_checkpoint",
    "load_config_xml",
]
