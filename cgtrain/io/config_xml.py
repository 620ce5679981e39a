"""XML import and export for conjugate gradient configurations.

Only the configuration is persisted: direction method, thresholds,
stopping criteria, history reservation flags, and display/save periods.
Training state is never written. See schema.py for the element layout.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Any, Dict, Mapping

from cgtrain.optimize.conjugate_gradient import ConjugateGradientConfig
from cgtrain.optimize.core import ConfigurationError

from .schema import FIELDS, ROOT_TAG, format_value, parse_value


def _target(config: ConjugateGradientConfig, section: str) -> Any:
    return getattr(config, section) if section else config


def config_to_dict(config: ConjugateGradientConfig) -> Dict[str, Any]:
    """
    Flatten a configuration into a tag -> value mapping.

    Parameters
    ----------
    config : ConjugateGradientConfig
        Configuration to convert.

    Returns
    -------
    dict
        One entry per schema tag, in schema order.
    """
    result: Dict[str, Any] = {}
    for tag, spec in FIELDS.items():
        value = getattr(_target(config, spec.section), spec.name)
        if spec.kind == "method":
            value = value.value
        result[tag] = value
    return result


def config_from_dict(obj: Mapping[str, Any]) -> ConjugateGradientConfig:
    """
    Build a configuration from a tag -> value mapping.

    Missing tags keep their default and unknown tags are ignored.

    Raises
    ------
    ConfigurationError
        If a value has the wrong type or the resulting configuration is
        invalid.
    """
    config = ConjugateGradientConfig()
    for tag, raw in obj.items():
        spec = FIELDS.get(tag)
        if spec is None:
            continue
        try:
            value = parse_value(spec.kind, raw) if isinstance(raw, str) else raw
        except ValueError as e:
            raise ConfigurationError(f"Invalid value for <{tag}>: {e}") from e
        setattr(_target(config, spec.section), spec.name, value)
    config.validate()
    return config


def config_to_xml(config: ConjugateGradientConfig) -> str:
    """Serialize ``config`` to an indented XML document string."""
    root = ET.Element(ROOT_TAG)
    for tag, spec in FIELDS.items():
        element = ET.SubElement(root, tag)
        element.text = format_value(spec.kind, getattr(_target(config, spec.section), spec.name))
    ET.indent(root)
    return ET.tostring(root, encoding="unicode")


def config_from_xml(document: str) -> ConjugateGradientConfig:
    """
    Parse an XML document produced by :func:`config_to_xml`.

    Raises
    ------
    ConfigurationError
        If the document is not well-formed, has the wrong root element, or
        holds invalid values.
    """
    try:
        root = ET.fromstring(document)
    except ET.ParseError as e:
        raise ConfigurationError(f"Invalid configuration XML: {e}") from e
    if root.tag != ROOT_TAG:
        raise ConfigurationError(f"Expected root element <{ROOT_TAG}>, got <{root.tag}>.")
    return config_from_dict({child.tag: child.text or "" for child in root})


def dump_config_xml(config: ConjugateGradientConfig, path: str) -> None:
    """Write ``config`` to an XML file."""
    with open(path, "w", encoding="utf-8") as f:
        f.write(config_to_xml(config))
        f.write("\n")


def load_config_xml(path: str) -> ConjugateGradientConfig:
    """
    Load a configuration from an XML file.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ConfigurationError
        If the file content is invalid.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            document = f.read()
    except FileNotFoundError:
        raise FileNotFoundError(f"Configuration file not found: {path}")
    return config_from_xml(document)


__all__ = [
    "config_from_dict",
    "config_from_xml",
    "config_to_dict",
    "config_to_xml",
    "dump_config_xml",
    "load_config_xml",
]
