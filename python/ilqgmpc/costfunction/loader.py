"""Load cost terms from YAML configuration files.

A file holds named sections, each describing one term or a list of terms:

    intermediateCost:
      type: quadratic
      weight: 1.0
      Q: [10.0, 10.0]      # diagonal entries or full matrix
      R: [0.1]
      x_des: [0.0, 0.0]
      u_des: [0.0]

    finalCost:
      type: quadratic
      Q: [[1000.0, 0.0], [0.0, 1000.0]]
      R: [0.0]
"""

from typing import Any, Dict, List, Union

from ..exceptions import ConfigurationError
from ..utils.config import load_yaml_section
from .cost_function import CostFunction
from .terms import Term, TermLinear, TermMixed, TermQuadratic

_TERM_KEYS = {
    "quadratic": {"type", "name", "weight", "Q", "R", "x_des", "u_des"},
    "linear": {"type", "name", "weight", "a", "b"},
    "mixed": {"type", "name", "weight", "P"},
}


def term_from_config(config: Dict[str, Any], section: str = "") -> Term:
    """
    Build one term from a configuration mapping.

    Raises:
        ConfigurationError: Unknown type, unknown or missing keys
    """
    term_type = str(config.get("type", "quadratic")).lower()
    if term_type not in _TERM_KEYS:
        raise ConfigurationError(f"section '{section}': unknown term type '{term_type}'")

    unknown = set(config) - _TERM_KEYS[term_type]
    if unknown:
        raise ConfigurationError(
            f"section '{section}': unknown keys {sorted(unknown)} for {term_type} term"
        )

    weight = float(config.get("weight", 1.0))
    name = str(config.get("name", section))

    try:
        if term_type == "quadratic":
            return TermQuadratic(
                Q=config["Q"],
                R=config["R"],
                x_ref=config.get("x_des"),
                u_ref=config.get("u_des"),
                weight=weight,
                name=name,
            )
        if term_type == "linear":
            return TermLinear(config["a"], config["b"], weight=weight, name=name)
        return TermMixed(config["P"], weight=weight, name=name)
    except KeyError as exc:
        raise ConfigurationError(f"section '{section}': missing key {exc}") from exc


def load_terms(path: str, section: str) -> List[Term]:
    """Load all terms of one section (a mapping or a list of mappings)."""
    config = load_yaml_section(path)
    if section not in config:
        raise ConfigurationError(f"{path} has no section '{section}'")

    entries: Union[Dict[str, Any], List[Dict[str, Any]]] = config[section]
    if isinstance(entries, dict):
        entries = [entries]
    if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
        raise ConfigurationError(f"section '{section}' must be a mapping or a list of mappings")
    return [term_from_config(entry, section) for entry in entries]


def load_term(path: str, section: str) -> Term:
    """Load a section that describes exactly one term."""
    terms = load_terms(path, section)
    if len(terms) != 1:
        raise ConfigurationError(f"section '{section}' holds {len(terms)} terms, expected 1")
    return terms[0]


def load_cost_function(
    path: str,
    intermediate: str = "intermediateCost",
    final: str = "finalCost",
) -> CostFunction:
    """
    Build a CostFunction from an intermediate and a final section.

    Example:
        >>> cost = load_cost_function("examples/mpc_cost.yaml")
    """
    cost = CostFunction()
    for term in load_terms(path, intermediate):
        cost.add_intermediate_term(term)
    for term in load_terms(path, final):
        cost.add_final_term(term)
    return cost
