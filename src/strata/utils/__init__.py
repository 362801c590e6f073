"""Utility functions for strata"""

from strata.utils.fingerprint import canonical_json, fingerprint_tree
from strata.utils.json_utils import ConfigJSONEncoder, dump_config, dumps_config

__all__ = [
    "ConfigJSONEncoder",
    "dumps_config",
    "dump_config",
    "canonical_json",
    "fingerprint_tree",
]
