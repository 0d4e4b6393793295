"""Configuration helpers for pf_common."""

from .env import parse_bool_env, parse_path_list_env, prefixed_env

__all__ = [
    "parse_bool_env",
    "parse_path_list_env",
    "prefixed_env",
]
