"""Namepath helpers, the scope stack and the name resolver."""

from .names import (
    TreeNode,
    apply_namespace,
    derive_longname,
    has_path,
    is_module_exports,
    longnames_to_tree,
    normalize_path,
    split_longname,
    split_memberof,
)
from .resolver import NameResolver, derive_for
from .scope import ScopeTracker

__all__ = [
    "NameResolver",
    "ScopeTracker",
    "TreeNode",
    "apply_namespace",
    "derive_for",
    "derive_longname",
    "has_path",
    "is_module_exports",
    "longnames_to_tree",
    "normalize_path",
    "split_longname",
    "split_memberof",
]
