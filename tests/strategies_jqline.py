# jqline:header:start
#
#   project      : jqline
#   file         : strategies_jqline.py
#   file_relpath : tests/strategies_jqline.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

# pyright: strict

"""Hypothesis strategies for jqline values and YAML documents.

The generated trees stay small: property tests care about shapes (nesting,
key types, scalars) rather than size.
"""

from __future__ import annotations

from typing import Any

from hypothesis import strategies as st

# YAML scalars that may appear as mapping keys after safe loading.
s_yaml_key: st.SearchStrategy[Any] = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(min_value=-(10**6), max_value=10**6),
    st.floats(allow_nan=False, allow_infinity=False, width=32),
    st.text(min_size=1, max_size=8),
)

s_scalar: st.SearchStrategy[Any] = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(min_value=-(10**9), max_value=10**9),
    st.text(max_size=12),
)


def s_yaml_tree(max_leaves: int = 12) -> st.SearchStrategy[Any]:
    """Return nested lists and mappings whose keys are arbitrary YAML scalars.

    Args:
        max_leaves (int): Upper bound on the number of scalar leaves.

    Returns:
        st.SearchStrategy[Any]: Strategy producing YAML-shaped trees.
    """
    return st.recursive(
        s_scalar,
        lambda children: st.one_of(
            st.lists(children, max_size=4),
            st.dictionaries(s_yaml_key, children, max_size=4),
        ),
        max_leaves=max_leaves,
    )


def s_value(max_leaves: int = 12) -> st.SearchStrategy[Any]:
    """Return JSON-shaped values (string keys only).

    Args:
        max_leaves (int): Upper bound on the number of scalar leaves.

    Returns:
        st.SearchStrategy[Any]: Strategy producing values of the jqline value model.
    """
    return st.recursive(
        s_scalar,
        lambda children: st.one_of(
            st.lists(children, max_size=4),
            st.dictionaries(st.text(max_size=6), children, max_size=4),
        ),
        max_leaves=max_leaves,
    )
