"""Change Pattern Matching Engine.

This package turns a declarative pattern and a stream of tree change
records into a single "did it happen" decision.

Components:
- Shape: Tag name plus attribute constraints
- Pattern: Anchor, optional added/removed shape, watched attribute and text
- ChangeMatcher: Abstract base class for matchers
- MutationMatcher: First-match-wins matching of change batches

Usage:
    from anagnorisis.patterns import MutationMatcher, Pattern, Shape

    matcher = MutationMatcher(Pattern(anchor=root, added_shape=Shape("div")))
    node = matcher.match(batch)
"""

from .matcher import ChangeMatcher
from .mutation_matcher import MutationMatcher
from .pattern import Pattern, Shape
from .search import attributes_satisfied, find_matching_node, iter_subtree, shape_matches

__all__ = [
    "ChangeMatcher",
    "MutationMatcher",
    "Pattern",
    "Shape",
    "attributes_satisfied",
    "find_matching_node",
    "iter_subtree",
    "shape_matches",
]
