"""
Readable names for clusters.

A cluster is named after the two factors whose centroid z-scores are
furthest from zero, e.g. "High Economy • Low Corruption".
"""

from typing import Dict, Iterable, Mapping, Optional, Sequence

DEFAULT_LABELS = {
    'economy_gdp_per_capita': 'Economy',
    'social_support': 'Social Support',
    'healthy_life_expectancy': 'Health',
    'freedom_to_make_life_choices': 'Freedom',
    'generosity': 'Generosity',
    'perceptions_of_corruption': 'Corruption'
}

DEFAULT_INVERTED = ('perceptions_of_corruption',)

DEFAULT_SEPARATOR = ' • '

DEFAULT_NAME = 'Cluster'

DESCRIPTION = 'K-means over normalized factors (z-score); name reflects strongest factors'


def describe_factor(feature: str,
                    z: float,
                    labels: Optional[Mapping[str, str]] = None,
                    inverted: Iterable[str] = ()) -> str:
    """
    Render one factor as "High <label>" or "Low <label>".

    For an inverted factor a z-score of exactly zero reads as "Low".

    Args:
        feature: Feature name
        z: Centroid z-score for the feature
        labels: Feature to display label mapping
        inverted: Features whose zero point reads as "Low"

    Returns:
        Factor phrase
    """
    label = (labels or {}).get(feature, feature)

    if feature in set(inverted):
        level = 'Low' if z <= 0 else 'High'
    else:
        level = 'High' if z >= 0 else 'Low'

    return f"{level} {label}"


def name_cluster(features: Sequence[str],
                 centroid: Mapping[str, float],
                 labels: Optional[Mapping[str, str]] = None,
                 inverted: Iterable[str] = DEFAULT_INVERTED,
                 separator: str = DEFAULT_SEPARATOR,
                 top: int = 2,
                 default_name: str = DEFAULT_NAME) -> str:
    """
    Name a cluster after its strongest factors.

    Factors are ranked by descending absolute z-score; ties keep the
    feature order.

    Args:
        features: Ordered feature list
        centroid: Feature to z-scored centroid value
        labels: Feature to display label mapping (defaults to DEFAULT_LABELS)
        inverted: Features with inverted sense
        separator: Text between the factor phrases
        top: Number of factors in the name
        default_name: Name used for an empty centroid

    Returns:
        Cluster name
    """
    if labels is None:
        labels = DEFAULT_LABELS

    ordered = [f for f in features if f in centroid]
    ordered += [f for f in centroid if f not in ordered]

    if not ordered:
        return default_name

    ranked = sorted(ordered, key=lambda f: -abs(float(centroid[f])))
    inverted = list(inverted)

    return separator.join(
        describe_factor(f, float(centroid[f]), labels, inverted)
        for f in ranked[:top]
    )


def describe_cluster(name: str, size: int) -> str:
    """Description attached to each cluster."""
    noun = 'member' if size == 1 else 'members'
    return f"{DESCRIPTION}. {size} {noun}, strongest factors: {name}"
