"""Static vocabularies used by the name matcher.

Loaded once at import time and exposed as read-only mappings so callers
cannot mutate them between matches.
"""

from __future__ import annotations

from types import MappingProxyType

# ---------------------------------------------------------------------------
# Transliteration variants: key -> known script variants and romanizations
# ---------------------------------------------------------------------------

TRANSLITERATION_VARIANTS: MappingProxyType[str, tuple[str, ...]] = MappingProxyType({
    # Chinese
    "huawei": ("华为", "hua wei", "hw"),
    "zte": ("中兴", "zhong xing", "zhongxing"),
    "hikvision": ("海康威视", "haikang weishi", "hkws"),
    "dji": ("大疆", "da jiang", "dajiang"),
    "smic": ("中芯国际", "zhongxin guoji"),
    "semiconductor": ("半导体", "bandaoti"),
    # Russian
    "rostec": ("ростех", "rostech", "rosteс"),
    "kalashnikov": ("калашников", "kalashnykov"),
    "sukhoi": ("сухой", "soukhoï", "sukhoy"),
})

# ---------------------------------------------------------------------------
# Descriptive tokens dropped when deriving a base name
# ---------------------------------------------------------------------------

DESCRIPTIVE_SUFFIXES: frozenset[str] = frozenset({
    "device", "software", "hardware", "services", "solutions",
    "systems", "technology", "technologies", "international",
    # Regions / countries
    "america", "europe", "asia", "usa", "china", "japan",
    "germany", "france", "uk", "russia",
})
