"""
Influence Network Configuration
===============================
All paths, policy defaults, and the relationship vocabulary in one place.
Change values here; every script reads from this file.
"""

from dataclasses import dataclass
from pathlib import Path

# =============================================================
# PATHS
# =============================================================
DATA_CSV_PATH = './data/network_graph_relationships.csv'   # local path or http(s) URL
OUTPUT_DIR = Path('./results')

# Sub-directories (created automatically)
STATS_DIR = OUTPUT_DIR / 'stats'

# Graph files
GRAPHML_PATH          = OUTPUT_DIR / 'influence_network.graphml'
GRAPH_JSON_PATH       = OUTPUT_DIR / 'graph_data.json'
OPTIMIZED_JSON_PATH   = OUTPUT_DIR / 'graph_data_optimized.json'
EXPLORER_HTML_PATH    = OUTPUT_DIR / 'network_explorer.html'

# =============================================================
# SOURCE
# =============================================================
FETCH_TIMEOUT = 30          # Seconds before a remote CSV fetch gives up
CSV_ENCODING  = 'utf-8-sig' # Tolerates a leading BOM

# =============================================================
# TRANSFORM POLICY (defaults)
# =============================================================
# Options:
#   EDGE_TARGET_POLICY    'primary-only' → edges only towards names with their own row
#                         'any-nonempty' → any target, placeholder node created
#   ID_SCHEME             'raw-name'       → id is the name, case-sensitive
#                         'sanitized-slug' → 'Mary O'Neil' → 'mary-o-neil'
#   RELATIONSHIP_SCHEME   'vocabulary' → fixed prefixes below
#                         'freeform'   → "<label> with <target>", label kept verbatim
DELIMITER                     = ','
EDGE_TARGET_POLICY            = 'primary-only'
DERIVE_EDGES_FROM_VENTURES    = False
DERIVE_EDGES_FROM_CONNECTIONS = False
ID_SCHEME                     = 'raw-name'
RELATIONSHIP_SCHEME           = 'vocabulary'
MATCH_LAST_NAMES              = False

MAX_NODES = 50   # Graph optimizer cap (0 → keep everything)

EDGE_TARGET_POLICIES  = ('primary-only', 'any-nonempty')
ID_SCHEMES            = ('raw-name', 'sanitized-slug')
RELATIONSHIP_SCHEMES  = ('vocabulary', 'freeform')
DELIMITERS            = (',', '|')

# =============================================================
# CSV LAYOUT
# =============================================================
COLUMNS = ['Name', 'Influence', 'Ventures', 'Connections', 'Quotes', 'Image']
LIST_SEPARATOR  = ';'   # Influence, Ventures, Connections
QUOTE_SEPARATOR = '|'   # Quotes

# =============================================================
# RELATIONSHIP VOCABULARY
# =============================================================
# Checked in this order; the first prefix an item starts with wins.
RELATIONSHIP_TYPES = [
    'Friends with', 'Hired', 'Appointed', 'Worked for',
    'Donated to', 'Founded', 'Recommended', 'Contributed to',
]

RELATIONSHIP_CATEGORIES = {
    'Friends with':   'personal',
    'Hired':          'professional',
    'Appointed':      'political',
    'Worked for':     'professional',
    'Donated to':     'financial',
    'Founded':        'professional',
    'Recommended':    'political',
    'Contributed to': 'financial',
}

# Keyword fallback for free-form labels (lowercase substring → category)
CATEGORY_KEYWORDS = [
    ('friend',    'personal'),
    ('donat',     'financial'),
    ('contribut', 'financial'),
    ('appoint',   'political'),
    ('recommend', 'political'),
]

CONNECTION_LABEL = 'Connected to'
VENTURE_LABEL    = 'Associated with'


# =============================================================
# OPTIONS
# =============================================================

@dataclass(frozen=True)
class TransformOptions:
    edge_target_policy: str = EDGE_TARGET_POLICY
    derive_edges_from_ventures: bool = DERIVE_EDGES_FROM_VENTURES
    derive_edges_from_connections: bool = DERIVE_EDGES_FROM_CONNECTIONS
    id_scheme: str = ID_SCHEME
    delimiter: str = DELIMITER
    relationship_scheme: str = RELATIONSHIP_SCHEME
    match_last_names: bool = MATCH_LAST_NAMES


# =============================================================
# HELPERS
# =============================================================

def resolve_options(**overrides):
    """Build TransformOptions from the defaults above plus keyword overrides."""
    options = TransformOptions(**overrides)
    checks = [
        ('edge_target_policy', options.edge_target_policy, EDGE_TARGET_POLICIES),
        ('id_scheme', options.id_scheme, ID_SCHEMES),
        ('relationship_scheme', options.relationship_scheme, RELATIONSHIP_SCHEMES),
        ('delimiter', options.delimiter, DELIMITERS),
    ]
    for field_name, value, allowed in checks:
        if value not in allowed:
            raise ValueError(f"{field_name}={value!r} is not one of {allowed}")
    return options


def ensure_dirs():
    """Create all output directories."""
    for d in [OUTPUT_DIR, STATS_DIR]:
        d.mkdir(parents=True, exist_ok=True)


def relationship_category(label):
    """Map a relationship label to personal / financial / political / professional."""
    if label in RELATIONSHIP_CATEGORIES:
        return RELATIONSHIP_CATEGORIES[label]
    if label == CONNECTION_LABEL:
        return 'connection'
    if label == VENTURE_LABEL:
        return 'business'
    lowered = label.lower()
    for keyword, category in CATEGORY_KEYWORDS:
        if keyword in lowered:
            return category
    return 'professional'
