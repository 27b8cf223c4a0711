"""Node and edge models for the influence network.

Two shapes of the same data are modelled here:
- **Graph attributes**: what `network_utils` stores on a networkx node or edge
  (`connection_count`, `node_type`, ...). Every built or loaded graph must satisfy
  `NetworkModel`.
- **Exported JSON**: what `graph_to_dict` writes and `graph_from_dict` reads back
  (`connectionCount`, `nodeType`, `links` or `edges`, `type` or `relationship`).
  `ExportedNetwork` accepts that shape, fills the optional fields and hands back
  the graph attributes.
"""

from typing import List, Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field, model_validator


# =============================================================================
# NODE
# =============================================================================

class NodeModel(BaseModel):
    """A person (primary or placeholder) or a venture node."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1, description="Identity key (raw name or slug)")
    name: str = Field(..., min_length=1, description="Display name")
    ventures: List[str] = Field(..., description="Ventures in first-seen order")
    quotes: List[str] = Field(..., description="Quotes in first-seen order")
    connections: List[str] = Field(default_factory=list, description="Raw Connections entries")
    connection_count: int = Field(..., ge=0, alias='connectionCount')
    image: str = Field('', description="Image path or URL, may be empty")
    node_type: str = Field('person', alias='nodeType', description="person or venture")
    placeholder: bool = Field(False, description="Referenced as a target but never given a row")

    def graph_attrs(self) -> Dict[str, Any]:
        return self.model_dump(exclude={'id'})


class ExportedNode(NodeModel):
    """A node read back from exported JSON. Only `id` is mandatory."""

    @model_validator(mode='before')
    @classmethod
    def _fill_optional(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = {k: v for k, v in data.items() if v is not None}
        if not data.get('name') and data.get('id'):
            data['name'] = data['id']
        for key in ('ventures', 'quotes', 'connections'):
            data.setdefault(key, [])
        if 'connectionCount' not in data and 'connection_count' not in data:
            connections = data['connections']
            data['connectionCount'] = len(connections) if isinstance(connections, list) else 0
        return data


# =============================================================================
# EDGE
# =============================================================================

class EdgeModel(BaseModel):
    """A directed, labelled relationship. `(source, target, type)` identifies it."""

    source: str = Field(..., min_length=1)
    target: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1, description="Relationship label, e.g. 'Hired'")
    category: Optional[str] = Field(None, description="personal / professional / political / financial / ...")
    origin: str = Field('influence', description="influence, connection or venture")
    description: str = Field('', description="Original Influence item")
    amount: Optional[str] = Field(None, description="Money amount found in the item, e.g. '$5M'")

    @model_validator(mode='before')
    @classmethod
    def _relationship_as_type(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get('type') and data.get('relationship'):
            data = {**data, 'type': data['relationship']}
        return data

    def graph_attrs(self) -> Dict[str, Any]:
        return self.model_dump(exclude={'source', 'target'})


# =============================================================================
# NETWORK
# =============================================================================

class NetworkModel(BaseModel):
    """Every node and edge of a graph, as graph attributes."""

    nodes: List[NodeModel] = Field(default_factory=list)
    edges: List[EdgeModel] = Field(default_factory=list)


class ExportedNetwork(NetworkModel):
    """Exported JSON: `{nodes: [...], edges|links: [...]}`."""

    nodes: List[ExportedNode] = Field(default_factory=list)

    @model_validator(mode='before')
    @classmethod
    def _links_as_edges(cls, data: Any) -> Any:
        if isinstance(data, dict) and 'edges' not in data and 'links' in data:
            data = {**data, 'edges': data['links']}
        return data
